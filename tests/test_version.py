"""Test version import works correctly.

This test ensures that the package version is importable and non-empty, and
that it matches what the packaging metadata reads from ``__about__``.
"""

from animelink import __version__
from animelink.__about__ import __version__ as about_version


def test_version() -> None:
    """Test that version is a non-empty string exported by the package."""
    assert isinstance(__version__, str)
    assert len(__version__) > 0
    assert __version__ == about_version
