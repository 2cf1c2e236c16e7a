"""Configure pytest."""

import os
import sys
from pathlib import Path

import pytest

# Get the project root directory
root_dir = Path(__file__).parent

# Add src directory to Python path
src_path = str(root_dir / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

# Plain console output keeps CLI assertions free of ANSI codes
os.environ.setdefault("ANIMELINK_NO_RICH", "1")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config file at an empty temp dir and clear ANIMELINK_* overrides."""
    from animelink.utils import config

    config_file = tmp_path / "animelink" / "config.toml"
    monkeypatch.setattr(config, "CONFIG_FILE", config_file)
    for name in list(os.environ):
        if name.startswith("ANIMELINK_") and name != "ANIMELINK_NO_RICH":
            monkeypatch.delenv(name)
    return config_file
