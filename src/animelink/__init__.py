# SPDX-FileCopyrightText: 2025-present DouglasMacKrell <d.mackrell@gmail.com>
#
# SPDX-License-Identifier: MIT

"""AnimeLink - asynchronous anime source aggregation and link resolution."""

from animelink.__about__ import __version__

__all__ = ["__version__"]
