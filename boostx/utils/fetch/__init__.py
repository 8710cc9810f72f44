#
# Copyright 2024 boostx Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

"""Boost source archive download and unpacking."""

from .archive import bootstrap_boost, extract_boost_archive, fetch_boost_archive, prepare_boost_sources

__all__ = ["bootstrap_boost", "extract_boost_archive", "fetch_boost_archive", "prepare_boost_sources"]
