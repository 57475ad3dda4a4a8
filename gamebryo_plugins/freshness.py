# -*- coding: utf-8 -*-
#
# GPL License and Copyright Notice ============================================
#  This file is part of Wrye Bash.
#
#  Wrye Bash is free software: you can redistribute it and/or
#  modify it under the terms of the GNU General Public License
#  as published by the Free Software Foundation, either version 3
#  of the License, or (at your option) any later version.
#
#  Wrye Bash is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU General Public License for more details.
#
#  You should have received a copy of the GNU General Public License
#  along with Wrye Bash.  If not, see <https://www.gnu.org/licenses/>.
#
#  Wrye Bash copyright (C) 2005-2009 Wrye, 2010-2024 Wrye Bash Team
#  https://github.com/wrye-bash
#
# =============================================================================
"""Decide which of loadorder.txt and plugins.txt to trust when reading the
load order, based on their modification times and the time we last synced
with them."""
from __future__ import annotations

from enum import Enum

from .bolt import GPath

class LoStrategy(Enum):
    """How to build the load order on a read."""
    # read loadorder.txt, then the active state from plugins.txt
    USE_EXPLICIT_ORDER = 'explicit'
    # sort the plugins by the mtimes of their files, then read plugins.txt
    DERIVE_FROM_MOD_TIMES = 'derived'

    def __repr__(self):
        return self.name

def _modified_after(path, last_sync: float) -> bool:
    try:
        return GPath(path).mtime > last_sync
    except OSError: # missing files are never newer than anything
        return False

def decide(order_path, active_path, last_sync: float | None) -> LoStrategy:
    """Return the strategy to read the load order with. last_sync is the
    timestamp of the last read or write of the files, None if there was none
    yet.

    loadorder.txt is the richer source, so it is used unless plugins.txt
    alone changed since last_sync - then some tool rewrote the active plugins
    without updating loadorder.txt and we must rebuild the order from the
    plugin files. Note that a stale loadorder.txt next to an unchanged
    plugins.txt is handled the same as nothing changing at all."""
    if last_sync is None: # no read yet, everything is new
        return LoStrategy.USE_EXPLICIT_ORDER
    order_path = GPath(order_path)
    order_is_new = not order_path.exists() or _modified_after(
        order_path, last_sync)
    active_is_new = _modified_after(active_path, last_sync)
    if order_is_new or not active_is_new:
        return LoStrategy.USE_EXPLICIT_ORDER
    return LoStrategy.DERIVE_FROM_MOD_TIMES
