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
"""Houses the plugin state enum and the interfaces of the host objects the
load order core talks to. The host owns the plugin records - we only read them
and set their state and load order through PluginList. All the API classes
below are abstract, the host (or a test) provides the implementations."""
from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from .bolt import FName, Path

class PluginState(Enum):
    """The state of a plugin as tracked by the host. MISSING is never set by
    us - it marks a plugin that is referenced but not present on disk and must
    not be overwritten with ACTIVE or INACTIVE."""
    MISSING = 'missing'
    INACTIVE = 'inactive'
    ACTIVE = 'active'

    def __repr__(self):
        return self.name

class PluginList:
    """The host's plugin state container."""
    def plugin_names(self) -> list[FName]:
        """All the plugins the host knows about, in no particular order."""
        raise NotImplementedError

    def state(self, plugin_name: str) -> PluginState:
        """MISSING for plugins the host does not know about."""
        raise NotImplementedError

    def set_state(self, plugin_name: str, state: PluginState):
        """Ignored for plugins the host does not know about."""
        raise NotImplementedError

    def priority(self, plugin_name: str) -> int:
        """Load order index of the plugin - lower loads earlier."""
        raise NotImplementedError

    def origin(self, plugin_name: str) -> str:
        """Identifier of the mod that contains the plugin file."""
        raise NotImplementedError

    def set_load_order(self, plugin_names: Iterable[str]):
        raise NotImplementedError

class GameInfo:
    """The managed game."""
    def primary_plugins(self) -> list[FName]:
        """Plugins that are part of the base game, in their fixed order."""
        raise NotImplementedError

    def data_directory(self) -> Path:
        raise NotImplementedError

class ModList:
    def get_mod(self, origin: str) -> Path | None:
        """Return the directory of the mod with the specified origin, or None
        if the plugin comes straight from the game's data directory."""
        raise NotImplementedError

class Profile:
    def absolute_path(self) -> Path:
        """The directory holding plugins.txt and loadorder.txt."""
        raise NotImplementedError

class ErrorReporter:
    def report_error(self, message: str):
        """Show a non blocking error to the user."""
        raise NotImplementedError

class Organizer(ErrorReporter):
    """Bundles the host objects for one game profile and reports errors on
    their behalf."""
    def profile(self) -> Profile:
        raise NotImplementedError

    def managed_game(self) -> GameInfo:
        raise NotImplementedError

    def mod_list(self) -> ModList:
        raise NotImplementedError

    def plugin_list(self) -> PluginList:
        raise NotImplementedError
