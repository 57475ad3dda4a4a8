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
"""Load order handling for Gamebryo games that keep the load order in
loadorder.txt and the active plugins in plugins.txt, both living in the
profile directory.

Notes:
- either file may be edited behind our back. On each read we ask freshness
which one to trust, then rebuild the load order either from loadorder.txt or
from the modification times of the plugin files.
- the primary plugins of the game always load first, in the order the game
defines, and are always active unless missing.
- MISSING plugins are owned by the host - we never change their state.
- nothing is written before the first read, so that we never overwrite the
files with a list we did not get from them in the first place.
"""
from __future__ import annotations

import time

from . import bass
from ._lo_files import LoFile, PluginListWriter
from .bolt import FName, GPath, Path, deprint, system_encoding
from .exception import FileUnreadableError, MalformedOrderFileError, \
    UninitializedReadError
from .freshness import LoStrategy, decide
from .plugin_types import Organizer, PluginList, PluginState

# Typing
LoList = list[FName]

def _lo_encoding():
    return bass.settings['LoadOrder']['loadorder_encoding']

class GamebryoGamePlugins:
    """Reads and writes the load order and active plugins of the host's
    plugin list. Create one per profile - the time of the last sync and the
    fingerprints of the files we wrote are kept in the instance, so a new
    profile needs a fresh instance."""

    def __init__(self, organizer: Organizer):
        self._organizer = organizer
        # time of the last read or write, None until we first read
        self._last_read: float | None = None
        self._writer = PluginListWriter(organizer)
        if bass.settings['LoadOrder']['log_paths']:
            self._print_lo_paths()

    def _print_lo_paths(self):
        """Prints the paths that will be used and what they'll be used for.
        Useful for debugging."""
        acti, lo = self.get_lo_files()
        deprint('Using the following load order files:')
        deprint(f' - Active plugins: {acti}')
        deprint(f' - Load order: {lo}')

    # Paths -------------------------------------------------------------------
    @property
    def plugins_txt_path(self) -> Path:
        return GPath(self._organizer.profile().absolute_path()).join(
            bass.PLUGINS_TXT)

    @property
    def loadorder_txt_path(self) -> Path:
        return GPath(self._organizer.profile().absolute_path()).join(
            bass.LOADORDER_TXT)

    def get_lo_files(self) -> list[Path]:
        """Returns the paths of the files used for storing the active plugins
        and the load order."""
        return [self.plugins_txt_path, self.loadorder_txt_path]

    # API ---------------------------------------------------------------------
    def read_plugin_lists(self, plugin_list: PluginList):
        """Set the load order and the plugin states of plugin_list from
        loadorder.txt and plugins.txt."""
        if (lord := self._read_explicit_order()) is not None:
            plugin_list.set_load_order(lord)
            self._assign_states(plugin_list, self._primary_plugins(),
                                plugin_list.plugin_names())
        else:
            # plugins.txt alone changed or loadorder.txt is unusable, we must
            # rebuild the load order from the plugin files
            lord = self._read_plugin_list(plugin_list)
            plugin_list.set_load_order(lord)
        self._last_read = time.time()

    def write_plugin_lists(self, plugin_list: PluginList):
        """Write plugins.txt and loadorder.txt from plugin_list. Does nothing
        if the lists were never read."""
        try:
            self._check_initialized()
        except UninitializedReadError as e:
            deprint(f'{e}')
            return
        self._writer.write(plugin_list, self.plugins_txt_path,
            system_encoding(),
            lambda p: plugin_list.state(p) is PluginState.ACTIVE)
        self._writer.write(plugin_list, self.loadorder_txt_path,
            _lo_encoding(), lambda p: True)
        self._last_read = time.time()

    def get_load_order(self) -> LoList:
        """Return the load order as read would set it, without setting it on
        the host's plugin list and without counting as a sync. Note that if
        the order has to be derived from the plugin files, the plugin states
        are still updated from plugins.txt."""
        if (lord := self._read_explicit_order()) is None:
            lord = self._read_plugin_list(self._organizer.plugin_list())
        return lord

    def light_plugins_are_supported(self) -> bool:
        """Gamebryo games have no light plugins - newer engines override."""
        return False

    @property
    def last_read(self) -> float | None:
        return self._last_read

    # Implementation ----------------------------------------------------------
    def _check_initialized(self):
        if self._last_read is None:
            raise UninitializedReadError()

    def _strategy(self) -> LoStrategy:
        strategy = decide(self.loadorder_txt_path, self.plugins_txt_path,
                          self._last_read)
        deprint(f'Reading load order using {strategy!r}')
        return strategy

    def _primary_plugins(self) -> LoList:
        return [*map(FName, self._organizer.managed_game().primary_plugins())]

    def _read_explicit_order(self) -> LoList | None:
        """Return the load order from loadorder.txt, or None if the plugin
        files must be used instead."""
        if self._strategy() is not LoStrategy.USE_EXPLICIT_ORDER:
            return None
        return self._read_load_order_list(self.loadorder_txt_path)

    def _read_load_order_list(self, lo_path: Path) -> LoList | None:
        """Return the primary plugins followed by the plugins listed in
        loadorder.txt, or None if the file can't be read."""
        try:
            listed = LoFile(lo_path, _lo_encoding).parse_load_order()
        except (FileUnreadableError, MalformedOrderFileError) as e:
            deprint(f'{e} - falling back to plugin file times')
            return None
        lord = self._primary_plugins()
        seen = set(lord)
        for plugin_name in listed:
            if plugin_name not in seen:
                seen.add(plugin_name)
                lord.append(plugin_name)
        return lord

    def _read_plugin_list(self, plugin_list: PluginList) -> LoList:
        """Sort the host's plugins by the mtimes of their files, after the
        primary plugins, and set their states from plugins.txt."""
        primary = self._primary_plugins()
        primary_set = set(primary)
        all_names = [*map(FName, plugin_list.plugin_names())]
        present = set(all_names)
        # Do not sort the primary plugins - their order is defined by the game
        lord = [p for p in primary if p in present]
        rest = [p for p in all_names if p not in primary_set]
        rest.sort(key=lambda p: self._plugin_mtime(plugin_list, p))
        self._assign_states(plugin_list, primary, rest)
        return [*lord, *rest]

    def _plugin_mtime(self, plugin_list: PluginList, plugin_name: FName):
        origin = plugin_list.origin(plugin_name)
        if (mod_dir := self._organizer.mod_list().get_mod(origin)) is None:
            mod_dir = self._organizer.managed_game().data_directory()
        plugin_path = GPath(mod_dir).join(plugin_name)
        try:
            return plugin_path.mtime
        except OSError:
            deprint(f'Could not get the modification time of {plugin_path}')
            return 0.0

    def _read_active_plugins(self) -> set[FName] | None:
        """Return the plugins listed in plugins.txt, None if it is missing or
        empty."""
        try:
            return set(LoFile(self.plugins_txt_path,
                              system_encoding).parse_active())
        except FileUnreadableError as e:
            deprint(f'{e} - deactivating all plugins')
            return None

    def _assign_states(self, plugin_list: PluginList, primary: LoList,
                       plugin_names):
        """Activate the primary plugins and set the state of the rest of
        plugin_names according to plugins.txt. MISSING plugins are left
        alone."""
        primary_set = set(primary)
        for plugin_name in primary:
            if plugin_list.state(plugin_name) is not PluginState.MISSING:
                plugin_list.set_state(plugin_name, PluginState.ACTIVE)
        active = self._read_active_plugins() or set()
        for plugin_name in map(FName, plugin_names):
            if plugin_name in primary_set or plugin_list.state(
                    plugin_name) is PluginState.MISSING:
                continue
            plugin_list.set_state(plugin_name, PluginState.ACTIVE
                if plugin_name in active else PluginState.INACTIVE)
