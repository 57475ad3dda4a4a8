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
"""Fake host objects for testing the load order core. They keep everything in
memory, apart from the plugin files, whose mtimes the tests control via
os.utime."""
import os

from ..bolt import FName, GPath
from ..plugin_types import ErrorReporter, GameInfo, ModList, Organizer, \
    PluginList, PluginState, Profile

class FakePluginList(PluginList):
    """Plugins with their state and origin, ordered by insertion until
    set_load_order is called."""
    def __init__(self, plugins=(), states=None, origins=None):
        # keyed by FName, so lookups must go through FName too
        self._states = {}
        self._origins = {}
        self._order = []
        for p in plugins:
            self.add(p, (states or {}).get(p, PluginState.INACTIVE),
                     (origins or {}).get(p, ''))
        self.set_lo_calls = []

    def add(self, plugin_name, state=PluginState.INACTIVE, origin=''):
        plugin_name = FName(plugin_name)
        self._states[plugin_name] = state
        self._origins[plugin_name] = origin
        self._order.append(plugin_name)

    def plugin_names(self):
        return list(self._order)

    def state(self, plugin_name):
        return self._states.get(FName(plugin_name), PluginState.MISSING)

    def set_state(self, plugin_name, state):
        if (plugin_name := FName(plugin_name)) in self._states:
            self._states[plugin_name] = state

    def priority(self, plugin_name):
        return self._order.index(FName(plugin_name))

    def origin(self, plugin_name):
        return self._origins[FName(plugin_name)]

    def set_load_order(self, plugin_names):
        # unknown plugins are ignored, plugins not mentioned go last
        stored = {p: p for p in self._order} # keep the case we were given
        known = [stored[p] for p in map(FName, plugin_names) if p in stored]
        known_set = set(known)
        self._order = [*known, *(p for p in self._order if
                                 p not in known_set)]
        self.set_lo_calls.append(list(plugin_names))

    def states(self):
        """Plain str keys, in the case the plugins were added with."""
        return {str(p): self._states[p] for p in self._order}

    def active(self):
        return [p for p in self._order if
                self._states[p] is PluginState.ACTIVE]

class ErrorCollector(ErrorReporter):
    def __init__(self):
        self.errors = []

    def report_error(self, message):
        self.errors.append(message)

class FakeGame(GameInfo):
    def __init__(self, data_dir, primary=()):
        self._data_dir = GPath(data_dir)
        self._primary = [*map(FName, primary)]

    def primary_plugins(self):
        return list(self._primary)

    def data_directory(self):
        return self._data_dir

class FakeModList(ModList):
    def __init__(self, mod_dirs=None):
        self._mod_dirs = mod_dirs or {}

    def get_mod(self, origin):
        return self._mod_dirs.get(origin)

class FakeProfile(Profile):
    def __init__(self, profile_dir):
        self._dir = GPath(profile_dir)

    def absolute_path(self):
        return self._dir

class FakeOrganizer(Organizer):
    def __init__(self, profile_dir, game, plugin_list, mod_list=None):
        self._profile = FakeProfile(profile_dir)
        self._game = game
        self._plugin_list = plugin_list
        self._mod_list = mod_list or FakeModList()
        self.errors = []

    def profile(self):
        return self._profile

    def managed_game(self):
        return self._game

    def mod_list(self):
        return self._mod_list

    def plugin_list(self):
        return self._plugin_list

    def report_error(self, message):
        self.errors.append(message)

def touch_plugin(directory, plugin_name, mtime):
    """Create an empty plugin file with the specified mtime."""
    plugin_path = os.path.join(directory, plugin_name)
    os.makedirs(directory, exist_ok=True)
    with open(plugin_path, 'wb'):
        pass
    os.utime(plugin_path, (mtime, mtime))
    return plugin_path

def write_lo_file(path, lines, *, encoding='utf-8', mtime=None,
                  header='# written by a test'):
    """Write a load order file the way the game (or some other tool) does."""
    contents = ''.join(f'{l}\r\n' for l in [header, *lines] if l is not None)
    with open(path, 'wb') as out:
        out.write(contents.encode(encoding))
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path
