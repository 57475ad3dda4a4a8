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
"""This module just stores settings that all modules have to be able to access
without worrying about circular imports. The host overrides them once at
startup, before creating any GamebryoGamePlugins, by calling load_settings on
its SETTINGS_TOML file - keys missing there keep their defaults."""
import copy
import tomllib

# no imports

# Names of the load order files, fixed by the game engine
PLUGINS_TXT = 'plugins.txt'
LOADORDER_TXT = 'loadorder.txt'
SETTINGS_TOML = 'gamebryo_plugins.toml'

settings_defaults = {
    'LoadOrder': {
        'header': '# This file was automatically generated by Mod '
                  'Organizer.',
        # empty means the encoding of the system locale
        'plugins_encoding': '',
        'loadorder_encoding': 'utf-8',
        'log_paths': True,
    },
}

#--Global dictionary - do _not_ reassign !
settings = copy.deepcopy(settings_defaults)

def load_settings(toml_path) -> bool:
    """Update settings with the contents of the specified TOML file. Returns
    True if the file was read, False if it is missing or malformed - in both
    cases settings are reset to their defaults first."""
    from .bolt import deprint # bolt imports us
    reset_settings()
    try:
        with open(toml_path, 'rb') as ins:
            parsed = tomllib.load(ins)
    except FileNotFoundError:
        return False
    except (OSError, tomllib.TOMLDecodeError):
        deprint(f'Failed to read settings from {toml_path}', traceback=True)
        return False
    for section, defaults in settings_defaults.items():
        user_section = parsed.get(section, {})
        for key, default in defaults.items():
            if key not in user_section: continue
            if type(val := user_section[key]) is not type(default):
                deprint(f'Ignoring {section}.{key} = {val!r} in {toml_path} '
                        f'(expected a {type(default).__name__})')
                continue
            settings[section][key] = val
    return True

def reset_settings():
    for section, defaults in settings_defaults.items():
        settings[section].clear()
        settings[section].update(defaults)
