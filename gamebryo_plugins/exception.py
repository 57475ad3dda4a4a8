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
"""This module contains all custom exceptions for the load order core. None of
them is meant to reach the host - they are raised where a file operation fails
and caught by the component that owns the fallback."""
# NO LOCAL IMPORTS! This has to be importable from any module/package.

class BoltError(Exception):
    """Generic error with a string message."""
    def __init__(self, message):
        self.message = message
    def __str__(self):
        return self.message

# File exceptions -------------------------------------------------------------
class FileError(BoltError):
    """An error that occurred while handling a file."""
    def __init__(self, in_name, message):
        super().__init__(message)
        self._in_name = (in_name and f'{in_name}') or 'Unknown File'

    def __str__(self):
        return f'{self._in_name}: {self.message}'

# Load order errors -----------------------------------------------------------
class LoadOrderError(BoltError):
    """Base class for errors while reading or writing the load order."""

class UninitializedReadError(LoadOrderError):
    """Attempt to write the plugin lists before they were ever read."""
    def __init__(self, message='Attempted to write uninitialized plugin '
                               'lists.'):
        super().__init__(message)

class FileUnreadableError(FileError, LoadOrderError):
    """plugins.txt or loadorder.txt is missing or could not be opened."""
    def __init__(self, in_name, message='File is missing or could not be '
                                        'opened.'):
        super().__init__(in_name, message)

class MalformedOrderFileError(FileError, LoadOrderError):
    """loadorder.txt could not be parsed."""

class EmptyOutputError(FileError, LoadOrderError):
    """Writing would have produced a plugin list with no plugins in it."""
    def __init__(self, in_name, message='Plugin list would be empty, this is '
                                        'almost certainly wrong. Not saving.'):
        super().__init__(in_name, message)

class NameEncodingError(LoadOrderError):
    """A plugin name can't be represented in the encoding of the file it is
    written to."""
    def __init__(self, plugin_name, encoding):
        super().__init__(f'Invalid plugin name {plugin_name!r} (not '
                         f'representable in {encoding})')
        self.plugin_name = plugin_name
        self.encoding = encoding
