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
"""Reading and writing of plugins.txt and loadorder.txt. LoFile parses either
file into a list of plugin names, PluginListWriter serializes the host's
plugin list into them using SafeWriteFile, so that a file is only ever
replaced as a whole and only if its contents actually changed."""
from __future__ import annotations

from collections.abc import Callable
from zlib import crc32

from . import bass
from .bolt import FName, GPath, Path, decode_line, deprint
from .exception import EmptyOutputError, FileUnreadableError, \
    MalformedOrderFileError, NameEncodingError
from .plugin_types import ErrorReporter, PluginList
from .wbtemp import TempFile

# Typing
Fingerprint = tuple[int, int] # size, crc32 of the written bytes

class LoFile:
    """A file holding load order information - either the active plugins
    (plugins.txt) or the full load order (loadorder.txt). Both use one plugin
    per line, lines starting with '#' are comments."""
    def __init__(self, path, encoding: str | Callable[[], str]):
        self.abs_path = GPath(path)
        self._encoding = encoding

    @property
    def encoding(self) -> str:
        """The encoding may depend on settings, so resolve it lazily."""
        return self._encoding() if callable(self._encoding) else \
            self._encoding

    def _read_lines(self) -> list[bytes]:
        try:
            with self.abs_path.open('rb') as ins:
                lines = ins.readlines()
        except OSError as e: # also catches FileNotFoundError
            raise FileUnreadableError(self.abs_path, f'{e}') from e
        if lines and lines[0].startswith(b'\xef\xbb\xbf'):
            lines[0] = lines[0][3:] # some editors add a UTF-8 BOM
        return lines

    @staticmethod
    def _stripped(lines):
        for line in lines:
            if (line := line.strip()) and line[0] != 35: # b'#'[0] == 35
                yield line

    def parse_load_order(self) -> list[FName]:
        """Parse loadorder.txt. The file is written by us or by tools that
        know what they are doing, so any undecodable content marks it as
        malformed."""
        lines = self._read_lines()
        lo_encoding = self.encoding
        try:
            return [FName(line.decode(lo_encoding)) for line in
                    self._stripped(lines)]
        except UnicodeDecodeError as e:
            raise MalformedOrderFileError(self.abs_path,
                f'Could not be decoded as {lo_encoding} ({e})') from e

    def parse_active(self) -> list[FName]:
        """Parse plugins.txt. An empty file means no active plugins were ever
        saved, as we always write at least a header - treat it like a missing
        one. Lines that can't be decoded are skipped."""
        lines = self._read_lines()
        if not lines:
            raise FileUnreadableError(self.abs_path, 'File is empty')
        acti_encoding = self.encoding
        return [FName(modname) for line in self._stripped(lines) if
                (modname := decode_line(line, acti_encoding)) is not None]

class SafeWriteFile:
    """Write to a temporary file in the directory of the target and only
    replace the target when commit_if_different is called and the contents
    differ from the previous commit. The temporary file is always cleaned up
    when leaving the with block."""
    def __init__(self, target: Path):
        self._target = GPath(target)
        self._temp_file = TempFile(temp_prefix=self._target.stail,
                                   base_dir=self._target.shead or '.')
        self._out = None
        self._size = self._crc = 0

    def __enter__(self):
        temp_path = self._temp_file.__enter__()
        try:
            self._out = open(temp_path, 'wb')
        except OSError:
            self._temp_file.__exit__(None, None, None)
            raise
        self._temp_path = temp_path
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            self._close()
        finally:
            self._temp_file.__exit__(exc_type, exc_val, exc_tb)

    def _close(self):
        if self._out is not None:
            self._out.close()
            self._out = None

    def write(self, data: bytes):
        self._out.write(data)
        self._size += len(data)
        self._crc = crc32(data, self._crc)

    @property
    def fingerprint(self) -> Fingerprint:
        return self._size, self._crc

    def commit_if_different(self, previous: Fingerprint | None
                            ) -> Fingerprint | None:
        """Move the written file over the target, unless previous is equal to
        the fingerprint of what we wrote. Return the new fingerprint if we
        committed, else None."""
        self._close()
        if (new_fingerprint := self.fingerprint) == previous:
            return None
        self._target.replace_with_temp(self._temp_path)
        return new_fingerprint

class PluginListWriter:
    """Serializes the host's plugin list to plugins.txt/loadorder.txt. Keeps
    the fingerprint of the last contents committed for each path, so writing
    the same list again does not touch the file."""
    def __init__(self, reporter: ErrorReporter):
        self._reporter = reporter
        self._last_save_hash: dict[Path, Fingerprint] = {}

    def last_save_hash(self, target) -> Fingerprint | None:
        return self._last_save_hash.get(GPath(target))

    def write(self, plugin_list: PluginList, target, encoding: str,
              include: Callable[[FName], bool]) -> bool:
        """Write the plugins of plugin_list for which include returns True to
        target, in load order, in the specified encoding. Return True if the
        file was replaced."""
        target = GPath(target)
        plugins = sorted(map(FName, plugin_list.plugin_names()),
                         key=plugin_list.priority)
        try:
            lines = self._encode_plugins(target,
                [p for p in plugins if include(p)], encoding)
        except EmptyOutputError as e:
            deprint(f'{e}')
            self._reporter.report_error(f'{e}')
            return False
        header = f'{bass.settings["LoadOrder"]["header"]}\r\n'.encode(
            encoding, errors='replace')
        with SafeWriteFile(target) as out:
            out.write(header)
            for line in lines:
                out.write(line)
            committed = out.commit_if_different(self._last_save_hash.get(
                target))
        if committed is None:
            deprint(f'{target} is up to date, not saving')
            return False
        self._last_save_hash[target] = committed
        return True

    def _encode_plugins(self, target, plugins, encoding) -> list[bytes]:
        lines, invalid_names = [], []
        for plugin_name in plugins:
            try:
                lines.append(self.encode_name(plugin_name, encoding))
            except NameEncodingError as e:
                deprint(f'{e} - skipped for inclusion in {target.stail}')
                invalid_names.append(plugin_name)
        if invalid_names:
            self._reporter.report_error(
                f'Some of your plugins have invalid names! These plugins can '
                f'not be loaded by the game. Please rename them: '
                f'{", ".join(invalid_names)}')
        if not lines:
            raise EmptyOutputError(target)
        return lines

    @staticmethod
    def encode_name(plugin_name: str, encoding: str) -> bytes:
        try:
            return f'{plugin_name}\r\n'.encode(encoding)
        except UnicodeEncodeError:
            raise NameEncodingError(plugin_name, encoding) from None
