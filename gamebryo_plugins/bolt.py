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
"""Low level helpers shared by the load order core: case insensitive plugin
names, a thin path wrapper, encodings and deprint."""
from __future__ import annotations

import io
import locale
import os
import shutil
import stat
import sys
import traceback as _traceback
from typing import overload

import chardet

from . import bass

# Unicode ---------------------------------------------------------------------
_encodingSwap = {
    # The encoding detector reports back some encodings that
    # are subsets of others.  Use the better encoding when
    # given the option
    # 'reported encoding':'actual encoding to use',
    'GB2312': 'gbk',        # Simplified Chinese
    'SHIFT_JIS': 'cp932',   # Japanese
    'windows-1252': 'cp1252',
    'windows-1251': 'cp1251',
    'utf-8': 'utf8',
}

def getbestencoding(bitstream):
    """Tries to detect the encoding a bitstream was saved in. Uses chardet's
    heuristics, so only trust the result if the confidence is high."""
    if not bitstream:
        # chardet returns None for empty input, which breaks decode()
        return 'utf8', 1.0
    # plugins.txt lines are tiny, but don't freeze if fed garbage
    if len(bitstream) > 16384:
        bitstream_view = io.BytesIO(bitstream)
        result = result_sentinel = {
            'encoding': None,
            'confidence': 0.0,
            'language': None,
        }
        while block := bitstream_view.read(16384):
            result = chardet.detect(block)
            if result != result_sentinel:
                break
    else:
        result = chardet.detect(bitstream)
    encoding_, confidence = result['encoding'], result['confidence']
    encoding_ = _encodingSwap.get(encoding_, encoding_)
    return encoding_, confidence

def system_encoding() -> str:
    """The legacy encoding plugins.txt is read and written in - the locale's
    preferred encoding unless overridden in the settings."""
    return (bass.settings['LoadOrder']['plugins_encoding'] or
            locale.getpreferredencoding(False))

#------------------------------------------------------------------------------
_not_cached = object()

class fast_cached_property:
    """Similar to functools.cached_property, but without the lock. Only use
    on immutable objects."""
    def __init__(self, wrapped_func):
        self._wrapped_func = wrapped_func
        self._wrapped_attr = None

    def __set_name__(self, owner, name):
        self._wrapped_attr = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        wrapped_val = instance.__dict__.get(self._wrapped_attr, _not_cached)
        if wrapped_val is _not_cached:
            wrapped_val = self._wrapped_func(instance)
            instance.__dict__[self._wrapped_attr] = wrapped_val
        return wrapped_val

class FName(str):
    """The case insensitive identity of a plugin. FName is-a str as it is
    being used mostly as a plain str instance, apart from comparisons and
    hashing which go through the lower-cased shadow _lower. It compares case
    insensitive with both FName and str. Instances are cached per exact
    string, so FName('a.esp') and FName('A.esp') are different instances
    that compare equal, each keeping the case it was created with."""
    _filenames_cache: dict[str, FName] = {}
    _hash: int # Lazily cached since it's needed so often

    def __new__(cls, unicode_str: None | FName | str, *args,
                __cache=_filenames_cache, **kwargs):
        if type(unicode_str) is FName or unicode_str is None:
            return unicode_str
        try:
            return __cache[unicode_str]
        except KeyError:
            if type(unicode_str) is not str:
                raise ValueError(f'{unicode_str!r} type is '
                                 f'{type(unicode_str)} - a str is required')
            return __cache.setdefault(unicode_str, super().__new__(
                cls, unicode_str, *args, **kwargs))

    @fast_cached_property
    def _lower(self): return super().lower()

    def lower(self): return self._lower

    def __deepcopy__(self, memodict={}):
        return self # immutable

    def __copy__(self):
        return self # immutable

    #--Hash/Compare
    def __hash__(self):
        try:
            return self._hash
        except AttributeError:
            self._hash = hash(self._lower)
            return self._hash
    def __eq__(self, other):
        try:
            return self._lower == other._lower
        except AttributeError:
            # this will blow if other is not a str even if it defines lower
            return other is not None and self._lower == str.lower(other)
    def __ne__(self, other):
        try:
            return self._lower != other._lower
        except AttributeError:
            return other is None or self._lower != str.lower(other)
    def __lt__(self, other):
        try:
            return self._lower < other._lower
        except AttributeError:
            return self._lower < str.lower(other)
    def __ge__(self, other):
        try:
            return self._lower >= other._lower
        except AttributeError:
            return self._lower >= str.lower(other)
    def __gt__(self, other):
        try:
            return self._lower > other._lower
        except AttributeError:
            return self._lower > str.lower(other)
    def __le__(self, other):
        try:
            return self._lower <= other._lower
        except AttributeError:
            return self._lower <= str.lower(other)
    #--repr
    def __repr__(self):
        return f'{type(self).__name__}({super().__repr__()})'

# Paths -----------------------------------------------------------------------
_gpaths: dict[str | os.PathLike[str], Path] = {}

@overload
def GPath(str_or_uni: None) -> None: ...
@overload
def GPath(str_or_uni: str | os.PathLike[str]) -> Path: ...
def GPath(str_or_uni: str | os.PathLike[str] | None) -> Path | None:
    """Path factory and cache."""
    if isinstance(str_or_uni, Path) or str_or_uni is None: return str_or_uni
    if not str_or_uni: return Path('') # needed, os.path.normpath('') = '.'!
    if str_or_uni in _gpaths: return _gpaths[str_or_uni]
    return _gpaths.setdefault(str_or_uni, Path(
        os.path.normpath(os.fspath(str_or_uni))))

class Path(os.PathLike):
    """Paths are immutable objects that represent file directory paths.
     May be just a directory, filename or full path."""
    __slots__ = ('_s', '_cs', '_shead', '_stail')
    _shead: str
    _stail: str

    def __init__(self, norm_str: str):
        """Initialize with unicode - call only in GPath."""
        self._s = norm_str # path must be normalized
        self._cs = norm_str.lower()

    def __len__(self):
        return len(self._s)

    def __repr__(self):
        return f'bolt.Path({self._s!r})'

    def __str__(self):
        return self._s

    def __fspath__(self):
        return self._s

    #--Properties--------------------------------------------------------
    @property
    def shead(self):
        """Head as string."""
        try:
            return self._shead
        except AttributeError:
            self._shead, self._stail = os.path.split(self._s)
            return self._shead
    @property
    def stail(self):
        """Tail as string."""
        try:
            return self._stail
        except AttributeError:
            self._shead, self._stail = os.path.split(self._s)
            return self._stail

    def join(*args: str | os.PathLike[str]):
        return GPath(os.path.join(*map(os.fspath, args)))

    #--mtime
    @property
    def mtime(self):
        """Time file was last modified."""
        return os.path.getmtime(self._s)

    #--File system info
    def exists(self):
        return os.path.exists(self._s)

    #--File system manipulation
    def clearRO(self):
        """Clears RO flag on self"""
        os.chmod(self._s, stat.S_IWUSR | stat.S_IRUSR | stat.S_IWOTH)

    def open(self, *args, **kwdargs):
        try:
            return open(self._s, *args, **kwdargs)
        except FileNotFoundError:
            # We rarely need to do this, so avoid the stat call from
            # os.path.exists unless it's unavoidable
            if self.shead and not os.path.exists(self.shead):
                os.makedirs(self.shead)
                return open(self._s, *args, **kwdargs)
            raise

    def replace_with_temp(self, temp_path: str | os.PathLike):
        """Replace this file with a temporary version created via TempFile or
        new_temp_file. Note that this *does not work for directories!* It is
        only intended for files.

        This also does not remove the temporary file from the internal caches
        so as to work with TempFile."""
        try:
            shutil.move(temp_path, self._s)
        except PermissionError:
            self.clearRO()
            shutil.move(temp_path, self._s)

    #--Hash/Compare, based on the _cs attribute so case insensitive
    def __hash__(self):
        return hash(self._cs)
    def __eq__(self, other):
        if isinstance(other, Path):
            return self._cs == other._cs
        try:
            return self._cs == os.path.normpath(other).lower()
        except TypeError:
            return NotImplemented
    def __ne__(self, other):
        eq = self.__eq__(other)
        return eq if eq is NotImplemented else not eq

# Logging ---------------------------------------------------------------------
# Constants used for censoring the user's home directory (see below)
_USER_DIR = os.path.expanduser('~')
_CENSORED_DIR = os.path.join(os.path.split(_USER_DIR)[0], '*****')

def deprint(*args, traceback=False, trace=True, frame=1):
    """Prints message along with file and line location.
       Available keyword arguments:
       trace: (default True) - if a Truthy value, displays the module,
              line number, and function this was used from
       traceback: (default False) - if a Truthy value, prints any tracebacks
              for exceptions that have occurred.
       frame: (default 1) - With `trace`, determines the function caller's
              frame for getting the function name
    """
    if trace:
        parent_frame = sys._getframe(frame)
        code_obj = parent_frame.f_code
        msg = f'{os.path.basename(code_obj.co_filename)} ' \
              f'{parent_frame.f_lineno:4d} {code_obj.co_name}: '
    else:
        msg = ''
    try:
        msg += ' '.join([f'{x}' for x in args])
    except UnicodeError:
        # we still want the message displayed any way we can
        for x in args:
            try:
                msg += f' {x}'
            except UnicodeError:
                msg += f' {x!r}'
    # Print to stdout by default, but change to stderr if we have an error
    target_stream = sys.stdout
    if traceback:
        target_stream = sys.stderr
        exc_fmt = _traceback.format_exc()
        msg += f'\n{exc_fmt}'
    # Censor the user's home directory
    if _USER_DIR not in ('~', os.sep):
        msg = msg.replace(_USER_DIR, _CENSORED_DIR)
    print(msg, flush=True, file=target_stream)

def decode_line(line: bytes, encoding: str) -> str | None:
    """Decode a line of a load order file, returning None (and logging the
    encoding the line probably is in) if it is not valid in encoding."""
    try:
        return line.decode(encoding)
    except UnicodeDecodeError:
        guess, confidence = getbestencoding(line)
        deprint(f'{line!r} failed to properly decode as {encoding} (looks '
                f'like {guess}, confidence {confidence:.2f})')
        return None
