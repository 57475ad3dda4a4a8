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
"""Temporary files handling for safe writes of the load order files.

Generally, you want to use TempFile in a context handler. That way you
guarantee that the temporary file will get cleaned up, no matter how
complicated your flow of logic might get or even if an exception occurs.

Temporary files are created next to the file they will replace, so that
moving them into place never has to cross a filesystem boundary."""
import os
import tempfile
from pathlib import Path as PPath

# No local imports - bolt may need us

# Sub-files we created and hence are safe to clean up by us as well
_our_temp_files: set[PPath] = set()

def new_temp_file(*, temp_prefix='', temp_suffix='.tmp', base_dir) -> str:
    """Create a new, unique, temporary file in base_dir. The caller is
    responsible for cleaning it up via cleanup_temp_file once done.

    Use only when absolutely needed, TempFile is almost always a better
    choice."""
    os.makedirs(base_dir, exist_ok=True)
    ntf_fd, ntf = tempfile.mkstemp(dir=base_dir,
        prefix=f'{temp_prefix}_' if temp_prefix else '', suffix=temp_suffix)
    _our_temp_files.add(PPath(ntf))
    os.close(ntf_fd)
    return ntf

def cleanup_temp_file(temp_file: str | os.PathLike) -> None:
    """Clean up a temporary file created via new_temp_file. Will raise an error
    if called on a file that wasn't created via new_temp_file or if it is
    called twice on the same file."""
    fixed_path = PPath(temp_file)
    try:
        _our_temp_files.remove(fixed_path)
    except KeyError:
        # 'from None' to drop the unhelpful KeyError traceback
        raise RuntimeError(
            f"Refusing to delete file that wasn't created by this instance's "
            f"new_temp_file or was already cleaned up (offending path: "
            f"{temp_file})") from None
    try:
        os.remove(fixed_path)
    except FileNotFoundError:
        pass # Already cleaned up (e.g. by moving it into place)

class TempFile:
    """Convenient and error-resistant way to create and clean up a unique
    temporary file with a context handler."""
    def __init__(self, *, temp_prefix='', temp_suffix='.tmp', base_dir):
        self._temp_prefix = temp_prefix
        self._temp_suffix = temp_suffix
        self._base_dir = base_dir

    def __enter__(self):
        self._temp_file = new_temp_file(temp_prefix=self._temp_prefix,
            temp_suffix=self._temp_suffix, base_dir=self._base_dir)
        return self._temp_file

    def __exit__(self, exc_type, exc_val, exc_tb):
        cleanup_temp_file(self._temp_file)
