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
import os

import pytest

from . import ErrorCollector, FakePluginList, write_lo_file
from .. import bass
from .._lo_files import LoFile, PluginListWriter, SafeWriteFile
from ..bolt import FName, GPath
from ..exception import FileUnreadableError, MalformedOrderFileError, \
    NameEncodingError
from ..plugin_types import PluginState

_HEADER = b'# This file was automatically generated by Mod Organizer.\r\n'

@pytest.fixture(autouse=True)
def _settings():
    bass.settings['LoadOrder']['plugins_encoding'] = 'cp1252'
    yield
    bass.reset_settings()

def _read(path):
    with open(path, 'rb') as ins:
        return ins.read()

class TestLoFile(object):
    def test_parse_load_order(self, tmp_path):
        lo_path = write_lo_file(tmp_path / 'loadorder.txt',
            ['Oblivion.esm', '', '  Knights.esp  ', '#comment.esp',
             'Ünïcödé.esp'])
        lord = LoFile(lo_path, 'utf-8').parse_load_order()
        assert lord == ['Oblivion.esm', 'Knights.esp', 'Ünïcödé.esp']
        assert all(type(p) is FName for p in lord)

    def test_parse_load_order_bom(self, tmp_path):
        lo_path = tmp_path / 'loadorder.txt'
        lo_path.write_bytes(b'\xef\xbb\xbfOblivion.esm\r\nA.esp\r\n')
        assert LoFile(lo_path, 'utf-8').parse_load_order() == [
            'Oblivion.esm', 'A.esp']

    def test_parse_load_order_malformed(self, tmp_path):
        lo_path = tmp_path / 'loadorder.txt'
        lo_path.write_bytes(b'Oblivion.esm\r\n\xc4pfel.esp\r\n')
        with pytest.raises(MalformedOrderFileError):
            LoFile(lo_path, 'utf-8').parse_load_order()

    def test_parse_missing(self, tmp_path):
        lo_file = LoFile(tmp_path / 'loadorder.txt', 'utf-8')
        with pytest.raises(FileUnreadableError):
            lo_file.parse_load_order()
        with pytest.raises(FileUnreadableError):
            lo_file.parse_active()

    def test_parse_active(self, tmp_path):
        pl_path = write_lo_file(tmp_path / 'plugins.txt',
            ['Oblivion.esm', '\xc4pfel.esp'], encoding='cp1252')
        assert LoFile(pl_path, 'cp1252').parse_active() == [
            'Oblivion.esm', 'Äpfel.esp']

    def test_parse_active_skips_undecodable(self, tmp_path, capsys):
        pl_path = tmp_path / 'plugins.txt'
        pl_path.write_bytes(b'# header\r\nA.esp\r\n\xff\xfe.esp\r\n'
                            b'B.esp\r\n')
        assert LoFile(pl_path, 'utf-8').parse_active() == ['A.esp', 'B.esp']
        assert 'failed to properly decode' in capsys.readouterr().out

    def test_parse_active_bom(self, tmp_path):
        pl_path = tmp_path / 'plugins.txt'
        pl_path.write_bytes(b'\xef\xbb\xbfa.esp\r\nb.esp\r\n')
        active = LoFile(pl_path, 'utf-8').parse_active()
        assert active == ['a.esp', 'b.esp']
        assert str(active[0]) == 'a.esp'

    def test_parse_active_empty(self, tmp_path):
        pl_path = tmp_path / 'plugins.txt'
        pl_path.write_bytes(b'')
        with pytest.raises(FileUnreadableError):
            LoFile(pl_path, 'cp1252').parse_active()
        # a header only file is not empty - no plugins are active
        pl_path.write_bytes(_HEADER)
        assert LoFile(pl_path, 'cp1252').parse_active() == []

    def test_encoding_resolved_lazily(self, tmp_path):
        lo_file = LoFile(tmp_path / 'plugins.txt',
                         lambda: bass.settings['LoadOrder'][
                             'plugins_encoding'])
        assert lo_file.encoding == 'cp1252'
        bass.settings['LoadOrder']['plugins_encoding'] = 'cp1251'
        assert lo_file.encoding == 'cp1251'

class TestSafeWriteFile(object):
    def test_commit(self, tmp_path):
        target = tmp_path / 'loadorder.txt'
        with SafeWriteFile(target) as out:
            out.write(b'A.esp\r\n')
            fingerprint = out.commit_if_different(None)
        assert fingerprint == out.fingerprint
        assert _read(target) == b'A.esp\r\n'
        assert os.listdir(tmp_path) == ['loadorder.txt']

    def test_no_commit_if_same(self, tmp_path):
        target = tmp_path / 'loadorder.txt'
        target.write_bytes(b'untouched')
        with SafeWriteFile(target) as out:
            out.write(b'A.esp\r\n')
            first = out.fingerprint
        # nothing committed, the temp file is gone
        assert _read(target) == b'untouched'
        assert os.listdir(tmp_path) == ['loadorder.txt']
        with SafeWriteFile(target) as out:
            out.write(b'A.esp\r\n')
            assert out.commit_if_different(first) is None
        assert _read(target) == b'untouched'

    def test_cleanup_on_error(self, tmp_path):
        target = tmp_path / 'plugins.txt'
        with pytest.raises(RuntimeError):
            with SafeWriteFile(target) as out:
                out.write(b'A.esp\r\n')
                raise RuntimeError('boom')
        assert os.listdir(tmp_path) == []

class TestPluginListWriter(object):
    @staticmethod
    def _writer():
        reporter = ErrorCollector()
        return PluginListWriter(reporter), reporter.errors

    def test_sorts_by_priority_and_filters(self, tmp_path):
        pl = FakePluginList(['Oblivion.esm', 'b.esp', 'a.esp'], states={
            'Oblivion.esm': PluginState.ACTIVE, 'a.esp': PluginState.ACTIVE})
        pl.set_load_order(['Oblivion.esm', 'a.esp', 'b.esp'])
        writer, errors = self._writer()
        lo_path = tmp_path / 'loadorder.txt'
        pl_path = tmp_path / 'plugins.txt'
        assert writer.write(pl, lo_path, 'utf-8', lambda p: True)
        assert writer.write(pl, pl_path, 'cp1252',
            lambda p: pl.state(p) is PluginState.ACTIVE)
        assert _read(lo_path) == _HEADER + b'Oblivion.esm\r\na.esp\r\n' \
                                           b'b.esp\r\n'
        assert _read(pl_path) == _HEADER + b'Oblivion.esm\r\na.esp\r\n'
        assert not errors

    def test_identical_write_commits_once(self, tmp_path):
        pl = FakePluginList(['Oblivion.esm', 'a.esp'])
        writer, _errors = self._writer()
        lo_path = tmp_path / 'loadorder.txt'
        assert writer.write(pl, lo_path, 'utf-8', lambda p: True)
        os.utime(lo_path, (1000, 1000))
        fingerprint = writer.last_save_hash(lo_path)
        assert fingerprint is not None
        assert not writer.write(pl, lo_path, 'utf-8', lambda p: True)
        assert writer.last_save_hash(lo_path) == fingerprint
        assert GPath(lo_path).mtime == 1000
        # changing the list writes again
        pl.add('b.esp')
        assert writer.write(pl, lo_path, 'utf-8', lambda p: True)
        assert writer.last_save_hash(lo_path) != fingerprint

    def test_unencodable_names_skipped(self, tmp_path):
        pl = FakePluginList(['Oblivion.esm', '警告.esp', 'a.esp'])
        writer, errors = self._writer()
        pl_path = tmp_path / 'plugins.txt'
        assert writer.write(pl, pl_path, 'cp1252', lambda p: True)
        assert _read(pl_path) == _HEADER + b'Oblivion.esm\r\na.esp\r\n'
        assert len(errors) == 1
        assert '警告.esp' in errors[0]

    def test_empty_output_leaves_file_alone(self, tmp_path):
        pl = FakePluginList(['a.esp', 'b.esp'])
        writer, errors = self._writer()
        pl_path = write_lo_file(tmp_path / 'plugins.txt', ['old.esp'],
                                mtime=1000)
        before = _read(pl_path)
        assert not writer.write(pl, pl_path, 'cp1252',
            lambda p: pl.state(p) is PluginState.ACTIVE)
        assert _read(pl_path) == before
        assert GPath(pl_path).mtime == 1000
        assert writer.last_save_hash(pl_path) is None
        assert len(errors) == 1
        assert os.listdir(tmp_path) == ['plugins.txt']

    def test_all_names_unencodable_is_empty(self, tmp_path):
        pl = FakePluginList(['警告.esp'])
        writer, errors = self._writer()
        pl_path = tmp_path / 'plugins.txt'
        assert not writer.write(pl, pl_path, 'cp1252', lambda p: True)
        assert not pl_path.exists()
        assert len(errors) == 2 # invalid names, then empty output

    def test_encode_name(self):
        assert PluginListWriter.encode_name('Äpfel.esp', 'cp1252') == \
            b'\xc4pfel.esp\r\n'
        with pytest.raises(NameEncodingError) as exc_info:
            PluginListWriter.encode_name('警告.esp', 'cp1252')
        assert exc_info.value.plugin_name == '警告.esp'
        assert exc_info.value.encoding == 'cp1252'
