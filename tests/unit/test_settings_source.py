"""Unit tests for reading connection settings from INI files."""
import pytest
from sqlfacade.config import ConfigSource
from sqlfacade.exceptions import ConfigError
from sqlfacade.options import DatabaseOptions


class TestConfigSource:

    def test_first_section_when_unnamed(self, write_settings, mysql_section):
        path = write_settings({'db2': {**mysql_section, 'dbname': 'two'},
                               'db1': mysql_section})
        name, settings = ConfigSource(path).resolve()
        assert name == 'db2'
        assert settings['dbname'] == 'two'

    def test_named_section(self, write_settings, mysql_section):
        path = write_settings({'db1': mysql_section,
                               'db2': {**mysql_section, 'dbname': 'two'}})
        name, settings = ConfigSource(path).resolve('db2')
        assert name == 'db2'
        assert settings == {'host': 'db1', 'dbname': 'two', 'user': 'u', 'password': 'p'}

    def test_sections_in_file_order(self, write_settings, mysql_section):
        path = write_settings({'b': mysql_section, 'a': mysql_section})
        assert ConfigSource(path).read().sections() == ['b', 'a']
        assert ConfigSource(path).resolve()[0] == 'b'

    def test_guard_line_is_a_comment(self, write_settings, mysql_section):
        path = write_settings({'db1': mysql_section})
        assert path.read_text().startswith(';<?php')
        assert ConfigSource(path).resolve()[0] == 'db1'

    def test_missing_section(self, write_settings, mysql_section):
        path = write_settings({'db1': mysql_section})
        with pytest.raises(ConfigError, match='no settings given for requested DB "nope"'):
            ConfigSource(path).resolve('nope')

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match='cannot be read'):
            ConfigSource(tmp_path / 'absent.ini').resolve()

    def test_unparsable_file(self, tmp_path):
        path = tmp_path / 'broken.ini'
        path.write_text('host = db1\n[db1]\n', encoding='utf-8')
        with pytest.raises(ConfigError, match='Caught exception'):
            ConfigSource(path).read()

    def test_file_without_sections(self, tmp_path):
        path = tmp_path / 'empty.ini'
        path.write_text('; nothing here\n', encoding='utf-8')
        with pytest.raises(ConfigError, match='No settings found'):
            ConfigSource(path).resolve()

    @pytest.mark.parametrize('dropped', ['host', 'dbname', 'user', 'password'])
    def test_under_specified_section(self, write_settings, mysql_section, dropped):
        section = {k: v for k, v in mysql_section.items() if k != dropped}
        path = write_settings({'db1': section})
        with pytest.raises(ConfigError, match=f'Not enough parameters.*missing {dropped}'):
            ConfigSource(path).resolve('db1')

    def test_options(self, write_settings, mysql_section):
        path = write_settings({'db1': {**mysql_section, 'port': '3307'}})
        name, options = ConfigSource(path).options()
        assert name == 'db1'
        assert isinstance(options, DatabaseOptions)
        assert options.drivername == 'mysql'
        assert options.port == 3307

    def test_options_invalid_driver(self, write_settings, mysql_section):
        path = write_settings({'db1': {**mysql_section, 'driver': 'oracle'}})
        with pytest.raises(ConfigError, match='Invalid settings for "db1"'):
            ConfigSource(path).options('db1')


if __name__ == '__main__':
    __import__('pytest').main([__file__])
