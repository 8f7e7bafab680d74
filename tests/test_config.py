"""
Unit tests for storescm.config module
"""
import unittest
import tempfile
import os
import shutil
import json
from pathlib import Path

import toml
import yaml

from storescm.config import (
    load_config,
    save_config,
    get_config_path,
    get_default_config,
    get_history_directory,
    get_job_monitors,
    merge_configs,
    apply_env_overrides,
    read_config_file,
)
from storescm.domain import PundleType, StoreScript
from storescm.errors import ConfigurationError
from storescm.infra.script_registry import save_scripts_to_config


class ConfigTestCase(unittest.TestCase):
    """Runs each test with HOME pointing at an empty directory"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.original_env = {k: os.environ.get(k) for k in ('HOME', 'STORESCM_CONFIG')}
        os.environ['HOME'] = self.temp_dir
        os.environ.pop('STORESCM_CONFIG', None)
        self.config_dir = Path(self.temp_dir) / '.storescm'

    def tearDown(self):
        for key, value in self.original_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        shutil.rmtree(self.temp_dir)

    def write_config(self, filename, text):
        self.config_dir.mkdir(exist_ok=True)
        path = self.config_dir / filename
        path.write_text(text)
        return path


class TestConfigManagement(ConfigTestCase):
    """Test configuration management functionality"""

    def test_get_default_config(self):
        """Test default configuration structure"""
        config = get_default_config()

        self.assertIn('general', config)
        self.assertIn('store_scripts', config)
        self.assertIn('jobs', config)
        self.assertIn('logging', config)
        self.assertEqual(config['store_scripts'], [])
        self.assertIn('level', config['logging'])

    def test_load_config_no_file(self):
        """Test loading config when no file exists"""
        config = load_config()
        self.assertEqual(config['jobs'], {})
        self.assertEqual(get_config_path(), self.config_dir / 'config.json')

    def test_load_config_json_file(self):
        """Test loading config from JSON file"""
        self.write_config('config.json', json.dumps({
            'store_scripts': [{'name': 'vw77', 'path': '/opt/vw/storeci.sh'}],
            'logging': {'level': 'DEBUG'}
        }))

        config = load_config()

        self.assertEqual(config['store_scripts'][0]['name'], 'vw77')
        self.assertEqual(config['logging']['level'], 'DEBUG')
        # Defaults survive a partial section
        self.assertIn('format', config['logging'])

    def test_load_config_yaml_file(self):
        """Test loading config from YAML file"""
        self.write_config('config.yaml', yaml.safe_dump({
            'jobs': {'nightly': {'script': 'vw77', 'repository': 'psql'}}
        }))

        config = load_config()
        self.assertIn('nightly', config['jobs'])

    def test_load_config_toml_file(self):
        """Test loading config from TOML file"""
        self.write_config('config.toml', toml.dumps({
            'general': {'workspace': '/var/builds'}
        }))

        config = load_config()
        self.assertEqual(config['general']['workspace'], '/var/builds')

    def test_config_env_var_takes_precedence(self):
        """Test STORESCM_CONFIG points at an explicit file"""
        explicit = Path(self.temp_dir) / 'elsewhere.json'
        explicit.write_text(json.dumps({'general': {'workspace': '/explicit'}}))
        self.write_config('config.json', json.dumps({'general': {'workspace': '/default'}}))
        os.environ['STORESCM_CONFIG'] = str(explicit)

        self.assertEqual(get_config_path(), explicit)
        self.assertEqual(load_config()['general']['workspace'], '/explicit')

    def test_invalid_file_raises_configuration_error(self):
        """Test a corrupt config file is reported as a configuration error"""
        self.write_config('config.json', '{"jobs": ')

        with self.assertRaises(ConfigurationError):
            load_config()

    def test_env_override(self):
        """Test STORESCM_SECTION_KEY environment overrides"""
        os.environ['STORESCM_LOGGING_LEVEL'] = 'WARNING'
        os.environ['STORESCM_GENERAL_HISTORY_DIRECTORY'] = '/tmp/history'
        try:
            config = load_config()
        finally:
            del os.environ['STORESCM_LOGGING_LEVEL']
            del os.environ['STORESCM_GENERAL_HISTORY_DIRECTORY']

        self.assertEqual(config['logging']['level'], 'WARNING')
        self.assertEqual(config['general']['history_directory'], '/tmp/history')

    def test_env_override_keeps_digits_as_text(self):
        """Test a numeric-looking value for a text setting stays a string"""
        os.environ['STORESCM_GENERAL_WORKSPACE'] = '123'
        try:
            config = load_config()
        finally:
            del os.environ['STORESCM_GENERAL_WORKSPACE']

        self.assertEqual(config['general']['workspace'], '123')
        self.assertEqual(Path(config['general']['workspace']), Path('123'))

    def test_env_override_takes_type_of_setting(self):
        """Test integer and boolean settings are converted"""
        config = {'general': {'retries': 1, 'verbose': False, 'workspace': ''}}
        os.environ['STORESCM_GENERAL_RETRIES'] = '3'
        os.environ['STORESCM_GENERAL_VERBOSE'] = 'yes'
        try:
            apply_env_overrides(config)
        finally:
            del os.environ['STORESCM_GENERAL_RETRIES']
            del os.environ['STORESCM_GENERAL_VERBOSE']

        self.assertEqual(config['general']['retries'], 3)
        self.assertIs(config['general']['verbose'], True)

    def test_env_override_bad_integer(self):
        """Test an unusable value for an integer setting is a configuration error"""
        os.environ['STORESCM_GENERAL_RETRIES'] = 'many'
        try:
            with self.assertRaises(ConfigurationError):
                apply_env_overrides({'general': {'retries': 1}})
        finally:
            del os.environ['STORESCM_GENERAL_RETRIES']

    def test_env_override_ignores_unknown_settings(self):
        """Test variables that name no existing setting are ignored"""
        os.environ['STORESCM_GENERAL_COLOUR'] = 'blue'
        try:
            config = load_config()
        finally:
            del os.environ['STORESCM_GENERAL_COLOUR']

        self.assertNotIn('colour', config['general'])

    def test_read_config_file_has_no_defaults_or_overrides(self):
        """Test the raw file read leaves out defaults and env overrides"""
        self.write_config('config.json', json.dumps({'jobs': {'nightly': {}}}))
        os.environ['STORESCM_LOGGING_LEVEL'] = 'DEBUG'
        try:
            raw = read_config_file()
        finally:
            del os.environ['STORESCM_LOGGING_LEVEL']

        self.assertEqual(raw, {'jobs': {'nightly': {}}})

    def test_saving_scripts_leaves_other_settings_as_written(self):
        """Test saving store scripts does not persist defaults or env overrides"""
        path = self.write_config('config.json', json.dumps({'jobs': {'nightly': {}}}))
        os.environ['STORESCM_LOGGING_LEVEL'] = 'DEBUG'
        try:
            save_scripts_to_config((StoreScript('vw77', '/opt/vw/storeci.sh'),))
        finally:
            del os.environ['STORESCM_LOGGING_LEVEL']

        saved = json.loads(path.read_text())
        self.assertEqual(saved, {
            'jobs': {'nightly': {}},
            'store_scripts': [{'name': 'vw77', 'path': '/opt/vw/storeci.sh'}],
        })
        self.assertEqual(load_config()['logging']['level'], 'INFO')

    def test_save_config_round_trip(self):
        """Test saving and reloading configuration"""
        config = load_config()
        config['store_scripts'] = [{'name': 'vw80', 'path': '/opt/vw8/storeci.sh'}]
        save_config(config)

        self.assertTrue((self.config_dir / 'config.json').exists())
        self.assertEqual(load_config()['store_scripts'][0]['name'], 'vw80')

    def test_save_config_keeps_yaml_format(self):
        """Test saving writes the format of the existing file"""
        path = self.write_config('config.yaml', yaml.safe_dump({'jobs': {}}))
        config = load_config()
        config['store_scripts'] = [{'name': 'vw77', 'path': '/bin/storeci'}]
        save_config(config)

        with open(path) as f:
            saved = yaml.safe_load(f)
        self.assertEqual(saved['store_scripts'][0]['name'], 'vw77')

    def test_history_directory(self):
        """Test history directory defaults under the config directory"""
        self.assertEqual(get_history_directory(load_config()), self.config_dir / 'jobs')
        self.assertEqual(
            get_history_directory({'general': {'history_directory': '/srv/history'}}),
            Path('/srv/history')
        )

    def test_merge_configs(self):
        """Test nested dictionaries merge, other values are replaced"""
        merged = merge_configs(
            {'a': {'x': 1, 'y': 2}, 'b': [1]},
            {'a': {'y': 3}, 'b': [2]}
        )
        self.assertEqual(merged, {'a': {'x': 1, 'y': 3}, 'b': [2]})


class TestJobMonitors(unittest.TestCase):
    """Test building MonitorConfigs from job sections"""

    def test_monitor_list(self):
        config = {'jobs': {'nightly': {'monitors': [
            {'script': 'vw77', 'repository': 'psql',
             'pundles': [{'name': 'MyApplication', 'type': 'bundle'}]},
            {'script': 'vw77', 'repository': 'cincom'},
        ]}}}

        monitors = get_job_monitors(config, 'nightly')

        self.assertEqual([m.repository_name for m in monitors], ['psql', 'cincom'])
        self.assertEqual(monitors[0].pundles[0].pundle_type, PundleType.BUNDLE)

    def test_single_monitor_section(self):
        config = {'jobs': {'nightly': {'script': 'vw77', 'repository': 'psql'}}}
        monitors = get_job_monitors(config, 'nightly')
        self.assertEqual(len(monitors), 1)
        self.assertEqual(monitors[0].script_name, 'vw77')

    def test_unknown_job(self):
        with self.assertRaises(ConfigurationError):
            get_job_monitors({'jobs': {}}, 'nightly')

    def test_empty_monitor_list(self):
        with self.assertRaises(ConfigurationError):
            get_job_monitors({'jobs': {'nightly': {'monitors': []}}}, 'nightly')

    def test_missing_repository(self):
        with self.assertRaises(ConfigurationError):
            get_job_monitors({'jobs': {'nightly': {'script': 'vw77'}}}, 'nightly')

    def test_repository_monitored_twice(self):
        config = {'jobs': {'nightly': {'monitors': [
            {'script': 'vw77', 'repository': 'psql'},
            {'script': 'vw80', 'repository': 'psql'},
        ]}}}
        with self.assertRaises(ConfigurationError):
            get_job_monitors(config, 'nightly')


if __name__ == '__main__':
    unittest.main()
