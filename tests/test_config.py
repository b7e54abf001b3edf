"""
Tests for fitting/config.py

Verifies:
- Default config loads all sections
- Override via custom path
- Override via PWFIT_CONFIG env var
- Reset clears cache
- Missing file raises error
- pyproject.toml installs exactly the top-level packages on disk
"""

import os
from pathlib import Path
import tempfile
import pytest
import yaml

from fitting.config import get_config, get, reset


def write_config(config: dict) -> str:
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        yaml.dump(config, f)
        return f.name


class TestConfigLoader:
    """Tests for config loading."""

    def setup_method(self):
        """Reset config cache before each test."""
        reset()

    def test_default_config_loads(self):
        """Default config should load all sections."""
        config = get_config()

        assert 'search' in config
        assert 'output' in config
        assert 'data' in config

    def test_search_values(self):
        """Search section should carry driver defaults."""
        search = get_config()['search']

        assert search['strategy'] == 'enumeration'
        assert search['score'] == 'pearson'
        assert search['n_jobs'] == -1
        assert search['n_chunks'] is None

    def test_output_and_data_values(self):
        config = get_config()

        assert config['output']['results_dir'] == 'results'
        assert config['data']['min_points'] == 2


class TestConfigGet:
    """Tests for get() convenience function."""

    def setup_method(self):
        """Reset config cache before each test."""
        reset()

    def test_get_existing_value(self):
        """Get should return existing value."""
        assert get('data', 'min_points') == 2

    def test_get_with_default(self):
        """Get should return default for missing key."""
        assert get('search', 'nonexistent_key', 'default_value') == 'default_value'

    def test_get_missing_section(self):
        """Get should return default for missing section."""
        assert get('nonexistent_section', 'key', 'default') == 'default'


class TestConfigOverride:
    """Tests for config override."""

    def setup_method(self):
        """Reset config cache before each test."""
        reset()

    def teardown_method(self):
        reset()

    def test_override_via_path(self):
        """Config should load from custom path."""
        custom_path = write_config({'search': {'n_jobs': 3}})

        try:
            config = get_config(custom_path)
            assert config['search']['n_jobs'] == 3
            assert get('search', 'n_jobs') == 3
        finally:
            os.unlink(custom_path)

    def test_override_via_env_var(self, monkeypatch):
        """Config should load from PWFIT_CONFIG env var."""
        custom_path = write_config({'search': {'score': 'mse'}})

        try:
            monkeypatch.setenv('PWFIT_CONFIG', custom_path)
            reset()

            assert get('search', 'score') == 'mse'
        finally:
            os.unlink(custom_path)

    def test_empty_file_is_empty_config(self):
        custom_path = write_config({})
        with open(custom_path, 'w') as f:
            f.write('')

        try:
            assert get_config(custom_path) == {}
            assert get('search', 'n_jobs', -1) == -1
        finally:
            os.unlink(custom_path)


class TestConfigReset:
    """Tests for reset() function."""

    def test_reset_clears_cache(self):
        """Reset should clear cached config."""
        reset()
        assert get_config()['data']['min_points'] == 2

        custom_path = write_config({'data': {'min_points': 50}})

        try:
            reset()
            assert get_config(custom_path)['data']['min_points'] == 50

            reset()
            assert get_config()['data']['min_points'] == 2
        finally:
            os.unlink(custom_path)
            reset()


class TestConfigErrors:
    """Tests for error handling."""

    def setup_method(self):
        """Reset config cache before each test."""
        reset()

    def test_missing_file_raises_error(self):
        """Missing config file should raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            get_config('/nonexistent/path/to/config.yaml')


class TestPackaging:
    """Tests for the installable package list."""

    def test_installed_packages_match_tree(self):
        tomllib = pytest.importorskip("tomllib")
        root = Path(__file__).parent.parent
        with open(root / 'pyproject.toml', 'rb') as f:
            pyproject = tomllib.load(f)

        listed = set(pyproject['tool']['setuptools']['packages'])
        on_disk = {
            p.name for p in root.iterdir()
            if (p / '__init__.py').exists() and p.name != 'tests'
        }
        assert listed == on_disk
        assert 'tests' not in listed
