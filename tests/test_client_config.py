"""Tests for client configuration module."""

import json

from client.config import Config
from common.constants import CHUNK_SIZE_BYTES, CHUNK_THRESHOLD_BYTES, MIB


def test_config_creates_default_file(tmp_path):
    """Test that config file is created with defaults if missing."""
    config_path = tmp_path / '.assetshelf' / 'config.json'
    config = Config(config_path)

    assert config_path.exists()
    assert config.get_chunk_threshold() == CHUNK_THRESHOLD_BYTES == 50 * MIB
    assert config.get_chunk_size() == CHUNK_SIZE_BYTES == 5 * MIB
    assert config.get_max_file_size() > config.get_chunk_threshold()

    with open(config_path) as f:
        assert json.load(f)['chunk_size_bytes'] == CHUNK_SIZE_BYTES


def test_config_loads_existing_file(tmp_path):
    """Test loading existing config file keeps unspecified defaults."""
    config_path = tmp_path / '.assetshelf' / 'config.json'
    config_path.parent.mkdir(parents=True)
    with open(config_path, 'w') as f:
        json.dump({'server_url': 'https://shelf.example.com/', 'chunk_size_bytes': 1024}, f)

    config = Config(config_path)

    assert config.get_base_url() == 'https://shelf.example.com'
    assert config.get_chunk_size() == 1024
    assert config.get_chunk_threshold() == CHUNK_THRESHOLD_BYTES


def test_config_ignores_corrupt_file(tmp_path):
    """Test that an unreadable config falls back to defaults."""
    config_path = tmp_path / 'config.json'
    config_path.write_text('{not json')

    config = Config(config_path)

    assert config.get_timeout() == Config.DEFAULT_CONFIG['timeout']
    assert config_path.read_text() == '{not json'


def test_config_save(temp_config):
    """Test saving changed values."""
    temp_config.data['server_url'] = 'http://10.0.0.5:9000'
    temp_config.save()

    reloaded = Config(temp_config.config_path)
    assert reloaded.get_base_url() == 'http://10.0.0.5:9000'
