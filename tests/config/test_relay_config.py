"""
Unit tests for RelayConfig
"""

import dataclasses
import pytest

import sys
from pathlib import Path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from txwatch.config.relay_config import (
    RelayConfig,
    DEFAULT_FEED_URL,
    DEFAULT_WEBHOOK_URL,
    DEFAULT_ALERT_THRESHOLD
)


class TestRelayConfigDefaults:

    def test_defaults(self):
        config = RelayConfig()

        assert config.feed_url == DEFAULT_FEED_URL
        assert config.webhook_url == DEFAULT_WEBHOOK_URL
        assert config.alert_threshold == DEFAULT_ALERT_THRESHOLD == "HIGH RISK"
        assert config.log_capacity == 10000
        config.validate()

    def test_immutable(self):
        config = RelayConfig()

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.alert_threshold = "LOW"

    def test_from_empty_env_uses_defaults(self):
        config = RelayConfig.from_env({})

        assert config == RelayConfig()


class TestRelayConfigFromEnv:

    def test_reads_all_fields(self):
        config = RelayConfig.from_env({
            'FEED_URL': 'wss://feed.example.com/tx',
            'WEBHOOK_URL': 'https://hooks.example.com/abc',
            'ALERT_THRESHOLD': 'CRITICAL',
            'TX_LOG_CAPACITY': '500',
            'WEBHOOK_TIMEOUT': '2.5',
            'LOG_DIR': '/var/log/txwatch'
        })

        assert config.feed_url == 'wss://feed.example.com/tx'
        assert config.webhook_url == 'https://hooks.example.com/abc'
        assert config.alert_threshold == 'CRITICAL'
        assert config.log_capacity == 500
        assert config.webhook_timeout == 2.5
        assert config.log_dir == '/var/log/txwatch'

    def test_non_numeric_capacity(self):
        with pytest.raises(ValueError, match="TX_LOG_CAPACITY"):
            RelayConfig.from_env({'TX_LOG_CAPACITY': 'lots'})

    def test_empty_numeric_uses_default(self):
        config = RelayConfig.from_env({'WEBHOOK_TIMEOUT': ''})

        assert config.webhook_timeout == 10.0

    def test_empty_string_values_use_defaults(self):
        config = RelayConfig.from_env({
            'FEED_URL': '',
            'WEBHOOK_URL': '',
            'ALERT_THRESHOLD': '',
            'LOG_DIR': ''
        })

        assert config == RelayConfig()

    def test_from_process_env(self, monkeypatch, tmp_path):
        """Test os.environ is used when no mapping is given."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv('FEED_URL', 'ws://127.0.0.1:9000')
        monkeypatch.setenv('WEBHOOK_URL', 'https://hooks.example.com/env')
        monkeypatch.delenv('WEBHOOK_URL_FILE', raising=False)
        monkeypatch.setattr(
            'txwatch.config.secrets.SecretsManager.DOCKER_SECRETS_DIR',
            tmp_path / 'no-docker-secrets'
        )

        config = RelayConfig.from_env()

        assert config.feed_url == 'ws://127.0.0.1:9000'
        assert config.webhook_url == 'https://hooks.example.com/env'


class TestRelayConfigValidate:

    @pytest.mark.parametrize("field,value", [
        ('feed_url', 'http://feed.example.com'),
        ('webhook_url', 'ftp://hooks.example.com'),
        ('alert_threshold', ''),
        ('log_capacity', 0),
        ('webhook_timeout', 0),
    ])
    def test_invalid_values(self, field, value):
        config = dataclasses.replace(RelayConfig(), **{field: value})

        with pytest.raises(ValueError):
            config.validate()

    def test_from_env_validates(self):
        with pytest.raises(ValueError, match="feed_url"):
            RelayConfig.from_env({'FEED_URL': 'localhost:8080'})

    def test_str_hides_webhook_path(self):
        config = RelayConfig(webhook_url='https://hooks.slack.com/services/T1/B2/SECRET')

        text = str(config)

        assert 'hooks.slack.com' in text
        assert 'SECRET' not in text


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
