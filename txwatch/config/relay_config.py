"""
Relay Configuration

Process-wide settings for the transaction alert relay. Read once from the
environment at start, validated, then frozen.
"""

import os
from dataclasses import dataclass
from typing import Optional

from .secrets import get_webhook_url


DEFAULT_FEED_URL = "ws://localhost:8080/transactions"
DEFAULT_WEBHOOK_URL = "https://hooks.slack.com/services/T000/B000/XXXX"
DEFAULT_ALERT_THRESHOLD = "HIGH RISK"


@dataclass(frozen=True)
class RelayConfig:
    """
    Transaction alert relay configuration.

    Fields:
    - feed_url: WebSocket URL of the transaction feed (FEED_URL)
    - webhook_url: Chat webhook that receives alerts (WEBHOOK_URL or secret 'webhook_url')
    - alert_threshold: Substring searched for in a transaction's risk label (ALERT_THRESHOLD)
    - log_capacity: Max entries kept in the transaction log (TX_LOG_CAPACITY)
    - webhook_timeout: HTTP timeout for webhook POSTs in seconds (WEBHOOK_TIMEOUT)
    - log_dir: Directory for rotating log files (LOG_DIR)
    """

    feed_url: str = DEFAULT_FEED_URL
    webhook_url: str = DEFAULT_WEBHOOK_URL
    alert_threshold: str = DEFAULT_ALERT_THRESHOLD
    log_capacity: int = 10000
    webhook_timeout: float = 10.0
    log_dir: str = 'logs/'

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> 'RelayConfig':
        """
        Build configuration from environment variables.

        Unset or empty variables take their defaults.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            Validated RelayConfig

        Raises:
            ValueError: If a value cannot be parsed or fails validation
        """
        env = os.environ if environ is None else environ

        if environ is None:
            webhook_url = get_webhook_url(default=DEFAULT_WEBHOOK_URL)
        else:
            webhook_url = env.get('WEBHOOK_URL') or DEFAULT_WEBHOOK_URL

        config = cls(
            feed_url=env.get('FEED_URL') or DEFAULT_FEED_URL,
            webhook_url=webhook_url,
            alert_threshold=env.get('ALERT_THRESHOLD') or DEFAULT_ALERT_THRESHOLD,
            log_capacity=_parse_number(env, 'TX_LOG_CAPACITY', 10000, int),
            webhook_timeout=_parse_number(env, 'WEBHOOK_TIMEOUT', 10.0, float),
            log_dir=env.get('LOG_DIR') or 'logs/',
        )
        config.validate()
        return config

    def validate(self):
        """
        Validate configuration.

        Raises:
            ValueError: If configuration is invalid
        """
        if not self.feed_url.startswith(('ws://', 'wss://')):
            raise ValueError(f"feed_url must be a ws:// or wss:// URL, got '{self.feed_url}'")

        if not self.webhook_url.startswith(('http://', 'https://')):
            raise ValueError("webhook_url must be an http:// or https:// URL")

        if not self.alert_threshold:
            raise ValueError("alert_threshold must not be empty")

        if self.log_capacity < 1:
            raise ValueError(f"log_capacity must be >= 1, got {self.log_capacity}")

        if self.webhook_timeout <= 0:
            raise ValueError(f"webhook_timeout must be > 0, got {self.webhook_timeout}")

    def __str__(self) -> str:
        # The webhook URL is a credential; only show its host.
        host = self.webhook_url.split('/')[2] if self.webhook_url.count('/') >= 2 else '?'
        return (
            f"RelayConfig(feed={self.feed_url} | webhook={host} | "
            f"threshold='{self.alert_threshold}' | capacity={self.log_capacity})"
        )


def _parse_number(env, name: str, default, cast):
    raw = env.get(name)
    if raw is None or raw == '':
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'") from None
