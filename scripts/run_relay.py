#!/usr/bin/env python3
"""
Transaction Alert Relay Runner

Connects to the transaction feed and forwards high-risk transactions to the
chat webhook. Runs until the feed closes or the process is signalled.

Usage:
    FEED_URL=wss://feed.example.com/transactions \
    WEBHOOK_URL=https://hooks.slack.com/services/... \
    ALERT_THRESHOLD="HIGH RISK" \
    python scripts/run_relay.py

Configuration is read from the environment only (see txwatch.config.relay_config).
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from txwatch.config.relay_config import RelayConfig
from txwatch.live.relay import NotificationRelay
from txwatch.monitoring.logging_config import setup_logging


def main():
    try:
        config = RelayConfig.from_env()
    except ValueError as e:
        print(f"❌ Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(log_dir=config.log_dir)
    logger = logging.getLogger(__name__)

    relay = NotificationRelay(config)

    try:
        asyncio.run(relay.run())
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
