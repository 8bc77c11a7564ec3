"""
Monitoring and alerting module for the relay.

Provides:
- Chat webhook notifications
- Logging setup
"""

from .webhook_notifier import WebhookNotifier
from .logging_config import setup_logging

__all__ = ['WebhookNotifier', 'setup_logging']
