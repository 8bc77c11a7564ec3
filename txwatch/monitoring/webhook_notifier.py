"""
Webhook Notifier for the transaction alert relay

Posts high-risk transaction alerts to a chat webhook (Slack-style incoming
webhook: POST application/json with a "text" field).

Delivery is attempted once. Non-2xx responses and transport errors are
logged and reported as a failed delivery; nothing is retried.

Environment variables:
- WEBHOOK_URL: Incoming webhook URL (or secret 'webhook_url')
"""

import asyncio
import logging
from typing import Optional

import requests

from txwatch.live.transaction import Transaction

logger = logging.getLogger(__name__)


class WebhookNotifier:
    """
    Send transaction alerts to a chat webhook.

    Usage:
        notifier = WebhookNotifier(webhook_url)
        notifier.send_text("hello")          # blocking
        await notifier.notify(transaction)   # runs in executor
    """

    MESSAGE_TEMPLATE = (
        "🚨 High-risk transaction detected!\n"
        "TXID: {txid}\n"
        "Amount: {amount} BTC\n"
        "Risk: {risk}"
    )

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        """
        Args:
            webhook_url: Incoming webhook URL
            timeout: HTTP timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

        # Statistics
        self.sent_count = 0
        self.failed_count = 0
        self.last_error: Optional[str] = None

    def format_message(self, tx: Transaction) -> str:
        """Render the alert text for a transaction."""
        return self.MESSAGE_TEMPLATE.format(
            txid=tx.txid,
            amount=tx.amount,
            risk=tx.risk
        )

    def send_text(self, text: str) -> bool:
        """
        POST a message to the webhook.

        Args:
            text: Message text

        Returns:
            True if the webhook accepted the message
        """
        try:
            response = requests.post(
                self.webhook_url,
                json={"text": text},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout
            )
            response.raise_for_status()

        except requests.RequestException as e:
            self.failed_count += 1
            self.last_error = str(e)
            logger.error(f"Failed to send webhook notification: {e}")
            return False

        self.sent_count += 1
        logger.debug(f"Webhook notification sent (status {response.status_code})")
        return True

    async def notify(self, tx: Transaction) -> bool:
        """
        Send the alert for a transaction without blocking the event loop.

        Args:
            tx: Matching transaction

        Returns:
            True if the webhook accepted the message
        """
        message = self.format_message(tx)
        loop = asyncio.get_running_loop()
        delivered = await loop.run_in_executor(None, self.send_text, message)

        if delivered:
            logger.info(f"📨 Alert sent for transaction {tx.txid}")
        return delivered

    def get_stats(self) -> dict:
        return {
            'sent_count': self.sent_count,
            'failed_count': self.failed_count,
            'last_error': self.last_error
        }
