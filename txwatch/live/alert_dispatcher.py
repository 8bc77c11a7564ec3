"""
Alert Dispatcher

Checks each transaction's risk label against the configured threshold and,
on a match, fires two independent side effects:

- webhook notification (async HTTP POST via WebhookNotifier)
- operator alert (log-only stub)

Both run as background tasks so neither blocks the other or the feed.
Outcomes are reported through counters and the event bus; a failed delivery
is never retried and the transaction still counts as handled.
"""

import asyncio
import logging
from typing import Optional

from .event_bus import EventBus, EventType
from .transaction import Transaction
from txwatch.monitoring.webhook_notifier import WebhookNotifier

logger = logging.getLogger(__name__)


class AlertDispatcher:
    """
    Risk predicate plus fire-and-forget alert delivery.

    Usage:
        dispatcher = AlertDispatcher(notifier, alert_threshold="HIGH RISK", event_bus=bus)

        matched = await dispatcher.evaluate(tx)

        # On shutdown
        await dispatcher.shutdown()
    """

    def __init__(
        self,
        notifier: WebhookNotifier,
        alert_threshold: str,
        event_bus: Optional[EventBus] = None
    ):
        """
        Args:
            notifier: Webhook notifier used for outbound alerts
            alert_threshold: Substring that marks a risk label as alert-worthy
            event_bus: Optional bus for outcome events
        """
        self.notifier = notifier
        self.alert_threshold = alert_threshold
        self.event_bus = event_bus

        # Statistics
        self.evaluated_count = 0
        self.alerts_matched = 0
        self.notifications_sent = 0
        self.notifications_failed = 0
        self.user_alerts = 0

        self._pending_tasks: set = set()

    def matches(self, tx: Transaction) -> bool:
        """
        Case-sensitive substring test of the threshold against tx.risk.

        Raises:
            TypeError: If tx.risk is missing or not a string
        """
        if not isinstance(tx.risk, str):
            raise TypeError(
                f"Transaction {tx.txid} has no usable risk label: {tx.risk!r}"
            )
        return self.alert_threshold in tx.risk

    async def evaluate(self, tx: Transaction) -> bool:
        """
        Evaluate a transaction and dispatch alerts on match.

        Args:
            tx: Decoded transaction

        Returns:
            True if the transaction matched the threshold
        """
        self.evaluated_count += 1

        if not self.matches(tx):
            return False

        self.alerts_matched += 1
        logger.info(f"⚠️ Transaction {tx.txid} matched '{self.alert_threshold}' (risk: {tx.risk})")

        await self._emit(EventType.ALERT_MATCHED, tx.to_dict())

        self._spawn(self._deliver_notification(tx))
        self._spawn(self._deliver_user_alert(tx))

        return True

    def alert_user(self, tx: Transaction):
        """Operator alert stub: logs only."""
        logger.warning(
            f"🔔 ALERT USER: high-risk transaction {tx.txid} "
            f"({tx.amount} BTC, risk: {tx.risk})"
        )

    def _spawn(self, coro):
        task = asyncio.create_task(coro)
        self._pending_tasks.add(task)
        task.add_done_callback(self._pending_tasks.discard)

    async def _deliver_notification(self, tx: Transaction):
        try:
            delivered = await self.notifier.notify(tx)
        except Exception as e:
            logger.error(f"Notification for transaction {tx.txid} raised: {e}", exc_info=True)
            delivered = False

        if delivered:
            self.notifications_sent += 1
            await self._emit(EventType.NOTIFICATION_SENT, {'txid': tx.txid})
        else:
            self.notifications_failed += 1
            logger.warning(f"Notification for transaction {tx.txid} failed (not retried)")
            await self._emit(
                EventType.NOTIFICATION_FAILED,
                {'txid': tx.txid, 'error': self.notifier.last_error}
            )

    async def _deliver_user_alert(self, tx: Transaction):
        try:
            self.alert_user(tx)
        except Exception as e:
            logger.error(f"User alert for transaction {tx.txid} raised: {e}", exc_info=True)
            return

        self.user_alerts += 1
        await self._emit(EventType.USER_ALERTED, {'txid': tx.txid})

    async def _emit(self, event_type: EventType, data):
        if self.event_bus:
            await self.event_bus.emit(event_type, data)

    @property
    def pending_count(self) -> int:
        return len(self._pending_tasks)

    async def wait_idle(self):
        """Wait until all dispatched alerts have finished."""
        while self._pending_tasks:
            await asyncio.gather(*list(self._pending_tasks), return_exceptions=True)

    async def shutdown(self):
        """Join in-flight alerts and log final stats."""
        if self._pending_tasks:
            logger.info(f"Waiting for {len(self._pending_tasks)} in-flight alerts...")
        await self.wait_idle()
        logger.info(f"Alert dispatcher stopped. Final stats: {self.get_stats()}")

    def get_stats(self) -> dict:
        """
        Get dispatcher statistics.

        Returns:
            Dict with stats
        """
        return {
            'alert_threshold': self.alert_threshold,
            'evaluated_count': self.evaluated_count,
            'alerts_matched': self.alerts_matched,
            'notifications_sent': self.notifications_sent,
            'notifications_failed': self.notifications_failed,
            'user_alerts': self.user_alerts,
            'pending': len(self._pending_tasks)
        }
