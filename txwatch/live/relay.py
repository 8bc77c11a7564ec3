"""
Notification Relay

Wires the feed listener, transaction log, alert dispatcher and webhook
notifier together and runs them until the feed closes.
"""
import asyncio
import logging
import signal
from datetime import datetime
from typing import Optional

from .alert_dispatcher import AlertDispatcher
from .event_bus import EventBus, EventType
from .feed_listener import FeedListener
from .transaction import Transaction
from .transaction_log import TransactionLog
from txwatch.config.relay_config import RelayConfig
from txwatch.monitoring.webhook_notifier import WebhookNotifier


class NotificationRelay:
    """
    Transaction alert relay.

    Usage:
        relay = NotificationRelay(RelayConfig.from_env())
        await relay.run()

    The notifier, the operator alert stub and the transaction log are exposed
    for direct use:
        await relay.notify(tx)
        relay.alert_user(tx)
        relay.transaction_log.entries()
    """

    def __init__(self, config: RelayConfig, event_bus: Optional[EventBus] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.running = False
        self.started_at: Optional[datetime] = None
        self._shutdown_task: Optional[asyncio.Future] = None

        self.event_bus = event_bus or EventBus()
        self.transaction_log = TransactionLog(capacity=config.log_capacity)
        self.notifier = WebhookNotifier(config.webhook_url, timeout=config.webhook_timeout)
        self.dispatcher = AlertDispatcher(
            self.notifier,
            alert_threshold=config.alert_threshold,
            event_bus=self.event_bus
        )
        self.listener = FeedListener(
            feed_url=config.feed_url,
            transaction_log=self.transaction_log,
            dispatcher=self.dispatcher,
            event_bus=self.event_bus
        )

        self._setup_event_handlers()

    def _setup_event_handlers(self):
        self.event_bus.subscribe(EventType.NOTIFICATION_FAILED, self._on_notification_failed)

    async def _on_notification_failed(self, event):
        self.logger.warning(
            f"Webhook delivery failed for {event.data.get('txid')} "
            f"({self.dispatcher.notifications_failed} failures so far)"
        )

    def _setup_signal_handlers(self):
        """Shut down on SIGTERM/SIGINT."""
        def signal_handler(signum, frame):
            signame = 'SIGTERM' if signum == signal.SIGTERM else 'SIGINT'
            self.logger.info(f"📡 Received {signame}, initiating shutdown...")
            asyncio.get_event_loop().create_task(self.shutdown())

        signal.signal(signal.SIGTERM, signal_handler)
        signal.signal(signal.SIGINT, signal_handler)

    async def notify(self, tx: Transaction) -> bool:
        """Send the webhook alert for a transaction."""
        return await self.notifier.notify(tx)

    def alert_user(self, tx: Transaction):
        """Operator alert stub (log only)."""
        self.dispatcher.alert_user(tx)

    async def run(self, handle_signals: bool = True):
        """
        Connect to the feed and process transactions until it closes.

        Returns after shutdown has finished, including in-flight alerts.

        Args:
            handle_signals: Install SIGTERM/SIGINT handlers
        """
        self.running = True
        self.started_at = datetime.now()
        self._shutdown_task = None
        self.logger.info(f"🚀 Starting relay: {self.config}")

        if handle_signals:
            self._setup_signal_handlers()

        if await self.listener.connect():
            if self.listener.should_stop:
                # Shutdown arrived while the connection was opening
                await self.listener.disconnect()
            else:
                await self.listener.listen()

        await self.shutdown()

    async def shutdown(self):
        """
        Close the feed, let in-flight alerts finish and log final stats.

        run() and the signal handler await the same shutdown task.
        """
        if self._shutdown_task is None:
            self._shutdown_task = asyncio.ensure_future(self._shutdown())
        await self._shutdown_task

    async def _shutdown(self):
        if not self.running:
            return

        self.running = False
        self.logger.info("🛑 Shutting down relay...")

        await self.listener.disconnect()
        await self.dispatcher.shutdown()
        await self.event_bus.shutdown()

        self.logger.info(f"Final stats: {self.get_stats()}")
        self.logger.info("✅ Relay stopped")

    def get_stats(self) -> dict:
        return {
            'started_at': self.started_at.isoformat() if self.started_at else None,
            'feed': self.listener.get_stats(),
            'transaction_log': self.transaction_log.get_stats(),
            'dispatcher': self.dispatcher.get_stats(),
            'notifier': self.notifier.get_stats(),
            'recent_delivery_failures': [
                event.data
                for event in self.event_bus.recent(EventType.NOTIFICATION_FAILED, limit=5)
            ]
        }
