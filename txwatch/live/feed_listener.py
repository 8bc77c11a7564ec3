"""
Transaction Feed Listener

Subscribes to the live payment transaction feed over WebSocket, decodes each
message, records it in the transaction log and hands it to the alert
dispatcher.

One connection per process start. Connection errors and closes are logged
and reported on the event bus; the listener never reconnects.
"""

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Optional

import websockets

from .alert_dispatcher import AlertDispatcher
from .event_bus import EventBus, EventType
from .transaction import Transaction, TransactionDecodeError, decode_transaction
from .transaction_log import TransactionLog

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """WebSocket connection states."""
    DISCONNECTED = 0
    CONNECTING = 1
    CONNECTED = 2
    FAILED = 3


# Errors raised by the socket itself (refused, bad URI, failed handshake, timeout).
CONNECTION_ERRORS = (OSError, websockets.WebSocketException, asyncio.TimeoutError)


class FeedListener:
    """
    WebSocket listener for the transaction feed.

    Usage:
        listener = FeedListener(
            feed_url="wss://feed.example.com/transactions",
            transaction_log=log,
            dispatcher=dispatcher,
            event_bus=bus
        )

        await listener.connect()
        await listener.listen()   # returns when the feed closes
    """

    def __init__(
        self,
        feed_url: str,
        transaction_log: TransactionLog,
        dispatcher: AlertDispatcher,
        event_bus: Optional[EventBus] = None
    ):
        """
        Args:
            feed_url: ws:// or wss:// URL of the feed
            transaction_log: Log that receives every decoded transaction
            dispatcher: Alert dispatcher evaluated for every decoded transaction
            event_bus: Optional bus for lifecycle and error events
        """
        self.feed_url = feed_url
        self.transaction_log = transaction_log
        self.dispatcher = dispatcher
        self.event_bus = event_bus

        # Connection state
        self.ws = None
        self.state = ConnectionState.DISCONNECTED

        # Health monitoring
        self.connected_at: Optional[datetime] = None
        self.last_message_time: Optional[datetime] = None
        self.message_count = 0
        self.transaction_count = 0
        self.decode_errors = 0
        self.processing_errors = 0
        self.connection_errors = 0

        self.should_stop = False

    async def connect(self) -> bool:
        """
        Open the feed connection.

        Returns:
            True if connected. Failure is logged, not raised.
        """
        if self.state in [ConnectionState.CONNECTED, ConnectionState.CONNECTING]:
            logger.warning("Already connected or connecting")
            return self.state == ConnectionState.CONNECTED

        self.state = ConnectionState.CONNECTING
        logger.info(f"Connecting to transaction feed {self.feed_url}")

        try:
            self.ws = await websockets.connect(self.feed_url)

        except CONNECTION_ERRORS as e:
            self.state = ConnectionState.FAILED
            self.connection_errors += 1
            logger.error(f"Feed connection failed: {e}")
            await self._emit(EventType.FEED_ERROR, {'stage': 'connect', 'error': str(e)})
            return False

        self.state = ConnectionState.CONNECTED
        self.connected_at = datetime.now()
        logger.info("✅ Connected to transaction feed, waiting for transactions")
        await self._emit(EventType.FEED_CONNECTED, {'feed_url': self.feed_url})
        return True

    async def listen(self):
        """
        Process messages until the feed closes or stop is requested.
        """
        if self.state != ConnectionState.CONNECTED:
            logger.error("Cannot listen - not connected")
            return

        close_info = {}

        try:
            async for message in self.ws:
                if self.should_stop:
                    logger.info("Stop requested, exiting listen loop")
                    break

                await self.process_message(message)

        except websockets.ConnectionClosed as e:
            # Abnormal close; a clean close just ends the loop above.
            close_info = {'code': e.rcvd.code if e.rcvd else None, 'reason': str(e)}
            logger.warning(f"Transaction feed connection closed: {e}")

        except CONNECTION_ERRORS as e:
            self.connection_errors += 1
            self.state = ConnectionState.FAILED
            logger.error(f"Transaction feed error: {e}")
            await self._emit(EventType.FEED_ERROR, {'stage': 'listen', 'error': str(e)})
            return

        self.state = ConnectionState.DISCONNECTED
        logger.info("Transaction feed closed")
        await self._emit(EventType.FEED_DISCONNECTED, close_info)

    async def process_message(self, message) -> Optional[Transaction]:
        """
        Handle one inbound message.

        Undecodable messages are logged and dropped. Decoded transactions are
        recorded and evaluated; any error while doing so is logged and the
        listener carries on.

        Args:
            message: Raw WebSocket message

        Returns:
            The decoded transaction, or None if it was dropped
        """
        self.message_count += 1
        self.last_message_time = datetime.now()

        try:
            tx = decode_transaction(message)
        except TransactionDecodeError as e:
            self.decode_errors += 1
            logger.error(f"Dropping feed message: {e}")
            await self._emit(EventType.DECODE_FAILED, {'error': str(e), 'message': _preview(message)})
            return None

        try:
            entry = self.transaction_log.record(tx)
            self.transaction_count += 1
            logger.debug(f"Transaction received: {entry.to_dict()}")
            await self._emit(EventType.TRANSACTION_RECEIVED, entry.to_dict())

            await self.dispatcher.evaluate(tx)

        except Exception as e:
            self.processing_errors += 1
            logger.error(f"Error processing transaction {tx.txid}: {e}")
            await self._emit(EventType.PROCESSING_FAILED, {'txid': tx.txid, 'error': str(e)})

        return tx

    async def disconnect(self):
        """Close the feed connection."""
        logger.info("Disconnecting from transaction feed")

        self.should_stop = True
        self.state = ConnectionState.DISCONNECTED

        if self.ws:
            await self.ws.close()

    async def _emit(self, event_type: EventType, data):
        if self.event_bus:
            await self.event_bus.emit(event_type, data)

    def get_stats(self) -> dict:
        """
        Get connection statistics.

        Returns:
            Dict with stats
        """
        return {
            'state': self.state.name,
            'feed_url': self.feed_url,
            'message_count': self.message_count,
            'transaction_count': self.transaction_count,
            'decode_errors': self.decode_errors,
            'processing_errors': self.processing_errors,
            'connection_errors': self.connection_errors,
            'last_message_time': self.last_message_time.isoformat() if self.last_message_time else None
        }


def _preview(message, limit: int = 200) -> str:
    text = message if isinstance(message, str) else repr(message)
    return text if len(text) <= limit else text[:limit] + '...'
