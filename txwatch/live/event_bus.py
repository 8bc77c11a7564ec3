"""
Event Bus

Outcome channel for the relay. Feed lifecycle, decode/processing failures
and alert delivery results are published here, counted per type and kept in
a short rolling history so failures are visible outside the component that
hit them.
"""

import asyncio
import inspect
import logging
from collections import deque
from typing import Callable, Dict, List, Any, Optional
from enum import Enum
from dataclasses import dataclass
from datetime import datetime

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Event types in the relay."""

    # Feed events
    FEED_CONNECTED = "feed_connected"
    FEED_DISCONNECTED = "feed_disconnected"
    FEED_ERROR = "feed_error"

    # Message events
    TRANSACTION_RECEIVED = "transaction_received"
    DECODE_FAILED = "decode_failed"
    PROCESSING_FAILED = "processing_failed"

    # Alert events
    ALERT_MATCHED = "alert_matched"
    NOTIFICATION_SENT = "notification_sent"
    NOTIFICATION_FAILED = "notification_failed"
    USER_ALERTED = "user_alerted"


@dataclass
class Event:
    """Published event."""

    event_type: EventType
    timestamp: datetime
    data: Any

    def __repr__(self):
        return f"Event(type={self.event_type.value}, timestamp={self.timestamp}, data={self.data})"


class EventBus:
    """
    Async outcome channel.

    Handlers (async or sync) run as background tasks; a failing handler is
    logged and counted and does not affect the others.

    Usage:
        bus = EventBus(history_size=200)
        bus.subscribe(EventType.NOTIFICATION_FAILED, handle_failure)

        await bus.emit(EventType.NOTIFICATION_FAILED, {'txid': 'tx1'})

        bus.recent(EventType.NOTIFICATION_FAILED)   # newest first
    """

    def __init__(self, history_size: int = 100):
        """
        Args:
            history_size: Events kept for recent(); 0 disables history
        """
        self.history: deque = deque(maxlen=history_size)

        # Event handlers: {EventType: [handler_func, ...]}
        self.handlers: Dict[EventType, List[Callable]] = {}

        # Statistics
        self.events_emitted = 0
        self.events_by_type: Dict[EventType, int] = {et: 0 for et in EventType}
        self.handler_errors = 0

        self.should_stop = False

        self._pending_tasks: set = set()

    def subscribe(self, event_type: EventType, handler: Callable):
        """
        Register a handler for an event type.

        Args:
            event_type: Type of event to listen for
            handler: Callback taking the Event (async or sync)
        """
        self.handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed '{handler.__name__}' to {event_type.value}")

    async def emit(
        self,
        event_type: EventType,
        data: Any,
        timestamp: Optional[datetime] = None
    ):
        """
        Publish an event without waiting for handlers.

        Args:
            event_type: Type of event
            data: Event payload
            timestamp: Event timestamp (default: now)
        """
        if self.should_stop:
            return

        event = Event(
            event_type=event_type,
            timestamp=timestamp or datetime.now(),
            data=data
        )

        self.events_emitted += 1
        self.events_by_type[event_type] += 1
        self.history.append(event)

        for handler in self.handlers.get(event_type, []):
            task = asyncio.create_task(self._safe_call_handler(handler, event))
            self._pending_tasks.add(task)
            task.add_done_callback(self._pending_tasks.discard)

    async def _safe_call_handler(self, handler: Callable, event: Event):
        try:
            if inspect.iscoroutinefunction(handler):
                await handler(event)
            else:
                # Sync handlers run in the default executor
                loop = asyncio.get_running_loop()
                await loop.run_in_executor(None, handler, event)

        except Exception as e:
            self.handler_errors += 1
            logger.error(
                f"Error in handler '{handler.__name__}' for {event.event_type.value}: {e}",
                exc_info=True
            )

    def recent(self, event_type: Optional[EventType] = None, limit: int = 10) -> List[Event]:
        """
        Most recent events, newest first.

        Args:
            event_type: Only this type (None = all)
            limit: Max events to return
        """
        events = [
            e for e in reversed(self.history)
            if event_type is None or e.event_type == event_type
        ]
        return events[:limit]

    def get_stats(self) -> Dict:
        """
        Get event bus statistics.

        Returns:
            Dict with stats
        """
        return {
            'total_events_emitted': self.events_emitted,
            'handler_errors': self.handler_errors,
            'events_by_type': {
                et.value: count
                for et, count in self.events_by_type.items()
                if count > 0
            },
            'history_size': len(self.history)
        }

    async def shutdown(self):
        """Wait for pending handlers, then stop accepting events."""
        self.should_stop = True

        if self._pending_tasks:
            logger.info(f"Waiting for {len(self._pending_tasks)} pending event handlers...")
            await asyncio.gather(*self._pending_tasks, return_exceptions=True)

        logger.info(f"Event bus stopped. Final stats: {self.get_stats()}")
