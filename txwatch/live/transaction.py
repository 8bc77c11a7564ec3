"""
Transaction model

Decoded feed messages and the entries recorded for them.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional


class TransactionDecodeError(ValueError):
    """Raised when a feed message is not a JSON object."""


@dataclass
class Transaction:
    """Payment transaction as received from the feed."""
    txid: Any
    amount: Any
    risk: Optional[str]

    @classmethod
    def from_dict(cls, data: dict) -> 'Transaction':
        # Fields are taken verbatim; a missing risk label surfaces later in the predicate.
        return cls(
            txid=data.get('txid'),
            amount=data.get('amount'),
            risk=data.get('risk')
        )

    def to_dict(self):
        """Convert to dictionary."""
        return {
            'txid': self.txid,
            'amount': self.amount,
            'risk': self.risk
        }


@dataclass
class LogEntry:
    """Transaction log entry with the time it was received."""
    timestamp: str
    txid: Any
    amount: Any
    risk: Optional[str]

    @classmethod
    def from_transaction(cls, tx: Transaction, received_at: Optional[datetime] = None) -> 'LogEntry':
        received_at = received_at or datetime.now(timezone.utc)
        return cls(
            timestamp=received_at.isoformat(),
            txid=tx.txid,
            amount=tx.amount,
            risk=tx.risk
        )

    def to_dict(self):
        """Convert to dictionary."""
        return {
            'timestamp': self.timestamp,
            'txid': self.txid,
            'amount': self.amount,
            'risk': self.risk
        }


def decode_transaction(message) -> Transaction:
    """
    Decode a raw feed message.

    Args:
        message: Raw text (or bytes) from the WebSocket

    Returns:
        Transaction

    Raises:
        TransactionDecodeError: If the message is not valid JSON or not a JSON object
    """
    try:
        data = json.loads(message)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise TransactionDecodeError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise TransactionDecodeError(
            f"Expected JSON object, got {type(data).__name__}"
        )

    return Transaction.from_dict(data)
