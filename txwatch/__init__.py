"""
txwatch - Transaction Alert Relay

Listens to a live payment transaction feed, keeps a bounded log of what it
has seen and posts high-risk transactions to a chat webhook.
"""

__version__ = "0.1.0"
