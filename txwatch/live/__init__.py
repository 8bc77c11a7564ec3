"""
Live relay module.

Provides:
- WebSocket transaction feed listener
- Bounded transaction log
- Risk-threshold alert dispatch
- Event bus for feed and delivery outcomes
"""
