"""
Core module for shared domain infrastructure.

This module contains:
- Domain events, exceptions, value objects and the clock
- Event bus and audit logging
- Prometheus metrics
- Webhook delivery and background tasks
"""
