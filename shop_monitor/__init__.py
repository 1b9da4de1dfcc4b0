"""
Shop monitoring service package.

This package contains modules for polling the Flavortown shop API,
detecting new and changed items against a persisted snapshot, rendering
Slack notifications and coordinating the polling loop.  See DESIGN.md for
details.
"""

__all__ = [
    "catalog",
    "config",
    "detector",
    "main",
    "markup",
    "models",
    "notifier",
    "prices",
    "render",
    "snapshot",
    "utils",
]
