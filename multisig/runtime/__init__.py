"""
multisig.runtime — collaborators around the logic modules.

Submodules
----------
- executor   : ActionExecutor protocol and the InMemoryLedger reference executor
- event_sink : staged notification delivery (published on commit)
"""

from __future__ import annotations

from .event_sink import NotificationSink
from .executor import ActionExecutor, InMemoryLedger

__all__ = ["ActionExecutor", "InMemoryLedger", "NotificationSink"]
