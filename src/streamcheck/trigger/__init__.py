"""Rebuild Trigger - Dispatches build workflows for drifted projects."""

from streamcheck.trigger.exceptions import TriggerError
from streamcheck.trigger.models import TriggerAck
from streamcheck.trigger.trigger import RebuildTrigger

__all__ = [
    "RebuildTrigger",
    "TriggerAck",
    "TriggerError",
]
