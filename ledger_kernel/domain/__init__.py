"""
Pure domain layer.

Immutable inputs, results and posting intents with no Session access.
"""

from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.dtos import ConfigValidation, EntryInput, LineInput, PeriodInfo
from ledger_kernel.domain.posting_intent import (
    IntentLine,
    LineSide,
    PostingIntent,
    SourceType,
    ThirdParty,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "ConfigValidation",
    "EntryInput",
    "LineInput",
    "PeriodInfo",
    "IntentLine",
    "LineSide",
    "PostingIntent",
    "SourceType",
    "ThirdParty",
]
