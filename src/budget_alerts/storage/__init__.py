# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

from budget_alerts.storage.file import JsonFileHistoryStore, JsonFileLedgerStore
from budget_alerts.storage.interface import LedgerStore, NotificationHistoryStore
from budget_alerts.storage.memory import MemoryHistoryStore, MemoryLedgerStore

__all__ = [
    "LedgerStore",
    "NotificationHistoryStore",
    "MemoryLedgerStore",
    "MemoryHistoryStore",
    "JsonFileLedgerStore",
    "JsonFileHistoryStore",
]
