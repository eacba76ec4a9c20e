"""Synchronization services."""

from stablesync.services.matching import RecordType, natural_key
from stablesync.services.notifications import LoggingNotifier, Notifier, WebhookNotifier, build_notifier
from stablesync.services.pedigree_policy import merge_slots, should_replace
from stablesync.services.reconciliation_service import Delta, ReconciliationService
from stablesync.services.sync_orchestrator import HorseRef, SyncOrchestrator

__all__ = [
    "RecordType",
    "natural_key",
    "should_replace",
    "merge_slots",
    "Delta",
    "ReconciliationService",
    "Notifier",
    "LoggingNotifier",
    "WebhookNotifier",
    "build_notifier",
    "HorseRef",
    "SyncOrchestrator",
]
