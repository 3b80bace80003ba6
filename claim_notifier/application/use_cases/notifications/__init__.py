"""Scheduled digests, SLA alerts and claim lifecycle notifications."""

from .content import all_clear_summary, generate
from .dispatch import DispatchCoordinator
from .due import DueSlot, compute_slot, due_predicate, is_due, slot_for_preference
from .lifecycle import notify_claim_assigned, notify_claim_resolved, notify_new_claim
from .manual_trigger import ManualTriggerGateway
from .scheduler import NotificationScheduler

__all__ = [
    "DispatchCoordinator",
    "DueSlot",
    "ManualTriggerGateway",
    "NotificationScheduler",
    "all_clear_summary",
    "compute_slot",
    "due_predicate",
    "generate",
    "is_due",
    "notify_claim_assigned",
    "notify_claim_resolved",
    "notify_new_claim",
    "slot_for_preference",
]
