# Services: backend client, list controller, reconciler, notifications, sync coordinator, console

from agency360.services.backend_service import (
    BackendService,
    BackendServiceError,
    ReadFailure,
    WriteFailure,
    get_backend_service,
)
from agency360.services.console import Console, EditorNotOpen, get_console
from agency360.services.edit_sessions import AccountEditSession, ProductEditSession
from agency360.services.list_controller import (
    ListController,
    ListState,
    account_list,
    highlight_matches,
    product_list,
    reduce,
)
from agency360.services.notifications import NotificationQueue
from agency360.services.reconciler import (
    LinkOperation,
    LinkOperationResult,
    ReconciliationPlan,
    Selection,
    SelectionEntry,
    apply_plan,
    reconcile,
)
from agency360.services.sync_coordinator import DeleteOutcome, EntitySyncCoordinator, SubmitOutcome

__all__ = [
    "BackendService",
    "BackendServiceError",
    "ReadFailure",
    "WriteFailure",
    "get_backend_service",
    "Console",
    "EditorNotOpen",
    "get_console",
    "AccountEditSession",
    "ProductEditSession",
    "ListController",
    "ListState",
    "account_list",
    "product_list",
    "highlight_matches",
    "reduce",
    "NotificationQueue",
    "LinkOperation",
    "LinkOperationResult",
    "ReconciliationPlan",
    "Selection",
    "SelectionEntry",
    "apply_plan",
    "reconcile",
    "DeleteOutcome",
    "EntitySyncCoordinator",
    "SubmitOutcome",
]
