"""
Association reconciler: selection + baseline -> minimal link create/delete set.

The selection is built by toggling from the baseline captured when a product edit
session opens. Each entry pairs an account id with the link id it already had
(carried through untouched) or None (a new link is needed). Submission never
re-reads server state:

- additions = entries with link_id None
- removals  = baseline link ids - link ids carried by the selection
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Literal, Protocol, Sequence

from agency360.schemas.link import ProductAccountView
from agency360.services.backend_service import BackendServiceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionEntry:
    """A checked account; link_id is set only if the link existed at session start."""
    account_id: str
    link_id: str | None = None


class Selection:
    """Ordered set of SelectionEntry, at most one per account."""

    def __init__(self, entries: Iterable[SelectionEntry] = ()) -> None:
        self._entries: list[SelectionEntry] = []
        for entry in entries:
            if not self.is_selected(entry.account_id):
                self._entries.append(entry)

    @classmethod
    def from_links(cls, links: Iterable[ProductAccountView]) -> "Selection":
        return cls(SelectionEntry(account_id=link.account_id, link_id=link.id) for link in links)

    @property
    def entries(self) -> tuple[SelectionEntry, ...]:
        return tuple(self._entries)

    @property
    def account_ids(self) -> list[str]:
        return [e.account_id for e in self._entries]

    def is_selected(self, account_id: str) -> bool:
        return any(e.account_id == account_id for e in self._entries)

    def toggle(self, account_id: str) -> bool:
        """
        Uncheck if selected (dropping any carried link id), else check as new.
        Returns the new checked state.
        """
        for i, entry in enumerate(self._entries):
            if entry.account_id == account_id:
                del self._entries[i]
                return False
        self._entries.append(SelectionEntry(account_id=account_id, link_id=None))
        return True

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)


@dataclass(frozen=True)
class ReconciliationPlan:
    """Accounts to link and link ids to delete."""
    additions: tuple[str, ...] = ()
    removals: tuple[str, ...] = ()

    @property
    def operation_count(self) -> int:
        return len(self.additions) + len(self.removals)

    @property
    def is_empty(self) -> bool:
        return self.operation_count == 0


def reconcile(selection: Iterable[SelectionEntry], baseline_link_ids: Iterable[str]) -> ReconciliationPlan:
    """Diff the final selection against the baseline link ids.

    Args:
        selection: Every checked account with its carried link id (or None).
        baseline_link_ids: Link ids that existed when the session opened.

    Returns:
        ReconciliationPlan. Order follows the selection and the baseline.
    """
    additions: list[str] = []
    retained: set[str] = set()
    for entry in selection:
        if entry.link_id is None:
            if entry.account_id not in additions:
                additions.append(entry.account_id)
        else:
            retained.add(entry.link_id)

    removals: list[str] = []
    for link_id in baseline_link_ids:
        if link_id not in retained and link_id not in removals:
            removals.append(link_id)

    return ReconciliationPlan(additions=tuple(additions), removals=tuple(removals))


# -----------------------------------------------------------------------------
# Applying a plan
# -----------------------------------------------------------------------------

class LinkBackend(Protocol):
    def create_link(self, product_id: str, account_id: str) -> object: ...

    def delete_link(self, link_id: str) -> None: ...


@dataclass(frozen=True)
class LinkOperation:
    """One create or delete call and, when it failed, why."""
    kind: Literal["create", "delete"]
    product_id: str
    target_id: str  # account id for create, link id for delete
    error: str | None = None


@dataclass
class LinkOperationResult:
    succeeded: list[LinkOperation] = field(default_factory=list)
    failed: list[LinkOperation] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed

    def failed_plan(self) -> ReconciliationPlan:
        """Plan containing exactly the failed operations, for a retry."""
        return ReconciliationPlan(
            additions=tuple(op.target_id for op in self.failed if op.kind == "create"),
            removals=tuple(op.target_id for op in self.failed if op.kind == "delete"),
        )


def _attempt(op: LinkOperation, call, result: LinkOperationResult, tolerate_missing: bool) -> None:
    try:
        call()
    except BackendServiceError as e:
        if tolerate_missing and e.status_code == 404:
            logger.info("Link %s already gone; treating delete as done", op.target_id)
            result.succeeded.append(op)
            return
        logger.warning("Link %s %s for product %s failed: %s", op.kind, op.target_id, op.product_id, e.message)
        result.failed.append(
            LinkOperation(kind=op.kind, product_id=op.product_id, target_id=op.target_id, error=e.message)
        )
        return
    result.succeeded.append(op)


def apply_plan(
    backend: LinkBackend,
    product_id: str,
    plan: ReconciliationPlan,
    tolerate_missing: bool = False,
) -> LinkOperationResult:
    """
    Issue every delete, then every create, so a re-checked account never has two
    links at once. A failure never stops the remaining calls.
    With tolerate_missing, a 404 on delete counts as success.
    """
    result = LinkOperationResult()
    for link_id in plan.removals:
        op = LinkOperation(kind="delete", product_id=product_id, target_id=link_id)
        _attempt(op, lambda lid=link_id: backend.delete_link(lid), result, tolerate_missing)
    for account_id in plan.additions:
        op = LinkOperation(kind="create", product_id=product_id, target_id=account_id)
        _attempt(op, lambda a=account_id: backend.create_link(product_id, a), result, False)
    return result


def delete_links(backend: LinkBackend, product_id: str, link_ids: Sequence[str]) -> LinkOperationResult:
    """Delete the given links independently; missing links count as deleted."""
    return apply_plan(backend, product_id, ReconciliationPlan(removals=tuple(link_ids)), tolerate_missing=True)
