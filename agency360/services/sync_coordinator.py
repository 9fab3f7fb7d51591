"""
Entity sync coordinator: create/update/delete of accounts and products against the
backend, folding confirmed results into the list controllers and posting the outcome
to the notification queue.

Local collections change only after the backend confirms a write. Every backend
failure is caught here and turned into a notification; nothing propagates further.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from agency360.schemas.account import Account
from agency360.schemas.product import Product
from agency360.services.backend_service import BackendService, BackendServiceError
from agency360.services.edit_sessions import AccountEditSession, ProductEditSession
from agency360.services.list_controller import (
    AppendEntity,
    ListController,
    LoadCompleted,
    LoadFailed,
    ReplaceCollection,
    ReplaceEntity,
)
from agency360.services.notifications import NotificationQueue
from agency360.services.reconciler import LinkOperationResult, apply_plan, delete_links

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SubmitOutcome:
    success: bool
    entity: Account | Product | None = None
    links: LinkOperationResult | None = None
    error: str | None = None


@dataclass
class DeleteOutcome:
    success: bool
    links: LinkOperationResult | None = None
    error: str | None = None


class EntitySyncCoordinator:
    """
    Mediates writes for both entity kinds. Holds no state of its own beyond the
    pending link failures per product, kept so the caller can retry exactly the
    failed subset.
    """

    def __init__(
        self,
        backend: BackendService,
        accounts: ListController[Account],
        products: ListController[Product],
        notifications: NotificationQueue,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._backend = backend
        self._accounts = accounts
        self._products = products
        self._notifications = notifications
        self._clock = clock
        self.pending_link_failures: dict[str, LinkOperationResult] = {}

    # -------------------------------------------------------------------------
    # Collection reads
    # -------------------------------------------------------------------------

    def load_accounts(self) -> bool:
        return self._load(self._accounts, self._backend.list_accounts, "accounts")

    def load_products(self) -> bool:
        return self._load(self._products, self._backend.list_products, "products")

    def _load(self, controller: ListController, fetch: Callable[[], list], label: str) -> bool:
        """Initial fetch, or a full refetch once loading has ended."""
        initial = controller.is_loading
        try:
            items = fetch()
        except BackendServiceError as e:
            logger.warning("Error fetching %s: %s", label, e.message)
            if initial:
                controller.dispatch(LoadFailed())
            self._notifications.error(f"Error fetching {label}: {e.message}")
            return False
        controller.dispatch(LoadCompleted(items) if initial else ReplaceCollection(items))
        return True

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def submit_account(self, session: AccountEditSession) -> SubmitOutcome:
        verb = "updating" if session.is_edit else "creating"
        generation = session.generation
        session.is_submitting = True
        try:
            if session.is_edit:
                update = session.form.to_update()
                self._backend.update_account(session.entity_id, update)
                current = self._accounts.get(session.entity_id)
                if current is not None:
                    entity = current.model_copy(update=update.model_dump(exclude_none=True))
                else:
                    entity = Account(id=session.entity_id, **session.form.model_dump())
                self._accounts.dispatch(ReplaceEntity(entity))
            else:
                payload = session.form.to_create().with_join_date(self._clock().date())
                entity = self._backend.create_account(payload)
                self._accounts.dispatch(AppendEntity(entity))
        except BackendServiceError as e:
            logger.warning("Error %s account: %s", verb, e.message)
            session.is_submitting = False
            self._notifications.error(f"Error {verb} account!")
            return SubmitOutcome(success=False, error=e.message)

        if session.is_current(generation):
            session.close()
        self._notifications.success(
            "Account updated successfully!" if session.is_edit else "Account created successfully!"
        )
        return SubmitOutcome(success=True, entity=entity)

    def delete_account(self, account_id: str) -> DeleteOutcome:
        try:
            self._backend.delete_account(account_id)
        except BackendServiceError as e:
            logger.warning("Error deleting account %s: %s", account_id, e.message)
            self._notifications.error("Error deleting account!")
            return DeleteOutcome(success=False, error=e.message)
        self._notifications.success("Account deleted successfully")
        if not self.load_accounts():
            self._notifications.warning("Account deleted successfully, but the account list could not be refreshed")
        return DeleteOutcome(success=True)

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    def submit_product(self, session: ProductEditSession) -> SubmitOutcome:
        """
        Write the product, then reconcile its account links. A link failure does not
        undo the product write; it is reported as a warning with the failed subset.
        """
        verb = "updating" if session.is_edit else "creating"
        generation = session.generation
        session.is_submitting = True
        try:
            if session.is_edit:
                update = session.form.to_update()
                submitted_at = self._clock().isoformat()
                self._backend.update_product(session.entity_id, update)
                current = self._products.get(session.entity_id) or session.product
                fields = {**update.model_dump(exclude_none=True), "updated_at": submitted_at}
                if current is not None:
                    entity = current.model_copy(update=fields)
                else:
                    entity = Product(id=session.entity_id, **fields)
                self._products.dispatch(ReplaceEntity(entity))
            else:
                entity = self._backend.create_product(session.form.to_create())
                self._products.dispatch(AppendEntity(entity))
        except BackendServiceError as e:
            logger.warning("Error %s product: %s", verb, e.message)
            session.is_submitting = False
            self._notifications.error(f"Error {verb} product!")
            return SubmitOutcome(success=False, error=e.message)

        plan = session.plan()
        links = apply_plan(self._backend, entity.id, plan)
        logger.info(
            "Product %s links: %d added, %d removed, %d failed",
            entity.id,
            len(plan.additions),
            len(plan.removals),
            len(links.failed),
        )

        if session.is_current(generation):
            session.close()
        done = "updated" if session.is_edit else "created"
        if links.ok:
            self.pending_link_failures.pop(entity.id, None)
            self._notifications.success(f"Product {done} successfully!")
        else:
            self.pending_link_failures[entity.id] = links
            self._notifications.warning(
                f"Product {done}, but {len(links.failed)} of {links.total} account link changes failed."
            )
        return SubmitOutcome(success=True, entity=entity, links=links)

    def retry_link_operations(self, product_id: str | None = None) -> LinkOperationResult | None:
        """
        Re-issue exactly the failed creates/deletes pending for one product, or for
        every product when no id is given. Products whose retry succeeds are cleared.
        """
        if product_id is None:
            product_ids = list(self.pending_link_failures)
        else:
            product_ids = [product_id] if product_id in self.pending_link_failures else []
        if not product_ids:
            self._notifications.info("No failed account link changes to retry")
            return None
        result = LinkOperationResult()
        for pid in product_ids:
            partial = apply_plan(
                self._backend, pid, self.pending_link_failures[pid].failed_plan(), tolerate_missing=True
            )
            if partial.ok:
                del self.pending_link_failures[pid]
            else:
                self.pending_link_failures[pid] = partial
            result.succeeded.extend(partial.succeeded)
            result.failed.extend(partial.failed)
        if result.ok:
            self._notifications.success("Account links updated successfully!")
        else:
            self._notifications.warning(f"{len(result.failed)} of {result.total} account link changes still failed.")
        return result

    def delete_product(self, product_id: str) -> DeleteOutcome:
        """
        Remove a product and its links. Every link delete is attempted; the product
        itself is deleted only when none of them failed. Safe to call again.
        """
        try:
            existing = self._backend.list_product_links(product_id)
        except BackendServiceError as e:
            logger.warning("Error fetching links of product %s: %s", product_id, e.message)
            self._notifications.error("Error deleting product: could not read its account links")
            return DeleteOutcome(success=False, error=e.message)

        links = delete_links(self._backend, product_id, [link.id for link in existing])
        if not links.ok:
            logger.warning(
                "Product %s not deleted: %d of %d link deletions failed",
                product_id,
                len(links.failed),
                links.total,
            )
            self._notifications.error(
                f"Error deleting product: {len(links.failed)} account link(s) could not be removed. "
                "The product was not deleted; try again."
            )
            return DeleteOutcome(success=False, links=links, error="link deletion failed")

        try:
            self._backend.delete_product(product_id)
        except BackendServiceError as e:
            logger.warning("Error deleting product %s: %s", product_id, e.message)
            self._notifications.error("Error deleting product!")
            return DeleteOutcome(success=False, links=links, error=e.message)

        self.pending_link_failures.pop(product_id, None)
        self._notifications.success("Product deleted successfully")
        if not self.load_products():
            self._notifications.warning("Product deleted successfully, but the product list could not be refreshed")
        return DeleteOutcome(success=True, links=links)
