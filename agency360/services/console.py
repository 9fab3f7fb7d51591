"""
Console: the page-level state owner. One instance per console session.

Holds the accounts and products list controllers, the notification queue, the open
edit surfaces, and routes user actions to the sync coordinator.
"""

import logging
from typing import Iterable

from fastapi import Request

from agency360.core.config import Settings
from agency360.schemas.account import Account, AccountForm
from agency360.schemas.common import ListView
from agency360.schemas.product import Product, ProductForm
from agency360.services.backend_service import BackendService, BackendServiceError
from agency360.services.edit_sessions import AccountEditSession, ProductEditSession
from agency360.services.list_controller import ListController, account_list, product_list
from agency360.services.notifications import NotificationQueue
from agency360.services.reconciler import LinkOperationResult
from agency360.services.sync_coordinator import DeleteOutcome, EntitySyncCoordinator, SubmitOutcome

logger = logging.getLogger(__name__)

ACCOUNTS = "accounts"
PRODUCTS = "products"

# Singular label used in "Please select at least one ..." messages.
_SELECT_LABELS = {ACCOUNTS: "Account", PRODUCTS: "product"}


class EditorNotOpen(RuntimeError):
    """An editor action arrived while no edit surface of that kind is open."""


def list_view(controller: ListController, filter_text: str | None = None, page: int | None = None) -> ListView:
    """Apply optional filter/page changes, then render the controller's current page."""
    if filter_text is not None:
        controller.set_filter(filter_text)
    if page is not None:
        controller.set_page(page)
    state = controller.state
    return ListView(
        items=controller.visible_page(),
        page_index=state.page_index,
        page_count=controller.page_count(),
        page_size=state.page_size,
        filtered_count=controller.filtered_count(),
        filter_text=state.filter_text,
        is_loading=state.is_loading,
    )


class Console:
    def __init__(self, backend: BackendService, settings: Settings) -> None:
        self.settings = settings
        self.backend = backend
        self.notifications = NotificationQueue()
        self.accounts: ListController[Account] = account_list(page_size=settings.list_page_size)
        self.products: ListController[Product] = product_list(page_size=settings.list_page_size)
        self.coordinator = EntitySyncCoordinator(backend, self.accounts, self.products, self.notifications)
        self.account_editor: AccountEditSession | None = None
        self.product_editor: ProductEditSession | None = None

    def load(self) -> None:
        """Initial fetch of both collections. Each ends its loading phase exactly once."""
        self.coordinator.load_accounts()
        self.coordinator.load_products()

    # -------------------------------------------------------------------------
    # Account edit surface
    # -------------------------------------------------------------------------

    def open_account_editor(self, account_id: str | None = None) -> AccountEditSession:
        account = None
        if account_id is not None:
            account = self.accounts.get(account_id)
            if account is None:
                raise LookupError(f"Account {account_id} not found")
        self.account_editor = AccountEditSession(account)
        return self.account_editor

    def _require_account_editor(self) -> AccountEditSession:
        if self.account_editor is None or not self.account_editor.is_open:
            raise EditorNotOpen("No account editor is open")
        return self.account_editor

    def update_account_form(self, form: AccountForm) -> AccountEditSession:
        session = self._require_account_editor()
        if session.is_edit:
            # Join timestamp is read-only once set.
            form = form.model_copy(update={"joined_timestamp": session.form.joined_timestamp})
        session.form = form
        return session

    def submit_account(self) -> SubmitOutcome:
        return self.coordinator.submit_account(self._require_account_editor())

    def close_account_editor(self) -> None:
        if self.account_editor is not None:
            self.account_editor.close()
        self.account_editor = None

    # -------------------------------------------------------------------------
    # Product edit surface
    # -------------------------------------------------------------------------

    def open_product_editor(self, product_id: str | None = None) -> ProductEditSession | None:
        """
        Open a create or edit session. In edit mode the product's current links are
        read once here and become the baseline. Returns None if they cannot be read.
        """
        product = None
        links: Iterable = ()
        if product_id is not None:
            product = self.products.get(product_id)
            if product is None:
                raise LookupError(f"Product {product_id} not found")
            try:
                links = self.backend.list_product_account_views(product_id)
            except BackendServiceError as e:
                logger.warning("Error fetching linked accounts for %s: %s", product_id, e.message)
                self.notifications.error(f"Error fetching linked accounts: {e.message}")
                return None
        self.product_editor = ProductEditSession(
            product,
            links=links,
            accounts=self.accounts.collection,
            picker_page_size=self.settings.picker_page_size,
        )
        return self.product_editor

    def _require_product_editor(self) -> ProductEditSession:
        if self.product_editor is None or not self.product_editor.is_open:
            raise EditorNotOpen("No product editor is open")
        return self.product_editor

    def update_product_form(self, form: ProductForm) -> ProductEditSession:
        session = self._require_product_editor()
        session.form = form
        return session

    def toggle_product_account(self, account_id: str) -> bool:
        session = self._require_product_editor()
        if not session.is_selected(account_id) and session.picker.get(account_id) is None:
            raise LookupError(f"Account {account_id} not found")
        return session.toggle_account(account_id)

    def picker_view(self, filter_text: str | None = None, page: int | None = None) -> ListView:
        return list_view(self._require_product_editor().picker, filter_text, page)

    def submit_product(self) -> SubmitOutcome:
        return self.coordinator.submit_product(self._require_product_editor())

    def close_product_editor(self) -> None:
        if self.product_editor is not None:
            self.product_editor.close()
        self.product_editor = None

    def retry_links(self, product_id: str | None = None) -> LinkOperationResult | None:
        return self.coordinator.retry_link_operations(product_id)

    # -------------------------------------------------------------------------
    # Deletes and bulk actions
    # -------------------------------------------------------------------------

    def delete_product(self, product_id: str) -> DeleteOutcome:
        return self.coordinator.delete_product(product_id)

    def delete_account(self, account_id: str) -> DeleteOutcome:
        return self.coordinator.delete_account(account_id)

    def handle_action(self, kind: str, action: str, selected_ids: list[str]) -> list[DeleteOutcome]:
        """Apply an action-menu entry to the checked rows of a list."""
        if kind not in _SELECT_LABELS:
            raise ValueError(f"Unknown list: {kind}")
        if not selected_ids:
            self.notifications.info(f"Please select at least one {_SELECT_LABELS[kind]}")
            return []
        if action == "delete":
            delete = self.delete_products_action if kind == PRODUCTS else self.delete_accounts_action
            return delete(selected_ids)
        self.notifications.info(f"{action} action will be performed on {len(selected_ids)} selected {kind}")
        return []

    def delete_products_action(self, product_ids: list[str]) -> list[DeleteOutcome]:
        outcomes = [self.delete_product(pid) for pid in product_ids]
        self._summarize_deletes(PRODUCTS, outcomes)
        return outcomes

    def delete_accounts_action(self, account_ids: list[str]) -> list[DeleteOutcome]:
        outcomes = [self.delete_account(aid) for aid in account_ids]
        self._summarize_deletes(ACCOUNTS, outcomes)
        return outcomes

    def _summarize_deletes(self, kind: str, outcomes: list[DeleteOutcome]) -> None:
        """
        Replace the per-item messages with one covering the whole batch. A single
        delete keeps its own, more specific message.
        """
        if len(outcomes) < 2:
            return
        deleted = sum(1 for o in outcomes if o.success)
        failed = len(outcomes) - deleted
        if not failed:
            self.notifications.success(f"{deleted} {kind} deleted successfully")
        elif deleted:
            self.notifications.warning(f"Deleted {deleted} of {len(outcomes)} selected {kind}; {failed} failed.")
        else:
            self.notifications.error(f"Error deleting {kind}: none of the {failed} selected could be deleted.")


def get_console(request: Request) -> Console:
    """Dependency: the console owned by the running application."""
    return request.app.state.console
