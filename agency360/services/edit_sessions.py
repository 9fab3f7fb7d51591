"""
Edit surfaces for accounts and products.

A session owns the form, the submit flag and (for products) the account picker:
the baseline link ids captured at open time and the selection toggled from them.
Each open bumps a generation counter so late results can tell the session moved on.
"""

from itertools import count
from typing import Iterable

from agency360.schemas.account import Account, AccountForm
from agency360.schemas.link import ProductAccountView
from agency360.schemas.product import Product, ProductForm
from agency360.services.list_controller import ListController, account_list
from agency360.services.reconciler import ReconciliationPlan, Selection, reconcile

_generations = count(1)


class EditSession:
    """State shared by both edit surfaces."""

    def __init__(self, entity_id: str | None) -> None:
        self.entity_id = entity_id
        self.is_open = True
        self.is_submitting = False
        self.generation = next(_generations)

    @property
    def is_edit(self) -> bool:
        return self.entity_id is not None

    def close(self) -> None:
        self.is_open = False
        self.is_submitting = False

    def is_current(self, generation: int) -> bool:
        """True if a result started under `generation` may still be written here."""
        return self.is_open and self.generation == generation


class AccountEditSession(EditSession):
    def __init__(self, account: Account | None = None) -> None:
        super().__init__(account.id if account else None)
        self.form = AccountForm.from_account(account) if account else AccountForm()


class ProductEditSession(EditSession):
    """
    Product form plus account picker. In edit mode the baseline comes from the
    product's links at open time and is never re-fetched during the session.
    """

    def __init__(
        self,
        product: Product | None = None,
        links: Iterable[ProductAccountView] = (),
        accounts: Iterable[Account] = (),
        picker_page_size: int = 5,
    ) -> None:
        super().__init__(product.id if product else None)
        self.product = product
        self.form = ProductForm.from_product(product) if product else ProductForm()
        links = list(links) if product else []
        self.baseline_link_ids: tuple[str, ...] = tuple(link.id for link in links)
        self.selection = Selection.from_links(links)
        self.picker: ListController[Account] = account_list(page_size=picker_page_size, items=accounts)

    def toggle_account(self, account_id: str) -> bool:
        return self.selection.toggle(account_id)

    def is_selected(self, account_id: str) -> bool:
        return self.selection.is_selected(account_id)

    def plan(self) -> ReconciliationPlan:
        return reconcile(self.selection, self.baseline_link_ids)
