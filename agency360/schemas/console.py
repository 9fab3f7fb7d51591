"""
Console view schemas (API contract for the renderer): edit surfaces, submit and
delete outcomes.
"""

from typing import Literal

from pydantic import BaseModel

from agency360.schemas.account import Account, AccountForm
from agency360.schemas.notification import Notification
from agency360.schemas.product import Product, ProductForm


class SelectionEntryView(BaseModel):
    account_id: str
    link_id: str | None = None


class LinkOperationView(BaseModel):
    kind: Literal["create", "delete"]
    product_id: str
    target_id: str
    error: str | None = None


class LinkResultView(BaseModel):
    succeeded: list[LinkOperationView] = []
    failed: list[LinkOperationView] = []


class AccountEditorView(BaseModel):
    entity_id: str | None = None
    is_edit: bool
    is_open: bool
    is_submitting: bool
    form: AccountForm


class ProductEditorView(BaseModel):
    entity_id: str | None = None
    is_edit: bool
    is_open: bool
    is_submitting: bool
    form: ProductForm
    baseline_link_ids: list[str]
    selection: list[SelectionEntryView]
    pending_additions: list[str]
    pending_removals: list[str]


class ToggleResponse(BaseModel):
    account_id: str
    selected: bool


class AccountSubmitResponse(BaseModel):
    success: bool
    account: Account | None = None
    notifications: list[Notification] = []


class ProductSubmitResponse(BaseModel):
    success: bool
    product: Product | None = None
    links: LinkResultView | None = None
    notifications: list[Notification] = []


class DeleteResponse(BaseModel):
    success: bool
    links: LinkResultView | None = None
    notifications: list[Notification] = []
