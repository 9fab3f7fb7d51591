"""
Products endpoints: list view, edit surface with the account picker, submit with
link reconciliation, retry of failed link changes, delete, and bulk actions.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, status

from agency360.schemas.account import Account
from agency360.schemas.common import BulkActionRequest, EditorOpenRequest, ListView
from agency360.schemas.console import (
    DeleteResponse,
    LinkOperationView,
    LinkResultView,
    ProductEditorView,
    ProductSubmitResponse,
    SelectionEntryView,
    ToggleResponse,
)
from agency360.schemas.notification import NotificationListResponse
from agency360.schemas.product import Product, ProductForm
from agency360.services.console import PRODUCTS, Console, EditorNotOpen, get_console, list_view
from agency360.services.edit_sessions import ProductEditSession
from agency360.services.reconciler import LinkOperationResult

router = APIRouter(prefix="/products", tags=["products"])


def _link_result_view(result: LinkOperationResult | None) -> LinkResultView | None:
    if result is None:
        return None
    return LinkResultView(
        succeeded=[LinkOperationView(**asdict(op)) for op in result.succeeded],
        failed=[LinkOperationView(**asdict(op)) for op in result.failed],
    )


def _editor_view(session: ProductEditSession) -> ProductEditorView:
    plan = session.plan()
    return ProductEditorView(
        entity_id=session.entity_id,
        is_edit=session.is_edit,
        is_open=session.is_open,
        is_submitting=session.is_submitting,
        form=session.form,
        baseline_link_ids=list(session.baseline_link_ids),
        selection=[SelectionEntryView(account_id=e.account_id, link_id=e.link_id) for e in session.selection],
        pending_additions=list(plan.additions),
        pending_removals=list(plan.removals),
    )


def _require_editor(console: Console) -> ProductEditSession:
    if console.product_editor is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No product editor is open")
    return console.product_editor


@router.get(
    "",
    response_model=ListView[Product],
    summary="List products",
    description="Current page of the products list. filter/page update the list state before rendering.",
)
async def list_products(
    filter: str | None = Query(None, description="Free-text filter (name, owner, position)"),
    page: int | None = Query(None, ge=1, description="Page number (1-based)"),
    console: Console = Depends(get_console),
) -> ListView:
    """GET /api/v1/products: filtered, paginated view; placeholders while loading."""
    return list_view(console.products, filter, page)


@router.post("/editor", response_model=ProductEditorView, summary="Open product editor")
async def open_editor(
    body: EditorOpenRequest,
    console: Console = Depends(get_console),
) -> ProductEditorView:
    """Edit mode reads the product's links once; they become the reconciliation baseline."""
    try:
        session = console.open_product_editor(body.entity_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Could not read the product's linked accounts",
        )
    return _editor_view(session)


@router.get("/editor", response_model=ProductEditorView, summary="Current product editor")
async def get_editor(console: Console = Depends(get_console)) -> ProductEditorView:
    return _editor_view(_require_editor(console))


@router.put("/editor/form", response_model=ProductEditorView, summary="Replace product form")
async def update_form(
    form: ProductForm,
    console: Console = Depends(get_console),
) -> ProductEditorView:
    try:
        session = console.update_product_form(form)
    except EditorNotOpen as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return _editor_view(session)


@router.get("/editor/accounts", response_model=ListView[Account], summary="Account picker page")
async def picker_page(
    filter: str | None = Query(None, description="Free-text filter (name, email, status)"),
    page: int | None = Query(None, ge=1, description="Page number (1-based)"),
    console: Console = Depends(get_console),
) -> ListView:
    try:
        return console.picker_view(filter, page)
    except EditorNotOpen as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post("/editor/selection/{account_id}", response_model=ToggleResponse, summary="Toggle account")
async def toggle_account(
    account_id: str,
    console: Console = Depends(get_console),
) -> ToggleResponse:
    """Check or uncheck an account in the picker."""
    try:
        selected = console.toggle_product_account(account_id)
    except EditorNotOpen as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return ToggleResponse(account_id=account_id, selected=selected)


@router.post("/editor/submit", response_model=ProductSubmitResponse, summary="Submit product")
async def submit_editor(console: Console = Depends(get_console)) -> ProductSubmitResponse:
    """
    Create or update the product, then apply the link plan. A failed product write
    returns 502 and leaves the editor open; failed link changes are reported in `links`.
    """
    try:
        outcome = console.submit_product()
    except EditorNotOpen as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if not outcome.success:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=outcome.error or "Backend error",
        )
    return ProductSubmitResponse(
        success=True,
        product=outcome.entity,
        links=_link_result_view(outcome.links),
        notifications=console.notifications.items,
    )


@router.delete("/editor", status_code=status.HTTP_204_NO_CONTENT, summary="Close product editor")
async def close_editor(console: Console = Depends(get_console)) -> None:
    console.close_product_editor()


@router.post("/links/retry", response_model=LinkResultView, summary="Retry failed link changes")
async def retry_links(
    product_id: str | None = Query(None, description="Retry one product only; default is every product"),
    console: Console = Depends(get_console),
) -> LinkResultView:
    result = console.retry_links(product_id)
    return _link_result_view(result) or LinkResultView()


@router.delete("/{product_id}", response_model=DeleteResponse, summary="Delete product")
async def delete_product(
    product_id: str,
    console: Console = Depends(get_console),
) -> DeleteResponse:
    """Deletes every link first; the product is kept if any link could not be removed."""
    outcome = console.delete_product(product_id)
    if not outcome.success:
        links = _link_result_view(outcome.links)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "message": outcome.error or "Failed to delete product",
                "failed_links": [op.target_id for op in links.failed] if links else [],
            },
        )
    return DeleteResponse(
        success=True,
        links=_link_result_view(outcome.links),
        notifications=console.notifications.items,
    )


@router.post("/actions", response_model=NotificationListResponse, summary="Bulk action on checked products")
async def bulk_action(
    body: BulkActionRequest,
    console: Console = Depends(get_console),
) -> NotificationListResponse:
    console.handle_action(PRODUCTS, body.action, body.selected_ids)
    return NotificationListResponse(notifications=console.notifications.items)
