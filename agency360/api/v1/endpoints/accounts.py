"""
Accounts endpoints: list view, edit surface (open, form, submit, close), delete,
and bulk actions.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from agency360.schemas.account import Account, AccountForm
from agency360.schemas.common import BulkActionRequest, EditorOpenRequest, ListView
from agency360.schemas.console import AccountEditorView, AccountSubmitResponse, DeleteResponse
from agency360.schemas.notification import NotificationListResponse
from agency360.services.console import ACCOUNTS, Console, EditorNotOpen, get_console, list_view
from agency360.services.edit_sessions import AccountEditSession

router = APIRouter(prefix="/accounts", tags=["accounts"])


def _editor_view(session: AccountEditSession) -> AccountEditorView:
    return AccountEditorView(
        entity_id=session.entity_id,
        is_edit=session.is_edit,
        is_open=session.is_open,
        is_submitting=session.is_submitting,
        form=session.form,
    )


@router.get(
    "",
    response_model=ListView[Account],
    summary="List accounts",
    description="Current page of the accounts list. filter/page update the list state before rendering.",
)
async def list_accounts(
    filter: str | None = Query(None, description="Free-text filter (name, email, status)"),
    page: int | None = Query(None, ge=1, description="Page number (1-based)"),
    console: Console = Depends(get_console),
) -> ListView:
    """GET /api/v1/accounts: filtered, paginated view; placeholders while loading."""
    return list_view(console.accounts, filter, page)


@router.post("/editor", response_model=AccountEditorView, summary="Open account editor")
async def open_editor(
    body: EditorOpenRequest,
    console: Console = Depends(get_console),
) -> AccountEditorView:
    try:
        session = console.open_account_editor(body.entity_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return _editor_view(session)


@router.get("/editor", response_model=AccountEditorView, summary="Current account editor")
async def get_editor(console: Console = Depends(get_console)) -> AccountEditorView:
    if console.account_editor is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No account editor is open")
    return _editor_view(console.account_editor)


@router.put("/editor/form", response_model=AccountEditorView, summary="Replace account form")
async def update_form(
    form: AccountForm,
    console: Console = Depends(get_console),
) -> AccountEditorView:
    try:
        session = console.update_account_form(form)
    except EditorNotOpen as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return _editor_view(session)


@router.post("/editor/submit", response_model=AccountSubmitResponse, summary="Submit account")
async def submit_editor(console: Console = Depends(get_console)) -> AccountSubmitResponse:
    """Create or update; on failure the editor stays open and 502 is returned."""
    try:
        outcome = console.submit_account()
    except EditorNotOpen as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if not outcome.success:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=outcome.error or "Backend error",
        )
    return AccountSubmitResponse(
        success=True,
        account=outcome.entity,
        notifications=console.notifications.items,
    )


@router.delete("/editor", status_code=status.HTTP_204_NO_CONTENT, summary="Close account editor")
async def close_editor(console: Console = Depends(get_console)) -> None:
    console.close_account_editor()


@router.delete("/{account_id}", response_model=DeleteResponse, summary="Delete account")
async def delete_account(
    account_id: str,
    console: Console = Depends(get_console),
) -> DeleteResponse:
    outcome = console.delete_account(account_id)
    if not outcome.success:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=outcome.error or "Failed to delete account",
        )
    return DeleteResponse(success=True, notifications=console.notifications.items)


@router.post("/actions", response_model=NotificationListResponse, summary="Bulk action on checked accounts")
async def bulk_action(
    body: BulkActionRequest,
    console: Console = Depends(get_console),
) -> NotificationListResponse:
    """Unknown actions and empty selections only post an info message."""
    console.handle_action(ACCOUNTS, body.action, body.selected_ids)
    return NotificationListResponse(notifications=console.notifications.items)
