"""
Notification endpoints. The current status messages shown above the lists.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from agency360.schemas.notification import NotificationListResponse
from agency360.services.console import Console, get_console

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse, summary="Current notifications")
async def list_notifications(console: Console = Depends(get_console)) -> NotificationListResponse:
    return NotificationListResponse(notifications=console.notifications.items)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT, summary="Dismiss all notifications")
async def dismiss_all(console: Console = Depends(get_console)) -> None:
    console.notifications.dismiss()


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Dismiss notification")
async def dismiss(notification_id: str, console: Console = Depends(get_console)) -> None:
    if not console.notifications.dismiss(notification_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
