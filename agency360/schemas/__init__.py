# Pydantic request/response schemas (API contract). Kept in sync with the backend resources.

from agency360.schemas.common import BulkActionRequest, EditorOpenRequest, ListView
from agency360.schemas.account import (
    Account,
    AccountCreate,
    AccountForm,
    AccountStatus,
    AccountUpdate,
    JoinMethod,
)
from agency360.schemas.product import Product, ProductCreate, ProductForm, ProductUpdate
from agency360.schemas.link import LinkCreate, ProductAccountLink, ProductAccountView
from agency360.schemas.notification import Notification, NotificationListResponse, NotificationType

__all__ = [
    "ListView",
    "BulkActionRequest",
    "EditorOpenRequest",
    "Account",
    "AccountCreate",
    "AccountForm",
    "AccountStatus",
    "AccountUpdate",
    "JoinMethod",
    "Product",
    "ProductCreate",
    "ProductForm",
    "ProductUpdate",
    "LinkCreate",
    "ProductAccountLink",
    "ProductAccountView",
    "Notification",
    "NotificationListResponse",
    "NotificationType",
]
