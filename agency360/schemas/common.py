"""
Common Pydantic schemas (list views, action requests).
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ListView(BaseModel, Generic[T]):
    """One rendered page of a list controller. While loading, items are placeholders."""
    items: list[T]
    page_index: int
    page_count: int
    page_size: int
    filtered_count: int
    filter_text: str = ""
    is_loading: bool = False


class BulkActionRequest(BaseModel):
    """Action picked from a list's action menu, applied to the checked rows."""
    action: str = Field(..., min_length=1)
    selected_ids: list[str] = []


class EditorOpenRequest(BaseModel):
    """Open an edit surface. entity_id None means create mode."""
    entity_id: str | None = None
