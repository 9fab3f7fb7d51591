"""
List controller: filter -> paginate -> render, with a loading placeholder phase.

One controller type serves the accounts list, the products list and the embedded
account picker. It is parameterized by the entity's searchable field projection.
State is an immutable ListState; every change goes through reduce(state, action).
"""

import math
import re
from dataclasses import dataclass, field, replace
from typing import Callable, Generic, Iterable, Sequence, TypeVar, Union

from agency360.schemas.account import Account
from agency360.schemas.product import Product

T = TypeVar("T")

SearchFields = Callable[[T], Iterable[str | None]]


# -----------------------------------------------------------------------------
# State and actions
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ListState(Generic[T]):
    """Everything a list renders from."""
    collection: tuple[T, ...] = ()
    filter_text: str = ""
    page_index: int = 1
    page_size: int = 10
    is_loading: bool = True


@dataclass(frozen=True)
class SetFilter:
    text: str


@dataclass(frozen=True)
class SetPage:
    index: int


@dataclass(frozen=True)
class LoadCompleted:
    items: Sequence = field(default_factory=tuple)


@dataclass(frozen=True)
class LoadFailed:
    pass


@dataclass(frozen=True)
class ReplaceCollection:
    items: Sequence = field(default_factory=tuple)


@dataclass(frozen=True)
class ReplaceEntity:
    entity: object


@dataclass(frozen=True)
class AppendEntity:
    entity: object


Action = Union[SetFilter, SetPage, LoadCompleted, LoadFailed, ReplaceCollection, ReplaceEntity, AppendEntity]


def entity_key(entity: object) -> object:
    return getattr(entity, "id", None)


def reduce(state: ListState, action: Action) -> ListState:
    """Pure transition function. Nothing here moves is_loading back to True."""
    if isinstance(action, SetFilter):
        # Page index is intentionally left alone; an out-of-range page renders empty.
        return replace(state, filter_text=action.text or "")
    if isinstance(action, SetPage):
        if action.index < 1:
            raise ValueError(f"page index must be >= 1, got {action.index}")
        return replace(state, page_index=action.index)
    if isinstance(action, LoadCompleted):
        return replace(state, collection=tuple(action.items), is_loading=False)
    if isinstance(action, LoadFailed):
        return replace(state, collection=(), is_loading=False)
    if isinstance(action, ReplaceCollection):
        return replace(state, collection=tuple(action.items))
    if isinstance(action, ReplaceEntity):
        key = entity_key(action.entity)
        return replace(
            state,
            collection=tuple(
                action.entity if entity_key(item) == key else item
                for item in state.collection
            ),
        )
    if isinstance(action, AppendEntity):
        return replace(state, collection=state.collection + (action.entity,))
    raise TypeError(f"Unknown list action: {action!r}")


# -----------------------------------------------------------------------------
# Searchable field projections
# -----------------------------------------------------------------------------

def account_search_fields(account: Account) -> tuple[str, str, str]:
    return (account.account_name, account.account_email, account.account_status.value)


def product_search_fields(product: Product) -> tuple[str, str, str]:
    return (product.name, product.owner, product.position)


def matches(values: Iterable[str | None], filter_text: str) -> bool:
    """Case-insensitive substring match against any of the values."""
    if not filter_text:
        return True
    needle = filter_text.lower()
    return any(v and needle in v.lower() for v in values)


def highlight_matches(text: str, filter_text: str) -> list[tuple[str, bool]]:
    """
    Split text into (segment, is_match) pieces for every case-insensitive
    occurrence of filter_text. The filter is taken literally, not as a regex.
    """
    if not text:
        return []
    if not filter_text:
        return [(text, False)]
    pieces: list[tuple[str, bool]] = []
    pos = 0
    for m in re.finditer(re.escape(filter_text), text, flags=re.IGNORECASE):
        if m.start() > pos:
            pieces.append((text[pos:m.start()], False))
        pieces.append((m.group(0), True))
        pos = m.end()
    if pos < len(text):
        pieces.append((text[pos:], False))
    return pieces


# -----------------------------------------------------------------------------
# Controller
# -----------------------------------------------------------------------------

class ListController(Generic[T]):
    """
    Holds a ListState and derives the visible page from it.
    Starts in the loading phase; the owner dispatches LoadCompleted or LoadFailed once.
    """

    def __init__(
        self,
        search_fields: SearchFields,
        placeholder: Callable[[int], T],
        page_size: int = 10,
        items: Iterable[T] | None = None,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self._search_fields = search_fields
        self._placeholder = placeholder
        self._state: ListState[T] = ListState(page_size=page_size)
        if items is not None:
            self._state = reduce(self._state, LoadCompleted(tuple(items)))

    @property
    def state(self) -> ListState[T]:
        return self._state

    @property
    def collection(self) -> tuple[T, ...]:
        return self._state.collection

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def page_size(self) -> int:
        return self._state.page_size

    def dispatch(self, action: Action) -> ListState[T]:
        self._state = reduce(self._state, action)
        return self._state

    def set_filter(self, text: str) -> None:
        self.dispatch(SetFilter(text))

    def set_page(self, index: int) -> None:
        self.dispatch(SetPage(index))

    def get(self, entity_id: str) -> T | None:
        for item in self._state.collection:
            if entity_key(item) == entity_id:
                return item
        return None

    def filtered(self) -> list[T]:
        text = self._state.filter_text
        return [item for item in self._state.collection if matches(self._search_fields(item), text)]

    def filtered_count(self) -> int:
        return len(self.filtered())

    def page_count(self) -> int:
        return math.ceil(self.filtered_count() / self._state.page_size)

    def visible_page(self) -> list[T]:
        """Current page of the filtered collection, or placeholder rows while loading."""
        size = self._state.page_size
        if self._state.is_loading:
            return [self._placeholder(i) for i in range(size)]
        start = (self._state.page_index - 1) * size
        return self.filtered()[start:start + size]


def account_list(page_size: int = 10, items: Iterable[Account] | None = None) -> ListController[Account]:
    return ListController(account_search_fields, Account.placeholder, page_size=page_size, items=items)


def product_list(page_size: int = 10, items: Iterable[Product] | None = None) -> ListController[Product]:
    return ListController(product_search_fields, Product.placeholder, page_size=page_size, items=items)
