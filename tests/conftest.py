"""Shared fixtures for console tests: an in-memory backend with failure injection."""

from itertools import count

import pytest

from agency360.core.config import Settings
from agency360.schemas.account import Account, AccountCreate, AccountStatus, AccountUpdate
from agency360.schemas.link import ProductAccountLink, ProductAccountView
from agency360.schemas.product import Product, ProductCreate, ProductUpdate
from agency360.services.backend_service import BackendServiceError, ReadFailure, WriteFailure
from agency360.services.console import Console

LINK_CALLS = ("create_link", "delete_link")


class FakeBackend:
    """
    Stands in for BackendService. Records every call as (method, target).
    With unique_links, a second link for the same (product, account) pair is rejected with 409.
    """

    def __init__(self, accounts=(), products=(), links=(), unique_links: bool = False) -> None:
        self.unique_links = unique_links
        self.accounts = {a.id: a for a in accounts}
        self.products = {p.id: p for p in products}
        self.links = {link.id: link for link in links}
        self.calls: list[tuple[str, str | None]] = []
        self._failures: dict[tuple[str, str | None], BackendServiceError] = {}
        self._ids = count(100)

    def fail(self, method: str, target: str | None = None, status_code: int = 500) -> None:
        """Make `method` (optionally only for `target`) raise on every call."""
        cls = ReadFailure if method.startswith("list_") else WriteFailure
        self._failures[(method, target)] = cls(f"Backend error: {status_code}", status_code=status_code)

    def heal(self) -> None:
        self._failures.clear()

    def _check(self, method: str, target: str | None = None) -> None:
        self.calls.append((method, target))
        err = self._failures.get((method, target)) or self._failures.get((method, None))
        if err is not None:
            raise err

    def link_calls(self) -> list[tuple[str, str | None]]:
        return [c for c in self.calls if c[0] in LINK_CALLS]

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    # Accounts
    def list_accounts(self) -> list[Account]:
        self._check("list_accounts")
        return list(self.accounts.values())

    def create_account(self, data: AccountCreate) -> Account:
        self._check("create_account")
        account = Account(id=self._next_id("A"), **data.model_dump())
        self.accounts[account.id] = account
        return account

    def update_account(self, account_id: str, data: AccountUpdate) -> None:
        self._check("update_account", account_id)
        if account_id not in self.accounts:
            raise WriteFailure("Backend error: 404", status_code=404)
        self.accounts[account_id] = self.accounts[account_id].model_copy(update=data.model_dump(exclude_none=True))

    def delete_account(self, account_id: str) -> None:
        self._check("delete_account", account_id)
        if self.accounts.pop(account_id, None) is None:
            raise WriteFailure("Backend error: 404", status_code=404)

    # Products
    def list_products(self) -> list[Product]:
        self._check("list_products")
        return list(self.products.values())

    def create_product(self, data: ProductCreate) -> Product:
        self._check("create_product")
        product = Product(id=self._next_id("P"), created_at="2024-01-01T00:00:00+00:00", **data.model_dump())
        self.products[product.id] = product
        return product

    def update_product(self, product_id: str, data: ProductUpdate) -> None:
        self._check("update_product", product_id)
        if product_id not in self.products:
            raise WriteFailure("Backend error: 404", status_code=404)
        self.products[product_id] = self.products[product_id].model_copy(update=data.model_dump(exclude_none=True))

    def delete_product(self, product_id: str) -> None:
        self._check("delete_product", product_id)
        if self.products.pop(product_id, None) is None:
            raise WriteFailure("Backend error: 404", status_code=404)

    # Links
    def list_product_account_views(self, product_id: str) -> list[ProductAccountView]:
        self._check("list_product_account_views", product_id)
        views = []
        for link in self.links.values():
            if link.product_id != product_id:
                continue
            account = self.accounts.get(link.account_id)
            views.append(
                ProductAccountView(
                    id=link.id,
                    product_id=link.product_id,
                    account_id=link.account_id,
                    account_name=account.account_name if account else None,
                    account_email=account.account_email if account else None,
                    account_status=account.account_status if account else None,
                )
            )
        return views

    def list_product_links(self, product_id: str) -> list[ProductAccountLink]:
        self._check("list_product_links", product_id)
        return [link for link in self.links.values() if link.product_id == product_id]

    def create_link(self, product_id: str, account_id: str) -> ProductAccountLink:
        self._check("create_link", account_id)
        if self.unique_links and account_id in self.links_of(product_id):
            raise WriteFailure("Backend error: 409 (link already exists)", status_code=409)
        link = ProductAccountLink(id=self._next_id("L"), product_id=product_id, account_id=account_id)
        self.links[link.id] = link
        return link

    def delete_link(self, link_id: str) -> None:
        self._check("delete_link", link_id)
        if self.links.pop(link_id, None) is None:
            raise WriteFailure("Backend error: 404", status_code=404)

    def links_of(self, product_id: str) -> set[str]:
        """Account ids currently linked to the product."""
        return {link.account_id for link in self.links.values() if link.product_id == product_id}


def make_account(n: int, status: AccountStatus = AccountStatus.ACTIVE, **kwargs) -> Account:
    fields = {
        "id": f"A{n}",
        "account_id": f"{n:012d}",
        "account_name": f"Account {n}",
        "account_email": f"owner{n}@example.com",
        "account_status": status,
        "account_arn": f"arn:aws:organizations::{n:012d}:account",
        "joined_timestamp": "2024-03-01",
    }
    fields.update(kwargs)
    return Account(**fields)


def make_product(n: int, **kwargs) -> Product:
    fields = {
        "id": f"P{n}",
        "name": f"Product {n}",
        "owner": f"Owner {n}",
        "position": "Platform",
        "description": "",
        "created_at": "2024-01-01T00:00:00+00:00",
        "updated_at": "2024-01-01T00:00:00+00:00",
    }
    fields.update(kwargs)
    return Product(**fields)


@pytest.fixture
def settings() -> Settings:
    return Settings(api_url="http://backend.test", cors_origins="http://localhost:3000")


@pytest.fixture
def backend() -> FakeBackend:
    """Three accounts, one product linked to A1 (L1) and A2 (L2)."""
    return FakeBackend(
        accounts=[make_account(1), make_account(2), make_account(3)],
        products=[make_product(1)],
        links=[
            ProductAccountLink(id="L1", product_id="P1", account_id="A1"),
            ProductAccountLink(id="L2", product_id="P1", account_id="A2"),
        ],
    )


@pytest.fixture
def console(backend: FakeBackend, settings: Settings) -> Console:
    console = Console(backend, settings)
    console.load()
    return console
