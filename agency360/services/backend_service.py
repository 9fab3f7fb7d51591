"""
Accounts/products backend REST client.
Uses the requests library, maps non-2xx and transport errors to ReadFailure / WriteFailure.
"""

import logging
import time
from typing import Any, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from agency360.core.config import Settings, get_settings
from agency360.schemas.account import Account, AccountCreate, AccountUpdate
from agency360.schemas.link import LinkCreate, ProductAccountLink, ProductAccountView
from agency360.schemas.product import Product, ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class BackendServiceError(Exception):
    """Raised when a backend API call fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        detail: Any = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class ReadFailure(BackendServiceError):
    """A list/read call failed."""


class WriteFailure(BackendServiceError):
    """A create/update/delete call failed."""


def _failure_class(method: str) -> type[BackendServiceError]:
    return ReadFailure if method.upper() == "GET" else WriteFailure


M = TypeVar("M", bound=BaseModel)


def _parse(model: type[M], data: Any, failure: type[BackendServiceError]) -> M:
    """Validate a backend row; malformed rows surface as the call's failure type."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise failure(f"Malformed {model.__name__} from backend: {e.error_count()} error(s)", detail=data) from e


class BackendService:
    """
    Client for the accounts/products REST backend. No retry policy unless max_retries > 0.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_retries: int = 0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max_retries
        self._retry_status_codes = (429, 500, 502, 503)

    @property
    def base_url(self) -> str:
        return self._base_url

    def _handle_error(self, method: str, response: requests.Response) -> None:
        """Interpret error response and raise ReadFailure/WriteFailure with detail."""
        try:
            body = response.json()
        except ValueError:
            body = response.text or None
        msg = f"Backend error: {response.status_code}"
        if isinstance(body, dict):
            detail = body.get("detail") or body.get("message") or body.get("error")
            if isinstance(detail, str):
                msg += f" ({detail})"
        elif isinstance(body, str) and body:
            msg += f" ({body[:500]})"
        raise _failure_class(method)(msg, status_code=response.status_code, detail=body)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """
        Execute HTTP request. Returns decoded JSON, or None for 204 / empty bodies.
        path: e.g. /accounts (leading slash optional).
        """
        url = f"{self._base_url}/{path.lstrip('/')}"
        failure = _failure_class(method)
        last_exc: Exception | None = None

        for attempt in range(self._max_retries + 1):
            try:
                resp = requests.request(
                    method=method,
                    url=url,
                    headers={"Content-Type": "application/json"},
                    params=params,
                    json=json,
                    timeout=self._timeout,
                )
            except requests.RequestException as e:
                last_exc = e
                logger.warning("%s %s failed (attempt %d): %s", method, url, attempt + 1, e)
                if attempt < self._max_retries:
                    time.sleep(2 ** attempt)
                continue

            if resp.ok:
                if resp.status_code == 204 or not resp.content:
                    return None
                try:
                    return resp.json()
                except ValueError as e:
                    raise failure(
                        f"Backend returned invalid JSON for {method} {path}",
                        status_code=resp.status_code,
                        detail=resp.text[:500],
                    ) from e

            if resp.status_code in self._retry_status_codes and attempt < self._max_retries:
                wait = 2 ** attempt
                logger.warning(
                    "%s %s -> %s (attempt %d), retrying in %.1fs",
                    method,
                    url,
                    resp.status_code,
                    attempt + 1,
                    wait,
                )
                time.sleep(wait)
                continue

            self._handle_error(method, resp)

        raise failure(
            f"Backend request failed after {self._max_retries + 1} attempt(s): {last_exc!s}"
        ) from last_exc

    def _list(self, path: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        data = self._request("GET", path, params=params)
        if data is None:
            return []
        if isinstance(data, dict) and isinstance(data.get("items"), list):
            return data["items"]
        if not isinstance(data, list):
            raise ReadFailure(f"Unexpected response for GET {path}", detail=data)
        return data

    def _created(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        data = self._request("POST", path, json=body)
        if not isinstance(data, dict):
            raise WriteFailure(f"Unexpected response when creating via {path}", detail=data)
        return data

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def list_accounts(self) -> list[Account]:
        """Fetch all accounts."""
        return [_parse(Account, row, ReadFailure) for row in self._list("/accounts")]

    def create_account(self, data: AccountCreate) -> Account:
        """Create an account; returns the server's representation (with id)."""
        created = self._created("/accounts", data.model_dump(mode="json"))
        return _parse(Account, created, WriteFailure)

    def update_account(self, account_id: str, data: AccountUpdate) -> None:
        """Update an account. The response body is ignored beyond its status."""
        self._request(
            "PUT",
            f"/accounts/{account_id}",
            json=data.model_dump(mode="json", exclude_none=True),
        )

    def delete_account(self, account_id: str) -> None:
        self._request("DELETE", f"/accounts/{account_id}")

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    def list_products(self) -> list[Product]:
        """Fetch all products."""
        return [_parse(Product, row, ReadFailure) for row in self._list("/products")]

    def create_product(self, data: ProductCreate) -> Product:
        """Create a product; returns the server's representation (with id)."""
        created = self._created("/products", data.model_dump(mode="json"))
        return _parse(Product, created, WriteFailure)

    def update_product(self, product_id: str, data: ProductUpdate) -> None:
        """Update a product. The response body is ignored beyond its status."""
        self._request(
            "PUT",
            f"/products/{product_id}",
            json=data.model_dump(mode="json", exclude_none=True),
        )

    def delete_product(self, product_id: str) -> None:
        self._request("DELETE", f"/products/{product_id}")

    # -------------------------------------------------------------------------
    # Product-account links
    # -------------------------------------------------------------------------

    def list_product_account_views(self, product_id: str) -> list[ProductAccountView]:
        """Links for a product, denormalized with account fields."""
        rows = self._list("/view_product_accounts", params={"product_id": product_id})
        return [_parse(ProductAccountView, row, ReadFailure) for row in rows]

    def list_product_links(self, product_id: str) -> list[ProductAccountLink]:
        """Raw links for a product."""
        rows = self._list("/product_accounts", params={"product_id": product_id})
        return [_parse(ProductAccountLink, row, ReadFailure) for row in rows]

    def create_link(self, product_id: str, account_id: str) -> ProductAccountLink | None:
        """Create a link. Returns the created row when the backend echoes one."""
        body = LinkCreate(product_id=product_id, account_id=account_id).model_dump()
        data = self._request("POST", "/product_accounts", json=body)
        if isinstance(data, dict) and data.get("id") is not None:
            return _parse(ProductAccountLink, data, WriteFailure)
        return None

    def delete_link(self, link_id: str) -> None:
        self._request("DELETE", f"/product_accounts/{link_id}")


def get_backend_service(settings: Settings | None = None) -> BackendService:
    """Build a BackendService from explicit settings (defaults to the cached settings)."""
    settings = settings or get_settings()
    return BackendService(
        base_url=settings.api_url,
        timeout=settings.request_timeout,
        max_retries=settings.max_retries,
    )
