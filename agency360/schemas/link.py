"""
Product-account link schemas. A link's existence is the only fact it carries.
"""

from pydantic import BaseModel, ConfigDict

from agency360.schemas.account import AccountStatus


class LinkCreate(BaseModel):
    """Request body for POST /product_accounts."""
    product_id: str
    account_id: str


class ProductAccountLink(LinkCreate):
    """Raw row of /product_accounts."""
    model_config = ConfigDict(from_attributes=True, extra="ignore", coerce_numbers_to_str=True)

    id: str


class ProductAccountView(ProductAccountLink):
    """Row of /view_product_accounts: a link denormalized with account fields."""
    account_name: str | None = None
    account_email: str | None = None
    account_status: AccountStatus | None = None
