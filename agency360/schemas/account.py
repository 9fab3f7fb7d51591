"""
Account schema (API contract). Kept in sync with the backend /accounts resource.
"""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class AccountStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None


class JoinMethod(str, Enum):
    INVITED = "INVITED"
    SELF = "SELF"

    @classmethod
    def _missing_(cls, value: object):
        # Older records were written with "Invitation".
        if isinstance(value, str):
            normalized = value.strip().upper()
            if normalized == "INVITATION":
                return cls.INVITED
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class AccountBase(BaseModel):
    account_id: str = ""
    account_name: str = ""
    account_email: str = ""
    account_status: AccountStatus = AccountStatus.ACTIVE
    account_arn: str = ""
    joined_method: JoinMethod = JoinMethod.INVITED


class AccountCreate(AccountBase):
    """Request body for creating an account. The backend assigns `id`."""
    joined_timestamp: str | None = None

    def with_join_date(self, today: date | None = None) -> "AccountCreate":
        """Return a copy stamped with today's date if no join timestamp was given."""
        if self.joined_timestamp:
            return self
        stamp = (today or date.today()).isoformat()
        return self.model_copy(update={"joined_timestamp": stamp})


class AccountUpdate(BaseModel):
    """Request body for update. joined_timestamp is immutable and never sent."""
    account_id: str | None = None
    account_name: str | None = None
    account_email: str | None = None
    account_status: AccountStatus | None = None
    account_arn: str | None = None
    joined_method: JoinMethod | None = None


class Account(AccountBase):
    """Response schema; matches the backend account record."""
    model_config = ConfigDict(from_attributes=True, extra="ignore", coerce_numbers_to_str=True)

    id: str
    joined_timestamp: str | None = None

    @field_validator("account_id", "account_name", "account_email", "account_arn", mode="before")
    @classmethod
    def none_as_blank(cls, v: object) -> object:
        return "" if v is None else v

    @field_validator("account_status", "joined_method", mode="before")
    @classmethod
    def none_as_default(cls, v: object, info: ValidationInfo) -> object:
        if v is None or v == "":
            return cls.model_fields[info.field_name].default
        return v

    @classmethod
    def placeholder(cls, index: int) -> "Account":
        """Blank row shown while the collection is loading."""
        return cls(id=f"skeleton-{index}")


class AccountForm(BaseModel):
    """Editable fields of the account edit surface."""
    account_id: str = ""
    account_name: str = ""
    account_email: str = ""
    account_status: AccountStatus = AccountStatus.ACTIVE
    account_arn: str = ""
    joined_method: JoinMethod = JoinMethod.INVITED
    joined_timestamp: str | None = Field(None, description="Read-only; shown for existing accounts")

    @classmethod
    def from_account(cls, account: Account) -> "AccountForm":
        return cls(**account.model_dump(exclude={"id"}))

    def to_create(self) -> AccountCreate:
        return AccountCreate(**self.model_dump())

    def to_update(self) -> AccountUpdate:
        return AccountUpdate(**self.model_dump(exclude={"joined_timestamp"}))
