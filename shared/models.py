"""Pydantic contracts shared across the wallet backend."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, field_validator


class ServiceErrorCode(str, Enum):
    """Stable error codes returned at the service boundary."""

    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_FOUND = "NOT_FOUND"
    UNAVAILABLE = "UNAVAILABLE"
    BACKEND_ERROR = "BACKEND_ERROR"


class ServiceError(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: ServiceErrorCode
    message: str
    details: dict[str, object] | None = None


class TransactionStatus(str, Enum):
    SUCCESS = "success"
    PENDING = "pending"
    FAILED = "failed"


class TransactionType(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class MongoDocument(BaseModel):
    """Base for documents read back from MongoDB.

    Field names follow Python conventions; aliases keep the stored camelCase
    names so `model_dump(by_alias=True)` reproduces the wire format.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: object) -> object:
        if isinstance(value, ObjectId):
            return str(value)
        return value


class User(MongoDocument):
    name: str = Field(min_length=1)
    phone_number: str = Field(alias="phoneNumber", min_length=1)


class Transaction(MongoDocument):
    status: TransactionStatus
    type: TransactionType
    transaction_date: datetime = Field(alias="transactionDate")
    amount: float = Field(ge=0)
    user_id: str = Field(alias="userId")

    @field_validator("user_id", mode="before")
    @classmethod
    def stringify_user_id(cls, value: object) -> object:
        if isinstance(value, ObjectId):
            return str(value)
        return value


class TransactionWithUser(Transaction):
    user: User


class TransactionQuery(BaseModel):
    """Raw, string-typed list parameters exactly as received over HTTP."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    status: str | None = None
    type: str | None = None
    from_date: str | None = Field(default=None, alias="fromDate")
    to_date: str | None = Field(default=None, alias="toDate")
    page: str | None = None
    limit: str | None = None


class TransactionFilters(BaseModel):
    """Canonical list filters produced by the filter normalizer."""

    model_config = ConfigDict(extra="forbid")

    status: TransactionStatus | None = None
    type: TransactionType | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_count: int = Field(alias="totalCount", ge=0)
    total_pages: int = Field(alias="totalPages", ge=0)
    current_page: int = Field(alias="currentPage")
    limit: int


class TransactionsPageResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    items: list[SerializeAsAny[Transaction]]
    pagination: Pagination
