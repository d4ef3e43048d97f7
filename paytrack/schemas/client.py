from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


PAID_FILTERS = ("any", "paid", "unpaid")


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ClientCreate(BaseModel):
    name: str = Field(min_length=1)
    monthly_amount: int = Field(gt=0)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("phone", "email", mode="before")
    @classmethod
    def empty_as_missing(cls, value):
        return _blank_to_none(value)


class ClientUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    monthly_amount: Optional[int] = Field(default=None, gt=0)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value):
        if value is None:
            raise ValueError("Name cannot be null")
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("monthly_amount")
    @classmethod
    def amount_not_null(cls, value):
        if value is None:
            raise ValueError("Monthly amount cannot be null")
        return value

    @field_validator("phone", "email", mode="before")
    @classmethod
    def empty_as_missing(cls, value):
        return _blank_to_none(value)


class ClientResponse(BaseModel):
    id: int
    name: str
    monthly_amount: int
    phone: Optional[str] = None
    email: Optional[str] = None

    class Config:
        from_attributes = True


class ClientQuery(BaseModel):
    search: Optional[str] = None
    month: Optional[int] = None
    year: Optional[int] = None
    paid: str = "any"
    outstanding_min: Optional[int] = None
    page: int = 1
    page_size: Optional[int] = None


class ClientPage(BaseModel):
    clients: list[ClientResponse]
    total: int
    page: int
    page_size: int


class ImportRowError(BaseModel):
    row: int
    error: str


class ImportResults(BaseModel):
    success: list[str] = []
    errors: list[ImportRowError] = []


class BulkImportResult(BaseModel):
    message: str
    results: ImportResults
