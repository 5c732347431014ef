# school_billing/schemas/common.py
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class DataEnvelope(BaseModel, Generic[T]):
    data: T
    message: str


class MessageOut(BaseModel):
    message: str


class Pagination(BaseModel):
    page: int
    limit: int
    total: int


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[dict] = None


class ErrorOut(BaseModel):
    error: ErrorBody
