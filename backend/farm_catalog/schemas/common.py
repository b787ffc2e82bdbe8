from pydantic import BaseModel, Field
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


class NoticeOut(BaseModel):
    """Notice emitted by a mutation (success, warning, error)"""
    level: str
    title: str
    message: str = ""


class PaginationMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class PaginatedResponse(BaseModel, Generic[T]):
    """Schema for paginated listings: {data, meta}"""
    data: List[T]
    meta: PaginationMeta


class MutationResponse(BaseModel, Generic[T]):
    """Schema for mutations: the affected row and the notices"""
    data: Optional[T] = None
    notices: List[NoticeOut] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error payload rendered by the exception handlers"""
    statusCode: int
    error: str
    message: str
