from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel

from pulse.schemas.common import CamelModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope shared by every endpoint"""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class ErrorDetail(BaseModel):
    path: str
    message: str


class ErrorResponse(BaseModel):
    """Error envelope produced by the exception handlers"""
    success: bool = False
    error: str
    message: Optional[str] = None
    details: Optional[List[ErrorDetail]] = None


class Pagination(CamelModel):
    total: int
    limit: int
    offset: int
    has_more: bool


def ok(data=None, message: Optional[str] = None) -> dict:
    """Build a success envelope for a handler return value"""
    return {"success": True, "message": message, "data": data}
