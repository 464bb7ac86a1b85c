"""Error models for API responses."""

import enum
from typing import Literal, Optional
from pydantic import BaseModel


class GatewayErrorType(str, enum.Enum):
    INVALID_REQUEST = "invalid_request_error"
    INVALID_CALLBACK = "invalid_callback"
    AUTHENTICATION = "authentication_error"
    TOKEN_EXCHANGE_FAILED = "token_exchange_failed"
    FETCH_FAILED = "fetch_failed"
    CHAT_DELIVERY_FAILED = "chat_delivery_failed"
    API_ERROR = "api_error"


class ErrorDetail(BaseModel):
    type: GatewayErrorType
    message: str
    status_code: Optional[int] = None


class ErrorResponse(BaseModel):
    type: Literal["error"] = "error"
    error: ErrorDetail
