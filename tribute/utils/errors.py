from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger(__name__)


class AppError(Exception):
    title = "Error"

    def __init__(
        self,
        code: str,
        message: str,
        http_status: int,
        fields: Optional[dict[str, Any]] = None,
        title: Optional[str] = None,
    ):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.fields = fields or {}
        if title:
            self.title = title
        super().__init__(message)


class MissingInformation(AppError):
    title = "Missing Information"

    def __init__(self, message: str, fields: Optional[dict[str, Any]] = None):
        super().__init__("missing_information", message, status.HTTP_400_BAD_REQUEST, fields)


class InvalidGift(AppError):
    title = "Invalid Gift"

    def __init__(self, gift_id: str):
        self.gift_id = gift_id
        super().__init__(
            "invalid_gift",
            f"Unknown gift '{gift_id}'",
            status.HTTP_404_NOT_FOUND,
            {"gift_id": gift_id},
        )


class InsufficientBalance(AppError):
    title = "Insufficient Balance"

    def __init__(self, balance: int, price: int):
        self.balance = balance
        self.price = price
        super().__init__(
            "insufficient_balance",
            f"You need {price} but only have {balance}",
            status.HTTP_409_CONFLICT,
            {"balance": balance, "price": price},
        )


class OrderPersistenceError(AppError):
    title = "Order Failed"

    def __init__(self, message: str = "Could not save your order. Please try again."):
        super().__init__("order_persistence_error", message, status.HTTP_503_SERVICE_UNAVAILABLE)


class BalanceUpdateError(AppError):
    title = "Balance Update Failed"

    def __init__(self, message: str = "Your order was saved but the balance could not be updated."):
        super().__init__("balance_update_error", message, status.HTTP_409_CONFLICT)


class BalanceUnavailable(AppError):
    title = "Balance Unavailable"

    def __init__(self, message: str = "The balance could not be loaded."):
        super().__init__("balance_unavailable", message, status.HTTP_503_SERVICE_UNAVAILABLE)


class NotificationError(Exception):
    """Raised by dispatchers. Never surfaced to the visitor."""


class NotificationConfigError(NotificationError):
    pass


def error_response(
    code: str,
    message: str,
    http_status: int,
    fields: Optional[dict[str, Any]] = None,
    title: str = "Error",
) -> JSONResponse:
    payload = {"error": {"code": code, "title": title, "message": message}}
    if fields:
        payload["error"]["fields"] = fields
    return JSONResponse(status_code=http_status, content=payload)


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
        return error_response(exc.code, exc.message, exc.http_status, exc.fields, exc.title)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
        code = "http_error"
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        fields = exc.detail if isinstance(exc.detail, dict) else None
        return error_response(code, message, exc.status_code, fields)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(
            "validation_error",
            "Invalid request",
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            {"details": jsonable_encoder(exc.errors())},
            "Invalid Request",
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error: %s", exc)
        return error_response(
            "internal_error", "Unexpected error", status.HTTP_500_INTERNAL_SERVER_ERROR
        )
