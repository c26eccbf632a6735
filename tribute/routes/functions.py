from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from tribute.deps import get_email_dispatcher, get_whatsapp_dispatcher
from tribute.schemas import NotificationRequest
from tribute.services.notifications import EmailDispatcher, WhatsAppDispatcher
from tribute.utils.errors import NotificationConfigError, NotificationError

router = APIRouter(prefix="/functions", tags=["Notification functions"])
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def _json(content: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=content, status_code=status_code, headers=CORS_HEADERS)


@router.options("/notify-order")
@router.options("/notify-whatsapp")
async def preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/notify-order")
async def notify_order(
    request: Request,
    dispatcher: EmailDispatcher = Depends(get_email_dispatcher),
):
    """
    Emails the order summary to the configured owner address.
    Echoes the provider response on success.
    """
    logger.info(f"Function invoked with method: {request.method}")
    logger.info(
        "Environment check: RESEND_API_KEY present: %s, NOTIFICATION_EMAIL present: %s",
        bool(dispatcher.settings.resend_api_key),
        bool(dispatcher.settings.notification_email),
    )

    try:
        dispatcher.check_config()
    except NotificationConfigError as e:
        return _json({"error": str(e)}, 500)

    raw = await request.body()
    try:
        order = NotificationRequest.model_validate_json(raw)
    except ValidationError as e:
        logger.error(f"Failed to parse request body: {e}")
        return _json({"error": "Invalid request body"}, 400)

    try:
        result = await dispatcher.notify(order)
    except NotificationError as e:
        logger.error(f"Error in notify-order function: {e}")
        return _json(
            {"error": str(e), "details": "Check function logs for more information"},
            500,
        )

    logger.info(f"Email sent successfully: {result}")
    return _json(result, 200)


@router.post("/notify-whatsapp")
async def notify_whatsapp(
    request: Request,
    dispatcher: WhatsAppDispatcher = Depends(get_whatsapp_dispatcher),
):
    try:
        dispatcher.check_config()
        order = NotificationRequest.model_validate_json(await request.body())
        await dispatcher.notify(order)
    except (NotificationError, ValidationError) as e:
        logger.error(f"Error sending WhatsApp message: {e}")
        return _json({"error": str(e)}, 500)

    return _json({"success": True}, 200)
