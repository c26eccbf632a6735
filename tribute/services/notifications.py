from __future__ import annotations

import html
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type

import httpx

from tribute.config import Settings, get_settings
from tribute.schemas import NotificationRequest
from tribute.utils.errors import NotificationConfigError, NotificationError

logger = logging.getLogger(__name__)

EMAIL_SUBJECT = "New Gift Order Received!"


def format_email_html(request: NotificationRequest) -> str:
    def esc(value: Optional[str]) -> str:
        return html.escape(value or "")

    return (
        "<h1>New Gift Order Details</h1>\n"
        f"<p><strong>Gift:</strong> {esc(request.gift_type)}</p>\n"
        f"<p><strong>Delivery Address:</strong> {esc(request.delivery_address)}</p>\n"
        f"<p><strong>Delivery Instructions:</strong> {esc(request.delivery_instructions) or 'None'}</p>\n"
        f"<p><strong>Preferred Time:</strong> {esc(request.preferred_time) or 'Not specified'}</p>\n"
    )


def format_chat_message(request: NotificationRequest) -> str:
    return (
        "New Gift Order!\n\n"
        f"Gift: {request.gift_type}\n"
        f"Delivery Address: {request.delivery_address}\n"
        f"Instructions: {request.delivery_instructions or 'None'}\n"
        f"Preferred Time: {request.preferred_time or 'Not specified'}"
    )


class NotificationDispatcher(ABC):
    """
    Tells the page owner about a new order.
    Implementations raise NotificationError on any failure.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.notification_timeout_seconds,
            transport=self.transport,
        )

    def check_config(self) -> None:
        """Raise NotificationConfigError if a required value is missing."""

    @abstractmethod
    async def notify(self, request: NotificationRequest) -> Dict[str, Any]:
        pass


class EmailDispatcher(NotificationDispatcher):
    """Sends an HTML order summary through the Resend HTTP API."""

    def check_config(self) -> None:
        if not self.settings.resend_api_key:
            logger.error("RESEND_API_KEY environment variable not set")
            raise NotificationConfigError("Email service not configured")
        if not self.settings.notification_email:
            logger.error("NOTIFICATION_EMAIL environment variable not set")
            raise NotificationConfigError("Recipient email not configured")

    async def notify(self, request: NotificationRequest) -> Dict[str, Any]:
        self.check_config()
        url = f"{self.settings.resend_api_url.rstrip('/')}/emails"
        payload = {
            "from": self.settings.resend_from,
            "to": [self.settings.notification_email],
            "subject": EMAIL_SUBJECT,
            "html": format_email_html(request),
        }
        headers = {"Authorization": f"Bearer {self.settings.resend_api_key}"}

        async with self._client() as client:
            try:
                response = await client.post(url, json=payload, headers=headers)
            except httpx.HTTPError as e:
                raise NotificationError(f"Email request failed: {e}") from e

        if not response.is_success:
            raise NotificationError(f"Email provider returned {response.status_code}: {response.text}")

        try:
            result = response.json()
        except ValueError as e:
            raise NotificationError(f"Email provider returned an unreadable response: {response.text}") from e

        logger.info(f"Order email sent for gift '{request.gift_type}'")
        return result


class WhatsAppDispatcher(NotificationDispatcher):
    """Sends a plain-text order summary through the WhatsApp Cloud API."""

    def check_config(self) -> None:
        if not self.settings.whatsapp_access_token:
            raise NotificationConfigError("WhatsApp access token not configured")
        if not self.settings.whatsapp_to_number:
            raise NotificationConfigError("WhatsApp recipient number not configured")
        if not self.settings.whatsapp_phone_number_id:
            raise NotificationConfigError("WhatsApp sender phone number id not configured")

    async def notify(self, request: NotificationRequest) -> Dict[str, Any]:
        self.check_config()
        base = self.settings.whatsapp_api_base.rstrip("/")
        url = f"{base}/{self.settings.whatsapp_phone_number_id}/messages"
        payload = {
            "messaging_product": "whatsapp",
            "to": self.settings.whatsapp_to_number,
            "type": "text",
            "text": {"body": format_chat_message(request)},
        }
        headers = {"Authorization": f"Bearer {self.settings.whatsapp_access_token}"}

        async with self._client() as client:
            try:
                response = await client.post(url, json=payload, headers=headers)
            except httpx.HTTPError as e:
                raise NotificationError(f"WhatsApp request failed: {e}") from e

        if not response.is_success:
            raise NotificationError(f"WhatsApp API returned {response.status_code}: {response.text}")

        try:
            result = response.json()
        except ValueError:
            logger.info(f"WhatsApp API Response: {response.text}")
            return {}
        logger.info(f"WhatsApp API Response: {result}")
        return result


class FunctionDispatcher(NotificationDispatcher):
    """Invokes a separately deployed notification function over HTTP."""

    def check_config(self) -> None:
        if not self.settings.notify_function_url:
            raise NotificationConfigError("NOTIFY_FUNCTION_URL not configured")

    async def notify(self, request: NotificationRequest) -> Dict[str, Any]:
        self.check_config()
        async with self._client() as client:
            try:
                response = await client.post(
                    self.settings.notify_function_url,
                    json=request.model_dump(),
                )
            except httpx.HTTPError as e:
                raise NotificationError(f"Notification function unreachable: {e}") from e

        if not response.is_success:
            raise NotificationError(
                f"Notification function returned {response.status_code}: {response.text}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise NotificationError(f"Notification function returned an unreadable response: {response.text}") from e


class NullDispatcher(NotificationDispatcher):
    async def notify(self, request: NotificationRequest) -> Dict[str, Any]:
        logger.info(f"Notifications disabled, skipping order for '{request.gift_type}'")
        return {}


_dispatchers: Dict[str, Type[NotificationDispatcher]] = {
    "email": EmailDispatcher,
    "whatsapp": WhatsAppDispatcher,
    "function": FunctionDispatcher,
    "none": NullDispatcher,
}


def get_dispatcher(channel: Optional[str] = None) -> NotificationDispatcher:
    settings = get_settings()
    channel = (channel or settings.notification_channel or "none").lower()
    dispatcher_class = _dispatchers.get(channel)
    if not dispatcher_class:
        logger.warning(f"Unknown notification channel '{channel}', notifications disabled.")
        dispatcher_class = NullDispatcher
    return dispatcher_class(settings)
