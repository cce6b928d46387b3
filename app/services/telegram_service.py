"""
Telegram Service

Delivers stored QR images to a Telegram chat via the Bot API sendPhoto call.
"""

import base64
import binascii
import logging
from typing import Optional

import httpx

from app.core.config import settings
from app.core.http_client import post_with_retry
from app.models.enums import TelegramIntegrationErrorKind


logger = logging.getLogger(__name__)


class TelegramIntegrationError(Exception):
    """Raised when a QR image could not be delivered to Telegram."""

    def __init__(self, kind: TelegramIntegrationErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class TelegramQrSender:
    """
    Sends PNG QR codes to a chat as photos.

    The bot token, API base URL and timeout default to the application
    settings; an empty token means Telegram delivery is not configured.
    """

    def __init__(
        self,
        bot_token: Optional[str] = None,
        api_base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self._bot_token = settings.TELEGRAM_BOT_TOKEN if bot_token is None else bot_token
        self._api_base_url = (api_base_url or settings.TELEGRAM_API_BASE_URL).rstrip("/")
        self._timeout = timeout or settings.TELEGRAM_TIMEOUT_SECONDS

    async def send_qr_code(self, chat_id: int, qr_image_base64: str, caption: str) -> None:
        """
        Send a base64 PNG to a chat.

        Args:
            chat_id: Target Telegram chat.
            qr_image_base64: Stored QR image.
            caption: Photo caption.

        Raises:
            TelegramIntegrationError: With the failure kind on any error.
        """
        if not self._bot_token or not self._bot_token.strip():
            raise TelegramIntegrationError(
                TelegramIntegrationErrorKind.CONFIGURATION,
                "Telegram bot token is not configured.",
            )

        try:
            image_bytes = base64.b64decode(qr_image_base64, validate=True)
        except (binascii.Error, ValueError):
            raise TelegramIntegrationError(
                TelegramIntegrationErrorKind.INVALID_PAYLOAD,
                "QR payload is not valid Base64.",
            )

        url = f"{self._api_base_url}/bot{self._bot_token}/sendPhoto"

        try:
            response = await post_with_retry(
                url,
                data={"chat_id": str(chat_id), "caption": caption},
                files={"photo": ("qr-code.png", image_bytes, "image/png")},
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Telegram send timed out for chat {chat_id}: {e}")
            raise TelegramIntegrationError(
                TelegramIntegrationErrorKind.TIMEOUT,
                "Telegram request timed out.",
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"Network error while sending QR to Telegram chat {chat_id}: {e}")
            raise TelegramIntegrationError(
                TelegramIntegrationErrorKind.NETWORK,
                "Network error while contacting Telegram.",
            ) from e

        if response.status_code == 400:
            logger.warning(f"Telegram rejected request with 400 for chat {chat_id}: {response.text}")
            raise TelegramIntegrationError(
                TelegramIntegrationErrorKind.INVALID_CHAT,
                "Invalid Telegram chat or bot has no access to it.",
            )

        if response.status_code == 403:
            logger.warning(f"Telegram returned 403 for chat {chat_id}")
            raise TelegramIntegrationError(
                TelegramIntegrationErrorKind.FORBIDDEN,
                "Bot is blocked or has no permission to send messages.",
            )

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code != 200 or not body.get("ok"):
            logger.error(f"Telegram API error for chat {chat_id}: {response.status_code} {response.text}")
            raise TelegramIntegrationError(
                TelegramIntegrationErrorKind.REMOTE_API,
                "Telegram API error occurred.",
            )

        logger.info(f"QR image sent to Telegram chat {chat_id}")
