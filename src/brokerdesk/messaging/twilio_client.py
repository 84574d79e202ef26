"""
Clientes de Twilio para WhatsApp.

- TwilioMediaClient: descarga autenticada de los audios recibidos
- WhatsAppSender: envío de mensajes de texto con reintentos
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

import aiohttp
import structlog
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential
from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from brokerdesk.config import get_settings
from brokerdesk.errors import DispatchError, MediaDownloadError

logger = structlog.get_logger()


@dataclass
class DownloadedMedia:
    """Audio descargado de Twilio."""

    content: bytes
    content_type: str

    @property
    def filename(self) -> str:
        # Whisper infiere el formato por la extensión
        subtype = self.content_type.split("/")[-1].split(";")[0].strip() or "ogg"
        return f"audio.{subtype}"


class TwilioMediaClient:
    """Descarga media de Twilio con autenticación básica."""

    def __init__(
        self,
        account_sid: Optional[str] = None,
        auth_token: Optional[str] = None,
        timeout: float = 60.0,
    ):
        settings = get_settings()
        self.account_sid = account_sid or settings.twilio_account_sid
        self.auth_token = auth_token or settings.twilio_auth_token
        self.timeout = aiohttp.ClientTimeout(total=timeout)

        if not self.account_sid or not self.auth_token:
            raise ValueError("TWILIO_ACCOUNT_SID y TWILIO_AUTH_TOKEN son requeridos")

    async def download(self, media_url: str) -> DownloadedMedia:
        """
        Descarga el audio de un mensaje.

        Raises:
            MediaDownloadError: Si Twilio responde con un status no exitoso
        """
        auth = aiohttp.BasicAuth(self.account_sid, self.auth_token)
        async with aiohttp.ClientSession(auth=auth, timeout=self.timeout) as session:
            async with session.get(media_url) as response:
                if response.status >= 400:
                    raise MediaDownloadError(
                        f"Failed to download audio from Twilio: {response.status} {response.reason}",
                        status=response.status,
                        body=await response.text(),
                    )
                content = await response.read()
                content_type = response.headers.get("Content-Type", "audio/ogg")

        logger.info("Audio descargado", size=len(content), content_type=content_type)
        return DownloadedMedia(content=content, content_type=content_type)


class WhatsAppSender:
    """
    Envía mensajes de WhatsApp vía la API REST de Twilio.

    El SDK es síncrono: cada envío corre en un thread para no bloquear
    el event loop, y los errores se reintentan con backoff exponencial.
    """

    def __init__(
        self,
        client: Optional[Client] = None,
        max_attempts: Optional[int] = None,
        wait=None,
    ):
        settings = get_settings()
        if client is None:
            if not settings.twilio_account_sid or not settings.twilio_auth_token:
                raise ValueError("TWILIO_ACCOUNT_SID y TWILIO_AUTH_TOKEN son requeridos")
            client = Client(settings.twilio_account_sid, settings.twilio_auth_token)
        self._client = client
        self.max_attempts = max_attempts or settings.dispatch_max_attempts
        self.wait = wait or wait_exponential(multiplier=1, min=2, max=10)

    async def send_text(self, from_number: str, to_number: str, body: str) -> str:
        """
        Envía un mensaje de texto.

        Returns:
            SID del mensaje creado

        Raises:
            DispatchError: Si fallan todos los intentos
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=self.wait,
                reraise=True,
            ):
                with attempt:
                    message = await asyncio.to_thread(
                        self._client.messages.create,
                        from_=from_number,
                        to=to_number,
                        body=body,
                    )
        except TwilioRestException as e:
            logger.error(
                "Error enviando mensaje de WhatsApp",
                to=to_number,
                status=e.status,
                error=e.msg,
            )
            raise DispatchError(f"Twilio error: {e.msg}", status=e.status, body=e.msg) from e

        logger.info("Mensaje de WhatsApp enviado", to=to_number, sid=message.sid)
        return message.sid
