"""
Despacho de respuestas por WhatsApp.

El pipeline no espera la entrega: encola un DispatchJob y sigue. La
cola ejecuta cada job como una tarea asyncio y guarda el resultado,
de modo que los fallos quedan registrados en vez de perderse.
"""

import asyncio
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional

import structlog

from brokerdesk.config import get_settings
from brokerdesk.database import VoiceMessageRepository
from brokerdesk.errors import PersistenceError, VoiceMessageNotFoundError
from brokerdesk.messaging.twilio_client import WhatsAppSender
from brokerdesk.models import VoiceMessage

logger = structlog.get_logger()

FALLBACK_RESPONSE = "Thank you for your voice message. Our team will respond soon."


@dataclass
class DispatchJob:
    """Pedido de envío de la respuesta de un mensaje de voz."""

    voice_message_id: str
    audio_path: Optional[str] = None


@dataclass
class DispatchResult:
    """Resultado de un DispatchJob."""

    voice_message_id: str
    success: bool
    message_sid: Optional[str] = None
    error: Optional[str] = None


class ResponseDispatcher:
    """Envía al interesado la respuesta guardada en el mensaje de voz."""

    def __init__(
        self,
        repository: Optional[VoiceMessageRepository] = None,
        sender: Optional[WhatsAppSender] = None,
    ):
        self.settings = get_settings()
        self.repository = repository or VoiceMessageRepository()
        self.sender = sender or WhatsAppSender()

    async def send_response(
        self, voice_message_id: str, audio_path: Optional[str] = None
    ) -> str:
        """
        Envía la respuesta de un mensaje de voz y la marca como enviada.

        Por ahora se envía el texto; el audio queda en storage.

        Returns:
            SID del mensaje de WhatsApp

        Raises:
            VoiceMessageNotFoundError: Si el mensaje no existe
            DispatchError: Si Twilio rechaza el envío
        """
        row = await asyncio.to_thread(self.repository.get_by_id, voice_message_id)
        if not row:
            raise VoiceMessageNotFoundError("Voice message not found")

        message = VoiceMessage.model_validate(row)
        logger.info(
            "Enviando respuesta de WhatsApp",
            voice_message_id=voice_message_id,
            audio_path=audio_path or message.response_audio_path,
        )

        # Se responde desde el número al que escribió el interesado
        from_number = message.to_number or self.settings.twilio_whatsapp_number
        sid = await self.sender.send_text(
            from_number=from_number,
            to_number=message.from_number,
            body=message.response_text or FALLBACK_RESPONSE,
        )

        try:
            await asyncio.to_thread(self.repository.mark_response_sent, voice_message_id)
        except PersistenceError as e:
            # El mensaje ya salió: no se reintenta el envío
            logger.error(
                "Error marcando respuesta como enviada",
                voice_message_id=voice_message_id,
                error=str(e),
            )

        logger.info("Respuesta enviada", voice_message_id=voice_message_id, sid=sid)
        return sid


class DispatchQueue:
    """
    Cola en memoria de envíos desacoplados del pipeline.

    Mantiene referencias a las tareas en curso y el último resultado
    por mensaje, para poder observarlos y reintentarlos. Sólo se
    conservan los `max_results` resultados más recientes.
    """

    def __init__(
        self,
        dispatcher: Optional[ResponseDispatcher] = None,
        max_results: int = 1000,
    ):
        self._dispatcher = dispatcher
        self._tasks: set[asyncio.Task] = set()
        self.max_results = max_results
        self.results: OrderedDict[str, DispatchResult] = OrderedDict()

    @property
    def dispatcher(self) -> ResponseDispatcher:
        if self._dispatcher is None:
            self._dispatcher = ResponseDispatcher()
        return self._dispatcher

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def _run(self, job: DispatchJob) -> DispatchResult:
        try:
            sid = await self.dispatcher.send_response(
                job.voice_message_id, job.audio_path
            )
            result = DispatchResult(
                voice_message_id=job.voice_message_id,
                success=True,
                message_sid=sid,
            )
        except Exception as e:
            logger.error(
                "Falló el envío de la respuesta",
                voice_message_id=job.voice_message_id,
                error=str(e),
            )
            result = DispatchResult(
                voice_message_id=job.voice_message_id,
                success=False,
                error=str(e),
            )
        self._record(result)
        return result

    def _record(self, result: DispatchResult):
        self.results.pop(result.voice_message_id, None)
        self.results[result.voice_message_id] = result
        while len(self.results) > self.max_results:
            self.results.popitem(last=False)

    def submit(self, job: DispatchJob) -> asyncio.Task:
        """Encola un envío sin esperarlo."""
        task = asyncio.create_task(self._run(job))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info("Envío encolado", voice_message_id=job.voice_message_id)
        return task

    def failed(self) -> list[DispatchResult]:
        """Envíos que terminaron con error."""
        return [r for r in self.results.values() if not r.success]

    async def drain(self) -> list[DispatchResult]:
        """
        Espera a que terminen los envíos en curso.

        Returns:
            Los resultados registrados, incluidos los de envíos que ya
            habían terminado antes de llamar a drain
        """
        if self._tasks:
            await asyncio.gather(*list(self._tasks))
        return list(self.results.values())
