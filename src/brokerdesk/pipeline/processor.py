"""
Procesador de mensajes de voz.

Implementa el pipeline completo para un mensaje:
- Descarga y transcripción del audio
- Extracción de criterios, búsqueda y armado de la respuesta
- Síntesis de audio (best effort) y encolado del envío
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Optional

import structlog

from brokerdesk.config import get_settings
from brokerdesk.database import SupabaseClient, VoiceMessageRepository, get_supabase_client
from brokerdesk.errors import (
    EmptyAudioError,
    EmptyTranscriptionError,
    InvalidRequestError,
    PipelineTimeoutError,
    PropertyLookupError,
    VoiceMessageNotFoundError,
)
from brokerdesk.messaging import DispatchJob, DispatchQueue, TwilioMediaClient
from brokerdesk.search import CriteriaExtractor, PropertyLookup, ResponseFormatter
from brokerdesk.speech import BaseSpeechProvider, get_speech_provider

logger = structlog.get_logger()


@dataclass
class ProcessingResult:
    """Resultado de procesar un mensaje de voz."""

    voice_message_id: str
    transcription: str
    response_text: str
    audio_path: str


class VoiceMessageProcessor:
    """
    Orquestador del pipeline de un mensaje de voz.

    Flujo:
    1. Descargar el audio de Twilio y validar que no esté vacío
    2. Transcribir y validar que haya texto
    3. Guardar la transcripción ('completed')
    4. Extraer criterios -> buscar propiedades -> formatear respuesta
    5. Guardar la respuesta
    6. Sintetizar y subir el audio (si falla, path vacío)
    7. Encolar el envío por WhatsApp sin esperarlo

    Cualquier error antes del paso 5 deja el mensaje en 'failed'.

    El tiempo máximo sólo acota las etapas de red (1, 2, 4 y 6). Las
    escrituras en Supabase corren en threads que no se pueden cancelar:
    siempre se esperan completas, así el estado final no depende de una
    escritura tardía.
    """

    def __init__(
        self,
        repository: Optional[VoiceMessageRepository] = None,
        media_client: Optional[TwilioMediaClient] = None,
        speech_provider: Optional[BaseSpeechProvider] = None,
        extractor: Optional[CriteriaExtractor] = None,
        lookup: Optional[PropertyLookup] = None,
        formatter: Optional[ResponseFormatter] = None,
        dispatch_queue: Optional[DispatchQueue] = None,
        storage: Optional[SupabaseClient] = None,
    ):
        self.settings = get_settings()
        self.repository = repository or VoiceMessageRepository()
        self.media_client = media_client or TwilioMediaClient()
        self.speech = speech_provider or get_speech_provider()
        self.extractor = extractor or CriteriaExtractor()
        self.lookup = lookup or PropertyLookup()
        self.formatter = formatter or ResponseFormatter()
        self.dispatch_queue = dispatch_queue or DispatchQueue()
        self.storage = storage or get_supabase_client()

    async def _within_deadline(self, awaitable, deadline: Optional[float], stage: str):
        """Espera una etapa de red con el tiempo que le queda al pipeline."""
        if deadline is None:
            return await awaitable
        remaining = max(deadline - asyncio.get_running_loop().time(), 0)
        try:
            return await asyncio.wait_for(awaitable, remaining)
        except asyncio.TimeoutError as e:
            raise PipelineTimeoutError(
                f"Voice message processing exceeded its deadline during {stage}"
            ) from e

    async def build_response(
        self, transcription: str, deadline: Optional[float] = None
    ) -> str:
        """
        Convierte una transcripción en el texto de respuesta.

        Un error de la búsqueda se responde con una disculpa en vez de
        propagarse.
        """
        criteria = self.extractor.extract(transcription)
        logger.info(
            "Criterios extraídos",
            criteria=criteria.model_dump(exclude_none=True),
        )

        try:
            results = await self._within_deadline(
                self.lookup.lookup(criteria), deadline, "property lookup"
            )
        except PropertyLookupError as e:
            logger.warning("Búsqueda fallida, se responde con disculpa", error=str(e))
            return self.formatter.format_apology()

        return self.formatter.format(criteria, results)

    async def _upload_audio(self, voice_message_id: str, text: str) -> str:
        audio = await self.speech.synthesize(text)
        audio_path = (
            f"audio_responses/{voice_message_id}/"
            f"{int(time.time() * 1000)}.{audio.extension}"
        )
        await asyncio.to_thread(
            self.storage.upload_file,
            self.settings.voice_response_bucket,
            audio_path,
            audio.content,
            audio.content_type,
        )
        return audio_path

    async def _synthesize_audio(
        self, voice_message_id: str, text: str, deadline: Optional[float] = None
    ) -> str:
        """Genera y sube el audio de respuesta. Devuelve '' si algo falla."""
        try:
            return await self._within_deadline(
                self._upload_audio(voice_message_id, text), deadline, "speech synthesis"
            )
        except Exception as e:
            logger.warning(
                "No se pudo generar el audio de respuesta",
                voice_message_id=voice_message_id,
                error=str(e),
            )
            return ""

    async def _mark_failed(self, voice_message_id: str):
        try:
            await asyncio.to_thread(self.repository.mark_failed, voice_message_id)
        except Exception as e:
            logger.error(
                "No se pudo marcar el mensaje como fallido",
                voice_message_id=voice_message_id,
                error=str(e),
            )

    async def _run(
        self,
        voice_message_id: str,
        media_url: str,
        deadline: Optional[float],
        progress: dict,
    ) -> ProcessingResult:
        media = await self._within_deadline(
            self.media_client.download(media_url), deadline, "audio download"
        )
        if not media.content:
            raise EmptyAudioError("Downloaded audio is empty")

        transcription = await self._within_deadline(
            self.speech.transcribe(media.content, media.filename, media.content_type),
            deadline,
            "transcription",
        )
        if not transcription or not transcription.strip():
            raise EmptyTranscriptionError("Transcription returned no text")
        logger.info(
            "Transcripción completada",
            voice_message_id=voice_message_id,
            transcription=transcription,
        )

        await asyncio.to_thread(
            self.repository.save_transcription, voice_message_id, transcription
        )

        row = await asyncio.to_thread(self.repository.get_by_id, voice_message_id)
        if not row:
            raise VoiceMessageNotFoundError(f"Voice message {voice_message_id} not found")

        response_text = await self.build_response(transcription, deadline)

        await asyncio.to_thread(
            self.repository.save_response_text, voice_message_id, response_text
        )
        progress["response_saved"] = True

        audio_path = await self._synthesize_audio(voice_message_id, response_text, deadline)
        await asyncio.to_thread(
            self.repository.save_response_audio, voice_message_id, audio_path
        )

        self.dispatch_queue.submit(
            DispatchJob(voice_message_id=voice_message_id, audio_path=audio_path)
        )

        logger.info(
            "Mensaje de voz procesado",
            voice_message_id=voice_message_id,
            agent_id=row.get("agent_id"),
            audio_path=audio_path or None,
        )
        return ProcessingResult(
            voice_message_id=voice_message_id,
            transcription=transcription,
            response_text=response_text,
            audio_path=audio_path,
        )

    async def process(
        self,
        voice_message_id: str,
        media_url: Optional[str],
        timeout: Optional[float] = None,
    ) -> ProcessingResult:
        """
        Procesa un mensaje de voz de punta a punta.

        Args:
            voice_message_id: UUID del mensaje en Supabase
            media_url: URL del audio en Twilio
            timeout: Segundos máximos para las etapas de red (None = sin límite)

        Returns:
            ProcessingResult con transcripción y respuesta

        Raises:
            InvalidRequestError: Si falta voice_message_id o media_url (sin efectos)
            PipelineTimeoutError: Si se agota el tiempo antes de guardar la respuesta
            BrokerDeskError: Cualquier error del pipeline, ya registrado como 'failed'
        """
        if not voice_message_id:
            raise InvalidRequestError("voiceMessageId is required")
        if not media_url:
            raise InvalidRequestError("mediaUrl is required")

        logger.info("Procesando mensaje de voz", voice_message_id=voice_message_id)
        deadline = None
        if timeout is not None:
            deadline = asyncio.get_running_loop().time() + timeout
        progress = {"response_saved": False}

        try:
            return await self._run(voice_message_id, media_url, deadline, progress)
        except Exception as e:
            logger.error(
                "Error procesando mensaje de voz",
                voice_message_id=voice_message_id,
                error=str(e) or type(e).__name__,
            )
            if not progress["response_saved"]:
                await self._mark_failed(voice_message_id)
            raise

    async def reprocess(
        self, voice_message_id: str, timeout: Optional[float] = None
    ) -> ProcessingResult:
        """
        Vuelve a procesar un mensaje existente desde cero (retranscribir).

        La URL del audio se toma del registro guardado.
        """
        if not voice_message_id:
            raise InvalidRequestError("voiceMessageId is required")

        row = await asyncio.to_thread(self.repository.get_by_id, voice_message_id)
        if not row:
            raise VoiceMessageNotFoundError(f"Voice message {voice_message_id} not found")

        logger.info("Reprocesando mensaje de voz", voice_message_id=voice_message_id)
        return await self.process(voice_message_id, row.get("media_url"), timeout=timeout)
