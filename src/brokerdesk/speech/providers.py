"""
Abstracción de proveedores de voz.

Permite switchear entre proveedores (OpenAI, Groq) para speech-to-text
y text-to-speech sin cambiar el código del pipeline.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import structlog

from brokerdesk.config import get_settings
from brokerdesk.errors import SpeechSynthesisError, TranscriptionError

logger = structlog.get_logger()


@dataclass
class SynthesizedAudio:
    """Audio normalizado devuelto por cualquier proveedor."""
    content: bytes
    content_type: str
    extension: str
    provider: str


class BaseSpeechProvider(ABC):
    """Clase base para proveedores de voz."""

    provider_name: str = "base"

    @abstractmethod
    async def transcribe(
        self,
        audio: bytes,
        filename: str = "audio.ogg",
        content_type: str = "audio/ogg",
    ) -> str:
        """
        Transcribe un audio a texto.

        Args:
            audio: Bytes del audio
            filename: Nombre de archivo enviado en el multipart
            content_type: MIME type del audio

        Returns:
            Texto transcripto (puede ser vacío)

        Raises:
            TranscriptionError: Si el servicio responde con error
        """
        pass

    @abstractmethod
    async def synthesize(self, text: str) -> SynthesizedAudio:
        """
        Sintetiza audio a partir de texto.

        Raises:
            SpeechSynthesisError: Si el servicio responde con error
        """
        pass


class OpenAISpeechProvider(BaseSpeechProvider):
    """Proveedor de OpenAI (Whisper + TTS)."""

    provider_name = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        transcription_model: Optional[str] = None,
        tts_model: Optional[str] = None,
        voice: Optional[str] = None,
    ):
        from openai import AsyncOpenAI

        settings = get_settings()
        self.api_key = api_key or settings.openai_api_key
        self.transcription_model = transcription_model or settings.openai_transcription_model
        self.tts_model = tts_model or settings.openai_tts_model
        self.voice = voice or settings.openai_tts_voice

        if not self.api_key:
            raise ValueError("OPENAI_API_KEY no configurada")

        self.client = AsyncOpenAI(api_key=self.api_key)
        logger.info(
            "OpenAISpeechProvider inicializado",
            transcription_model=self.transcription_model,
            tts_model=self.tts_model,
        )

    async def transcribe(
        self,
        audio: bytes,
        filename: str = "audio.ogg",
        content_type: str = "audio/ogg",
    ) -> str:
        from openai import APIStatusError

        try:
            result = await self.client.audio.transcriptions.create(
                model=self.transcription_model,
                file=(filename, audio, content_type),
            )
        except APIStatusError as e:
            raise TranscriptionError(
                f"OpenAI transcription error: {e.response.text}",
                status=e.status_code,
                body=e.response.text,
            ) from e

        return (result.text or "").strip()

    async def synthesize(self, text: str) -> SynthesizedAudio:
        from openai import APIStatusError

        try:
            response = await self.client.audio.speech.create(
                model=self.tts_model,
                voice=self.voice,
                input=text,
                response_format="mp3",
            )
        except APIStatusError as e:
            raise SpeechSynthesisError(
                "Failed to generate audio response",
                status=e.status_code,
                body=e.response.text,
            ) from e

        return SynthesizedAudio(
            content=response.content,
            content_type="audio/mpeg",
            extension="mp3",
            provider=self.provider_name,
        )


class GroqSpeechProvider(BaseSpeechProvider):
    """
    Proveedor de Groq (LPU inference).

    Modelos disponibles:
    - whisper-large-v3-turbo: Transcripción rápida y económica
    - whisper-large-v3: Más preciso
    - playai-tts: Síntesis de voz en inglés

    Docs: https://console.groq.com/docs/speech-to-text
    """

    provider_name = "groq"

    def __init__(
        self,
        api_key: Optional[str] = None,
        transcription_model: Optional[str] = None,
        tts_model: Optional[str] = None,
        voice: Optional[str] = None,
    ):
        from groq import AsyncGroq

        settings = get_settings()
        self.api_key = api_key or settings.groq_api_key
        self.transcription_model = transcription_model or settings.groq_transcription_model
        self.tts_model = tts_model or settings.groq_tts_model
        self.voice = voice or settings.groq_tts_voice

        if not self.api_key:
            raise ValueError("GROQ_API_KEY no configurada")

        self.client = AsyncGroq(api_key=self.api_key)
        logger.info(
            "GroqSpeechProvider inicializado",
            transcription_model=self.transcription_model,
            tts_model=self.tts_model,
        )

    async def transcribe(
        self,
        audio: bytes,
        filename: str = "audio.ogg",
        content_type: str = "audio/ogg",
    ) -> str:
        from groq import APIStatusError

        try:
            result = await self.client.audio.transcriptions.create(
                model=self.transcription_model,
                file=(filename, audio, content_type),
            )
        except APIStatusError as e:
            raise TranscriptionError(
                f"Groq transcription error: {e.response.text}",
                status=e.status_code,
                body=e.response.text,
            ) from e

        return (result.text or "").strip()

    async def synthesize(self, text: str) -> SynthesizedAudio:
        from groq import APIStatusError

        try:
            response = await self.client.audio.speech.create(
                model=self.tts_model,
                voice=self.voice,
                input=text,
                response_format="wav",
            )
            content = await response.read()
        except APIStatusError as e:
            raise SpeechSynthesisError(
                "Failed to generate audio response",
                status=e.status_code,
                body=e.response.text,
            ) from e

        return SynthesizedAudio(
            content=content,
            content_type="audio/wav",
            extension="wav",
            provider=self.provider_name,
        )


def get_speech_provider(
    provider: Optional[str] = None,
    api_key: Optional[str] = None,
) -> BaseSpeechProvider:
    """
    Factory para obtener el proveedor de voz configurado.

    Args:
        provider: 'openai' o 'groq' (default: settings.speech_provider)
        api_key: API key (default: del settings según provider)

    Returns:
        Instancia del proveedor configurado
    """
    settings = get_settings()
    provider = provider or settings.speech_provider

    if provider.lower() == "openai":
        return OpenAISpeechProvider(api_key=api_key)
    elif provider.lower() == "groq":
        return GroqSpeechProvider(api_key=api_key)
    else:
        raise ValueError(f"Proveedor de voz no soportado: {provider}. Usar 'openai' o 'groq'")
