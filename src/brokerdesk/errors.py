"""
Errores tipados del sistema.

La capa HTTP los atrapa una sola vez y responde 500 con el mensaje;
no se exponen códigos de error estructurados.
"""

from typing import Optional


class BrokerDeskError(RuntimeError):
    """Clase base para todos los errores del pipeline."""


# Errores de entrada

class InvalidRequestError(BrokerDeskError):
    """Faltan campos obligatorios en la invocación (voiceMessageId, mediaUrl)."""


# Errores de servicios externos

class UpstreamError(BrokerDeskError):
    """Respuesta no exitosa de un servicio externo."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.status = status
        self.body = body


class MediaDownloadError(UpstreamError):
    """No se pudo descargar el audio desde Twilio."""


class TranscriptionError(UpstreamError):
    """El servicio de speech-to-text devolvió un error."""


class SpeechSynthesisError(UpstreamError):
    """El servicio de text-to-speech devolvió un error (no fatal)."""


# Errores de datos

class EmptyAudioError(BrokerDeskError):
    """El audio descargado está vacío."""


class EmptyTranscriptionError(BrokerDeskError):
    """La transcripción no contiene texto."""


class VoiceMessageNotFoundError(BrokerDeskError):
    """El registro del mensaje de voz no existe."""


class PipelineTimeoutError(BrokerDeskError):
    """El procesamiento superó el tiempo máximo configurado."""


# Errores de persistencia y consulta

class PersistenceError(BrokerDeskError):
    """Falló una escritura en Supabase."""


class PropertyLookupError(BrokerDeskError):
    """Falló la consulta de propiedades."""


# Errores de despacho

class DispatchError(UpstreamError):
    """No se pudo enviar la respuesta por WhatsApp."""


__all__ = [
    "BrokerDeskError",
    "InvalidRequestError",
    "UpstreamError",
    "MediaDownloadError",
    "TranscriptionError",
    "SpeechSynthesisError",
    "EmptyAudioError",
    "EmptyTranscriptionError",
    "VoiceMessageNotFoundError",
    "PipelineTimeoutError",
    "PersistenceError",
    "PropertyLookupError",
    "DispatchError",
]
