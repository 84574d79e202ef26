"""
Pipeline de mensajes de voz.

Recibe notas de voz, las transcribe y responde con propiedades.
"""

from brokerdesk.pipeline.intake import VoiceMessageIntake
from brokerdesk.pipeline.processor import ProcessingResult, VoiceMessageProcessor

__all__ = [
    "VoiceMessageIntake",
    "ProcessingResult",
    "VoiceMessageProcessor",
]
