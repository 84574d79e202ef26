"""
Modelos de datos del sistema.

- PropertyRecord: propiedades publicadas (sólo lectura)
- VoiceMessage: mensajes de voz de WhatsApp y su respuesta
- SearchCriteria: criterios extraídos de la transcripción
"""

from brokerdesk.models.property import PropertyRecord, PropertyStatus
from brokerdesk.models.search import SearchCriteria, ListingType
from brokerdesk.models.voice_message import (
    InboundWhatsAppMessage,
    TranscriptionStatus,
    VoiceMessage,
)

__all__ = [
    # Propiedades
    "PropertyRecord",
    "PropertyStatus",
    # Búsqueda
    "SearchCriteria",
    "ListingType",
    # Mensajes de voz
    "InboundWhatsAppMessage",
    "TranscriptionStatus",
    "VoiceMessage",
]
