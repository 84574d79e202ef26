"""
Mensajería por WhatsApp (Twilio).

Provee descarga de audios recibidos y envío desacoplado de respuestas.
"""

from brokerdesk.messaging.twilio_client import (
    DownloadedMedia,
    TwilioMediaClient,
    WhatsAppSender,
)
from brokerdesk.messaging.dispatcher import (
    DispatchJob,
    DispatchQueue,
    DispatchResult,
    ResponseDispatcher,
)

__all__ = [
    "DownloadedMedia",
    "TwilioMediaClient",
    "WhatsAppSender",
    "DispatchJob",
    "DispatchQueue",
    "DispatchResult",
    "ResponseDispatcher",
]
