"""
Recepción de mensajes entrantes del webhook de WhatsApp.
"""

import asyncio
from typing import Optional

import structlog

from brokerdesk.database import ProfileRepository, VoiceMessageRepository
from brokerdesk.models import InboundWhatsAppMessage, VoiceMessage

logger = structlog.get_logger()


class VoiceMessageIntake:
    """Registra como 'pending' los mensajes de voz que llegan por Twilio."""

    def __init__(
        self,
        repository: Optional[VoiceMessageRepository] = None,
        profiles: Optional[ProfileRepository] = None,
    ):
        self.repository = repository or VoiceMessageRepository()
        self.profiles = profiles or ProfileRepository()

    async def receive(self, inbound: InboundWhatsAppMessage) -> Optional[dict]:
        """
        Guarda el mensaje si es una nota de voz.

        Returns:
            El registro insertado, o None si el mensaje no trae audio
        """
        if not inbound.is_voice_note:
            logger.info(
                "Mensaje sin audio ignorado",
                message_sid=inbound.message_sid,
                num_media=inbound.num_media,
                content_type=inbound.media_content_type,
            )
            return None

        agent_id = None
        if inbound.agent_phone_number:
            agent_id = await asyncio.to_thread(
                self.profiles.get_id_by_phone_number, inbound.agent_phone_number
            )
        if not agent_id:
            logger.warning(
                "No se encontró agente para el número",
                to=inbound.to_number,
            )

        record = VoiceMessage.from_inbound(inbound, agent_id=agent_id)
        return await asyncio.to_thread(self.repository.create, record)
