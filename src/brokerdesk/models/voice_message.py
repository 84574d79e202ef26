"""
Modelos de mensajes de voz de WhatsApp.

- InboundWhatsAppMessage: payload del webhook de Twilio
- VoiceMessage: registro de 'whatsapp_voice_messages'
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

TranscriptionStatus = Literal["pending", "completed", "failed"]


class InboundWhatsAppMessage(BaseModel):
    """
    Mensaje entrante tal como lo envía Twilio (form-urlencoded).

    Los alias respetan los nombres de campo de Twilio.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message_sid: Optional[str] = Field(None, alias="MessageSid")
    from_number: Optional[str] = Field(None, alias="From")
    to_number: Optional[str] = Field(None, alias="To")
    media_url: Optional[str] = Field(None, alias="MediaUrl0")
    media_content_type: Optional[str] = Field(None, alias="MediaContentType0")
    num_media: int = Field(0, alias="NumMedia")

    @property
    def is_voice_note(self) -> bool:
        """Sólo se procesan mensajes con un adjunto de audio descargable."""
        return (
            self.num_media > 0
            and bool(self.media_url)
            and "audio" in (self.media_content_type or "")
        )

    @property
    def agent_phone_number(self) -> Optional[str]:
        """Número del agente destinatario sin el prefijo 'whatsapp:'."""
        if not self.to_number:
            return None
        return self.to_number.replace("whatsapp:", "")


class VoiceMessage(BaseModel):
    """
    Registro persistido de un mensaje de voz y su respuesta.

    transcription_status es terminal una vez 'completed' o 'failed';
    response_text y response_audio_path sólo se escriben después de
    'completed'.
    """

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    # Identificadores
    id: Optional[str] = Field(None, description="UUID generado por Supabase")
    message_sid: Optional[str] = Field(None, description="SID del mensaje en Twilio")
    agent_id: Optional[str] = Field(None, description="Agente dueño del número destino")

    # Origen
    from_number: Optional[str] = Field(None, description="Número del interesado")
    to_number: Optional[str] = Field(None, description="Número del agente")
    media_url: Optional[str] = Field(None, description="URL del audio en Twilio")
    media_content_type: Optional[str] = Field(None, description="MIME type del audio")

    # Procesamiento
    transcription: Optional[str] = Field(None, description="Texto transcripto")
    transcription_status: TranscriptionStatus = Field("pending")
    response_text: Optional[str] = Field(None, description="Respuesta generada")
    response_audio_path: Optional[str] = Field(None, description="Path del audio en storage")
    response_sent: bool = Field(default=False, description="Respuesta entregada por WhatsApp")

    # Metadatos
    created_at: Optional[str] = Field(None)
    updated_at: Optional[str] = Field(
        default_factory=lambda: datetime.utcnow().isoformat()
    )

    @classmethod
    def from_inbound(
        cls, inbound: InboundWhatsAppMessage, agent_id: Optional[str] = None
    ) -> "VoiceMessage":
        """Construye el registro pendiente a partir del webhook."""
        return cls(
            message_sid=inbound.message_sid,
            from_number=inbound.from_number,
            to_number=inbound.to_number,
            media_url=inbound.media_url,
            media_content_type=inbound.media_content_type,
            agent_id=agent_id,
        )

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para inserción en Supabase."""
        return self.model_dump(exclude={"id", "created_at"}, exclude_none=True)
