"""
Repositorios para operaciones CRUD en Supabase.

Cada repositorio maneja una tabla/entidad específica.
"""

from datetime import datetime
from typing import Optional

import structlog

from brokerdesk.database.supabase_client import get_supabase_client, SupabaseClient
from brokerdesk.errors import PersistenceError
from brokerdesk.models import SearchCriteria, VoiceMessage

logger = structlog.get_logger()


class BaseRepository:
    """Clase base para repositorios."""

    TABLE: str = ""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or get_supabase_client()

    @property
    def client(self) -> SupabaseClient:
        return self._client

    def _update(self, record_id: str, data: dict, action: str) -> dict:
        """
        Actualiza un registro por id y relanza cualquier error como
        PersistenceError después de loguearlo.
        """
        data = {**data, "updated_at": datetime.utcnow().isoformat()}
        try:
            response = (
                self.client.table(self.TABLE)
                .update(data)
                .eq("id", record_id)
                .execute()
            )
        except Exception as e:
            logger.error(
                f"Error en {action}",
                table=self.TABLE,
                record_id=record_id,
                error=str(e),
            )
            raise PersistenceError(f"Error en {action}: {e}") from e
        return response.data[0] if response.data else {}


class PropertyRepository(BaseRepository):
    """Repositorio para propiedades publicadas (sólo lectura)."""

    TABLE = "properties"

    def search_approved(
        self,
        criteria: SearchCriteria,
        limit: int = 20,
    ) -> list[dict]:
        """
        Consulta amplia de propiedades aprobadas.

        Los predicados son independientes por columna; la ubicación se
        busca en city, state o address con un OR. El resultado puede
        traer falsos positivos y debe re-filtrarse en memoria.

        Returns:
            Hasta `limit` filas ordenadas de la más nueva a la más vieja
        """
        query = (
            self.client.table(self.TABLE)
            .select("*")
            .eq("status", "approved")
        )

        if criteria.location:
            pattern = f"%{criteria.location}%"
            query = query.or_(
                f"city.ilike.{pattern},state.ilike.{pattern},address.ilike.{pattern}"
            )
        if criteria.property_type:
            query = query.ilike("property_type", f"%{criteria.property_type}%")
        if criteria.listing_type:
            query = query.ilike("listing_type", f"%{criteria.listing_type}%")
        if criteria.min_price is not None:
            query = query.gte("price", criteria.min_price)
        if criteria.max_price is not None:
            query = query.lte("price", criteria.max_price)
        if criteria.bedrooms is not None:
            query = query.gte("bedrooms", criteria.bedrooms)

        response = query.order("created_at", desc=True).limit(limit).execute()
        return response.data


class VoiceMessageRepository(BaseRepository):
    """Repositorio para mensajes de voz de WhatsApp."""

    TABLE = "whatsapp_voice_messages"

    def create(self, message: VoiceMessage) -> dict:
        """
        Inserta un mensaje de voz pendiente.

        Returns:
            El registro insertado con su ID
        """
        data = message.to_db_dict()
        try:
            response = self.client.table(self.TABLE).insert(data).execute()
        except Exception as e:
            logger.error(
                "Error guardando mensaje de voz",
                message_sid=message.message_sid,
                error=str(e),
            )
            raise PersistenceError(f"Error guardando mensaje de voz: {e}") from e
        logger.info(
            "Mensaje de voz guardado",
            message_sid=message.message_sid,
            agent_id=message.agent_id,
        )
        return response.data[0] if response.data else {}

    def get_by_id(self, voice_message_id: str) -> Optional[dict]:
        """Obtiene un mensaje de voz por su UUID."""
        response = (
            self.client.table(self.TABLE)
            .select("*")
            .eq("id", voice_message_id)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    def save_transcription(self, voice_message_id: str, transcription: str) -> dict:
        """Guarda la transcripción y marca el mensaje como 'completed'."""
        return self._update(
            voice_message_id,
            {
                "transcription": transcription,
                "transcription_status": "completed",
            },
            action="guardar transcripción",
        )

    def save_response_text(self, voice_message_id: str, response_text: str) -> dict:
        """Guarda el texto de respuesta generado."""
        return self._update(
            voice_message_id,
            {"response_text": response_text},
            action="guardar respuesta",
        )

    def save_response_audio(self, voice_message_id: str, audio_path: str) -> dict:
        """Guarda el path del audio de respuesta."""
        return self._update(
            voice_message_id,
            {"response_audio_path": audio_path},
            action="guardar audio de respuesta",
        )

    def mark_failed(self, voice_message_id: str) -> dict:
        """Marca el mensaje con el estado terminal 'failed'."""
        return self._update(
            voice_message_id,
            {"transcription_status": "failed"},
            action="marcar mensaje como fallido",
        )

    def mark_response_sent(self, voice_message_id: str) -> dict:
        """Marca la respuesta como entregada."""
        return self._update(
            voice_message_id,
            {"response_sent": True},
            action="marcar respuesta como enviada",
        )


class ProfileRepository(BaseRepository):
    """Repositorio para perfiles de agentes."""

    TABLE = "profiles"

    def get_id_by_phone_number(self, phone_number: str) -> Optional[str]:
        """Obtiene el id del agente dueño de un número de WhatsApp."""
        response = (
            self.client.table(self.TABLE)
            .select("id")
            .eq("phone_number", phone_number)
            .limit(1)
            .execute()
        )
        return response.data[0]["id"] if response.data else None
