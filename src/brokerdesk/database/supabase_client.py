"""
Cliente de Supabase.

Singleton para conexión a la base de datos y al storage.
"""

from functools import lru_cache
from typing import Optional

import structlog
from supabase import create_client, Client

from brokerdesk.config import get_settings

logger = structlog.get_logger()


class SupabaseClient:
    """Wrapper del cliente de Supabase con métodos de utilidad."""

    def __init__(self, client: Client):
        self._client = client

    @property
    def client(self) -> Client:
        """Acceso directo al cliente de Supabase."""
        return self._client

    def table(self, name: str):
        """Acceso a una tabla específica."""
        return self._client.table(name)

    def upload_file(
        self,
        bucket: str,
        path: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Sube un archivo al storage de Supabase.

        Args:
            bucket: Nombre del bucket
            path: Path destino dentro del bucket
            content: Bytes del archivo
            content_type: MIME type del archivo

        Returns:
            El path del archivo subido
        """
        file_options = {"content-type": content_type} if content_type else {}
        try:
            self._client.storage.from_(bucket).upload(path, content, file_options)
        except Exception as e:
            logger.error(
                "Error subiendo archivo a storage",
                bucket=bucket,
                path=path,
                error=str(e),
            )
            raise
        logger.info("Archivo subido a storage", bucket=bucket, path=path, size=len(content))
        return path


@lru_cache
def get_supabase_client() -> SupabaseClient:
    """
    Obtiene el cliente de Supabase (singleton cacheado).

    Returns:
        SupabaseClient configurado

    Raises:
        ValueError: Si las credenciales no están configuradas
    """
    settings = get_settings()

    if not settings.supabase_url or not settings.supabase_key:
        raise ValueError(
            "SUPABASE_URL y SUPABASE_KEY son requeridos. "
            "Configura las variables de entorno."
        )

    # El pipeline escribe sobre registros ajenos: preferir la service key
    key = settings.supabase_service_key or settings.supabase_key

    client = create_client(settings.supabase_url, key)
    logger.info("Cliente de Supabase inicializado", url=settings.supabase_url)

    return SupabaseClient(client)
