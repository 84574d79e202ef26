"""
Módulo de base de datos.

Provee acceso a Supabase y operaciones CRUD.
"""

from brokerdesk.database.supabase_client import get_supabase_client, SupabaseClient
from brokerdesk.database.repositories import (
    PropertyRepository,
    VoiceMessageRepository,
    ProfileRepository,
)

__all__ = [
    "get_supabase_client",
    "SupabaseClient",
    "PropertyRepository",
    "VoiceMessageRepository",
    "ProfileRepository",
]
