"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py -> brokerdesk/ -> src/ -> raíz del proyecto (donde está el .env)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Supabase
    supabase_url: str = Field(..., description="URL del proyecto Supabase")
    supabase_key: str = Field(..., description="Anon key de Supabase")
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key para operaciones admin"
    )
    voice_response_bucket: str = Field(
        "voice-responses", description="Bucket de storage para los audios de respuesta"
    )

    # Twilio (WhatsApp)
    twilio_account_sid: Optional[str] = Field(None, description="Account SID de Twilio")
    twilio_auth_token: Optional[str] = Field(None, description="Auth token de Twilio")
    twilio_whatsapp_number: Optional[str] = Field(
        None, description="Número remitente por defecto (ej: whatsapp:+14155238886)"
    )
    dispatch_max_attempts: int = Field(
        3, ge=1, description="Intentos máximos al enviar la respuesta por WhatsApp"
    )

    # Speech provider
    speech_provider: str = Field(
        "openai",
        description="Proveedor de voz a usar: 'openai' o 'groq'"
    )

    # OpenAI
    openai_api_key: Optional[str] = Field(None, description="API key de OpenAI")
    openai_transcription_model: str = Field("whisper-1", description="Modelo de transcripción")
    openai_tts_model: str = Field("tts-1", description="Modelo de síntesis de voz")
    openai_tts_voice: str = Field("alloy", description="Voz para la síntesis")

    # Groq
    groq_api_key: Optional[str] = Field(None, description="API key de Groq")
    groq_transcription_model: str = Field(
        "whisper-large-v3-turbo",
        description="Modelo de Groq para transcripción (whisper-large-v3, whisper-large-v3-turbo)"
    )
    groq_tts_model: str = Field("playai-tts", description="Modelo de Groq para síntesis")
    groq_tts_voice: str = Field("Fritz-PlayAI", description="Voz de Groq para síntesis")

    # Búsqueda de propiedades
    property_search_limit: int = Field(
        20, ge=1, description="Tope de filas de la consulta amplia de propiedades"
    )
    description_preview_length: int = Field(
        100, ge=1, description="Caracteres de descripción mostrados por propiedad"
    )
    currency_symbol: str = Field("₦", description="Símbolo de moneda para los precios")

    # Servidor HTTP
    server_host: str = Field("0.0.0.0", description="Host de escucha del servidor")
    server_port: int = Field(8000, description="Puerto de escucha del servidor")
    pipeline_timeout_seconds: Optional[float] = Field(
        120.0, description="Tiempo máximo por invocación del pipeline (None = sin límite)"
    )

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Constantes del sistema

# Localidades reconocidas en las consultas (ciudades, estados y barrios)
LOCATION_KEYWORDS = [
    "lagos",
    "abuja",
    "lekki",
    "ikoyi",
    "victoria island",
    "lagos island",
    "banana island",
    "ajah",
    "ikeja",
    "yaba",
    "surulere",
    "gbagada",
    "magodo",
    "ikorodu",
    "festac",
    "maitama",
    "wuse",
    "garki",
    "asokoro",
    "gwarinpa",
    "jabi",
    "port harcourt",
    "ibadan",
    "kano",
    "enugu",
    "benin",
    "kaduna",
    "jos",
    "owerri",
    "calabar",
    "uyo",
    "abeokuta",
]

PROPERTY_TYPES = [
    "land",
    "house",
    "apartment",
    "duplex",
    "bungalow",
    "flat",
    "office",
    "shop",
    "warehouse",
]

SALE_PHRASES = ["for sale", "to buy", "purchase"]

RENT_PHRASES = ["for rent", "to rent", "rental"]

LISTING_TYPES = ["sale", "rent"]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}
