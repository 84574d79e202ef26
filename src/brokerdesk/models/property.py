"""
Modelo de propiedad publicada.

Las propiedades viven en la tabla 'properties' de Supabase y las
administra el dashboard; el pipeline sólo las lee.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PropertyStatus = Literal["pending", "approved", "rejected"]


class PropertyRecord(BaseModel):
    """
    Propiedad tal como la devuelve la consulta a 'properties'.

    Sólo las propiedades con status 'approved' son elegibles para
    responder consultas.
    """

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    # Identificadores
    id: str = Field(..., description="UUID generado por Supabase")
    agent_id: Optional[str] = Field(None, description="Agente dueño del listing")

    # Ubicación
    address: str = Field(..., description="Dirección")
    city: str = Field(..., description="Ciudad")
    state: str = Field(..., description="Estado")
    landmark: Optional[str] = Field(None, description="Punto de referencia cercano")

    # Clasificación
    property_type: str = Field(..., description="Categoría libre: apartment, duplex, land...")
    listing_type: str = Field(..., description="sale o rent")
    status: PropertyStatus = Field("pending", description="Estado de moderación")

    # Datos económicos (sin moneda explícita)
    price: float = Field(..., description="Precio publicado")

    # Características físicas
    bedrooms: Optional[int] = Field(None, description="Cantidad de dormitorios")
    bathrooms: Optional[int] = Field(None, description="Cantidad de baños")
    area: Optional[float] = Field(None, description="Superficie en m²")

    description: Optional[str] = Field(None, description="Descripción libre")

    # Metadatos
    created_at: Optional[str] = Field(None, description="Timestamp de alta ISO")

    @field_validator("price", mode="before")
    @classmethod
    def _parse_price(cls, value):
        # Los montos pueden llegar como string numérico desde PostgREST
        if isinstance(value, str):
            return float(value.replace(",", "").strip() or 0)
        return value

    @field_validator("bedrooms", "bathrooms", mode="before")
    @classmethod
    def _parse_count(cls, value):
        if value is None or value == "":
            return None
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return None

    @field_validator("area", mode="before")
    @classmethod
    def _parse_area(cls, value):
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    @property
    def is_rental(self) -> bool:
        return self.listing_type.lower() == "rent"
