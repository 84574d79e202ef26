"""
Criterios de búsqueda derivados de una consulta en lenguaje natural.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

ListingType = Literal["sale", "rent"]


class SearchCriteria(BaseModel):
    """
    Interpretación estructurada y transitoria de una consulta.

    Todos los campos son opcionales e independientes: un registro vacío
    es válido y matchea todo lo que devuelve la base.
    """

    location: Optional[str] = Field(None, description="Localidad en minúsculas")
    property_type: Optional[str] = Field(None, description="Tipo del vocabulario fijo")
    listing_type: Optional[ListingType] = Field(None, description="sale o rent")
    min_price: Optional[float] = Field(None, description="Precio mínimo")
    # La extracción nunca lo completa; se respeta si se setea a mano
    max_price: Optional[float] = Field(None, description="Precio máximo")
    bedrooms: Optional[int] = Field(None, ge=0, description="Mínimo de dormitorios")

    @property
    def is_empty(self) -> bool:
        return not any(
            value is not None for value in self.model_dump().values()
        )
