"""
Búsqueda de propiedades en dos fases.

1. Consulta amplia en Supabase con predicados independientes por columna
2. Re-filtrado estricto en memoria sobre las filas traídas
"""

import asyncio
from typing import Optional

import structlog
from pydantic import ValidationError

from brokerdesk.config import get_settings
from brokerdesk.database import PropertyRepository
from brokerdesk.errors import PropertyLookupError
from brokerdesk.models import PropertyRecord, SearchCriteria

logger = structlog.get_logger()


def matches_criteria(record: PropertyRecord, criteria: SearchCriteria) -> bool:
    """
    Verifica que una propiedad cumpla estrictamente los criterios de
    texto (ubicación, tipo y operación).
    """
    if record.status != "approved":
        return False

    if criteria.location:
        location = criteria.location.lower()
        haystacks = (record.city, record.state, record.address)
        if not any(location in (value or "").lower() for value in haystacks):
            return False

    if criteria.property_type:
        if criteria.property_type.lower() not in record.property_type.lower():
            return False

    if criteria.listing_type:
        if criteria.listing_type.lower() not in record.listing_type.lower():
            return False

    return True


class PropertyLookup:
    """
    Resuelve un SearchCriteria contra las propiedades aprobadas.

    La consulta amplia combina un OR de ubicación con otros filtros
    opcionales y puede admitir falsos positivos; por eso se trae de más
    (tope fijo, no paginado) y se re-filtra en memoria.
    """

    def __init__(
        self,
        repository: Optional[PropertyRepository] = None,
        limit: Optional[int] = None,
    ):
        self.repository = repository or PropertyRepository()
        self.limit = limit or get_settings().property_search_limit

    def _parse_rows(self, rows: list[dict]) -> list[PropertyRecord]:
        records = []
        for row in rows:
            try:
                records.append(PropertyRecord.model_validate(row))
            except ValidationError as e:
                logger.warning(
                    "Fila de propiedad inválida, se descarta",
                    property_id=row.get("id"),
                    error=str(e),
                )
        return records

    async def lookup(self, criteria: SearchCriteria) -> list[PropertyRecord]:
        """
        Busca propiedades que cumplan todos los criterios.

        Returns:
            Como máximo `limit` propiedades, de la más nueva a la más vieja

        Raises:
            PropertyLookupError: Si falla la consulta a Supabase
        """
        try:
            rows = await asyncio.to_thread(
                self.repository.search_approved, criteria, self.limit
            )
        except Exception as e:
            logger.error(
                "Error consultando propiedades",
                criteria=criteria.model_dump(exclude_none=True),
                error=str(e),
            )
            raise PropertyLookupError(f"Error consultando propiedades: {e}") from e

        candidates = self._parse_rows(rows or [])[: self.limit]
        results = [r for r in candidates if matches_criteria(r, criteria)]

        logger.info(
            "Búsqueda de propiedades completada",
            criteria=criteria.model_dump(exclude_none=True),
            fetched=len(candidates),
            matched=len(results),
        )
        return results
