"""
Extracción de criterios de búsqueda desde texto libre.

Convierte la transcripción de un mensaje de voz en un SearchCriteria
usando vocabularios fijos y expresiones regulares. No falla nunca:
si no hay señal para un campo, el campo queda sin completar.
"""

import re
from typing import Optional

from brokerdesk.config import (
    LOCATION_KEYWORDS,
    PROPERTY_TYPES,
    RENT_PHRASES,
    SALE_PHRASES,
)
from brokerdesk.models import SearchCriteria

PRICE_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(million|thousand|k|m)\b")
BEDROOMS_PATTERN = re.compile(r"(\d+)\s*(bed|bedroom)")

PRICE_MULTIPLIERS = {
    "k": 1_000,
    "thousand": 1_000,
    "m": 1_000_000,
    "million": 1_000_000,
}


class CriteriaExtractor:
    """
    Extractor basado en keywords y regex.

    Para ubicación y tipo de propiedad se consideran todas las keywords
    presentes en el texto y gana la más larga ("lagos island" sobre
    "lagos"). Empates: primero la que aparece antes en el texto, después
    el orden del vocabulario.
    """

    def __init__(
        self,
        locations: Optional[list[str]] = None,
        property_types: Optional[list[str]] = None,
    ):
        self.locations = locations or LOCATION_KEYWORDS
        self.property_types = property_types or PROPERTY_TYPES

    def _normalize(self, text: str) -> str:
        return re.sub(r"\s+", " ", text or "").strip().lower()

    def _best_keyword(
        self, text: str, keywords: list[str], allow_plural: bool = False
    ) -> Optional[str]:
        suffix = r"(?:s|es)?" if allow_plural else ""
        candidates = []
        for rank, keyword in enumerate(keywords):
            match = re.search(rf"\b{re.escape(keyword)}{suffix}\b", text)
            if match:
                candidates.append((-len(keyword), match.start(), rank, keyword))
        if not candidates:
            return None
        return min(candidates)[3]

    def _detect_listing_type(self, text: str) -> Optional[str]:
        # Venta se evalúa primero: si aparecen ambas, gana venta
        if any(phrase in text for phrase in SALE_PHRASES):
            return "sale"
        if any(phrase in text for phrase in RENT_PHRASES):
            return "rent"
        return None

    def _detect_price(self, text: str) -> Optional[float]:
        match = PRICE_PATTERN.search(text)
        if not match:
            return None
        amount = float(match.group(1))
        return amount * PRICE_MULTIPLIERS[match.group(2)]

    def _detect_bedrooms(self, text: str) -> Optional[int]:
        match = BEDROOMS_PATTERN.search(text)
        if not match:
            return None
        return int(match.group(1))

    def extract(self, transcription: str) -> SearchCriteria:
        """
        Extrae los criterios de búsqueda de una transcripción.

        Args:
            transcription: Texto libre del interesado

        Returns:
            SearchCriteria, posiblemente vacío
        """
        text = self._normalize(transcription)

        return SearchCriteria(
            location=self._best_keyword(text, self.locations),
            property_type=self._best_keyword(
                text, self.property_types, allow_plural=True
            ),
            listing_type=self._detect_listing_type(text),
            # El único monto reconocido se toma como precio mínimo
            min_price=self._detect_price(text),
            bedrooms=self._detect_bedrooms(text),
        )
