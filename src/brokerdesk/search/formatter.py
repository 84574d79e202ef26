"""
Formateo de la respuesta al interesado.

Arma el texto que se guarda en el mensaje de voz y se envía por
WhatsApp: un listado numerado de propiedades o una guía para ampliar
la búsqueda cuando no hay resultados.
"""

from typing import Optional

from brokerdesk.config import get_settings
from brokerdesk.models import PropertyRecord, SearchCriteria

APOLOGY_MESSAGE = (
    "Sorry, I'm having trouble searching our listings right now. "
    "Please try again in a few minutes, or one of our agents will get back to you shortly."
)

CALL_TO_ACTION = (
    "📞 Reply with the number of any property you'd like to view, "
    "or tell me more about what you're looking for and I'll refine the search."
)


def pluralize(noun: str, count: int) -> str:
    """
    Plural simple en inglés.

    consonante + y -> ies, terminación sibilante -> es, resto -> s.
    """
    if count <= 1:
        return noun
    if noun.endswith("y") and noun[-2:-1] not in ("a", "e", "i", "o", "u"):
        return f"{noun[:-1]}ies"
    if noun.endswith(("s", "x", "z", "ch", "sh")):
        return f"{noun}es"
    return f"{noun}s"


class ResponseFormatter:
    """Convierte criterios + resultados en el texto de respuesta."""

    def __init__(
        self,
        currency_symbol: Optional[str] = None,
        preview_length: Optional[int] = None,
    ):
        settings = get_settings()
        self.currency_symbol = currency_symbol or settings.currency_symbol
        self.preview_length = preview_length or settings.description_preview_length

    def describe_criteria(self, criteria: SearchCriteria, count: int) -> str:
        """Reformula los criterios: '<tipo> in <ubicación> for <operación>'."""
        noun = pluralize(criteria.property_type or "property", count)
        parts = [noun]
        if criteria.location:
            parts.append(f"in {criteria.location.title()}")
        if criteria.listing_type:
            parts.append(f"for {criteria.listing_type}")
        return " ".join(parts)

    def format_price(self, record: PropertyRecord) -> str:
        price = f"{self.currency_symbol}{record.price:,.0f}"
        if record.is_rental:
            price += "/year"
        return price

    def format_area(self, area: float) -> str:
        # Separador de miles y sin notación científica ni ceros de más
        if area == int(area):
            return f"{area:,.0f}"
        return f"{area:,.2f}".rstrip("0").rstrip(".")

    def format_amenities(self, record: PropertyRecord) -> Optional[str]:
        items = []
        if record.bedrooms:
            items.append(f"🛏️ {record.bedrooms} {pluralize('bed', record.bedrooms)}")
        if record.bathrooms:
            items.append(f"🛁 {record.bathrooms} {pluralize('bath', record.bathrooms)}")
        if record.area:
            items.append(f"📐 {self.format_area(record.area)} sqm")
        return " ".join(items) if items else None

    def format_description(self, record: PropertyRecord) -> Optional[str]:
        if not record.description:
            return None
        preview = record.description[: self.preview_length]
        if len(record.description) > self.preview_length:
            preview += "..."
        return preview

    def format_property(self, index: int, record: PropertyRecord) -> str:
        """Bloque de texto para una propiedad del listado."""
        lines = [
            f"{index}. *{record.property_type.upper()} FOR {record.listing_type.upper()}*",
            f"📍 {record.address}, {record.city}, {record.state}",
            f"💰 {self.format_price(record)}",
        ]

        amenities = self.format_amenities(record)
        if amenities:
            lines.append(amenities)

        description = self.format_description(record)
        if description:
            lines.append(f"📝 {description}")

        if record.landmark:
            lines.append(f"🗺️ Near {record.landmark}")

        return "\n".join(lines)

    def format_no_results(self, criteria: SearchCriteria) -> str:
        """Guía para ampliar la búsqueda; no menciona propiedades."""
        summary = self.describe_criteria(criteria, count=2)
        return (
            f"Thank you for your message! I couldn't find any {summary} "
            "matching your request right now.\n\n"
            "Here are a few things you could try:\n"
            "1. Search in a nearby area or a wider location\n"
            "2. Consider a different property type\n"
            "3. Adjust your budget or the number of bedrooms\n\n"
            "Would you like me to search again with different criteria?"
        )

    def format(self, criteria: SearchCriteria, results: list[PropertyRecord]) -> str:
        """
        Genera la respuesta completa.

        Args:
            criteria: Criterios extraídos de la transcripción
            results: Propiedades encontradas, en orden de presentación

        Returns:
            Texto listo para enviar por WhatsApp
        """
        if not results:
            return self.format_no_results(criteria)

        count = len(results)
        headline = (
            f"🏠 Great news! I found {count} "
            f"{self.describe_criteria(criteria, count)}:"
        )
        blocks = [
            self.format_property(index, record)
            for index, record in enumerate(results, start=1)
        ]
        return "\n\n".join([headline, *blocks, CALL_TO_ACTION])

    def format_apology(self) -> str:
        """Mensaje cuando falla la búsqueda de propiedades."""
        return APOLOGY_MESSAGE
