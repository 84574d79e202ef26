"""
Script simple para probar la resolución de una consulta escrita.

Muestra los criterios extraídos y, opcionalmente, busca en Supabase y
arma la respuesta que recibiría el interesado.

Uso:
    python -m brokerdesk.scripts.search_text --text "3 bedroom flat for rent in Lekki"
    python -m brokerdesk.scripts.search_text --text "land for sale in Abuja" --lookup
"""

import argparse
import asyncio
import json
import sys

import structlog

from brokerdesk.errors import PropertyLookupError
from brokerdesk.search import CriteriaExtractor, PropertyLookup, ResponseFormatter

# Configurar logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


async def run_search(text: str, lookup: bool = False) -> int:
    criteria = CriteriaExtractor().extract(text)

    print("\n=== CRITERIOS ===")
    print(json.dumps(criteria.model_dump(), ensure_ascii=False, indent=2))

    if not lookup:
        return 0

    formatter = ResponseFormatter()
    try:
        results = await PropertyLookup().lookup(criteria)
    except PropertyLookupError as e:
        logger.error("Búsqueda fallida", error=str(e))
        print("\n=== RESPUESTA ===")
        print(formatter.format_apology())
        return 1

    print("\n=== RESPUESTA ===")
    print(formatter.format(criteria, results))
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Extrae criterios de una consulta y opcionalmente busca propiedades"
    )
    parser.add_argument(
        "--text",
        required=True,
        help="Texto de la consulta, tal como saldría de la transcripción",
    )
    parser.add_argument(
        "--lookup",
        action="store_true",
        help="Consulta Supabase y muestra la respuesta formateada",
    )

    args = parser.parse_args()

    try:
        exit_code = asyncio.run(run_search(text=args.text, lookup=args.lookup))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Búsqueda interrumpida por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en búsqueda", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
