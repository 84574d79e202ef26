"""
Script para ejecutar el servidor HTTP de mensajes de voz.

Expone el webhook de Twilio y los endpoints de procesamiento y envío.

Uso:
    python -m brokerdesk.scripts.run_server
"""

import logging
import os
import sys

import structlog
from aiohttp import web

from brokerdesk.api import create_app
from brokerdesk.config import get_settings

# Configurar logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s",
    force=True,
)

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


def main():
    """Entry point del servidor."""
    # Render y similares inyectan el puerto por PORT
    port = int(os.getenv("PORT", str(settings.server_port)))
    logger.info(
        "Iniciando servidor de mensajes de voz",
        host=settings.server_host,
        port=port,
        speech_provider=settings.speech_provider,
    )

    try:
        app = create_app()
        web.run_app(app, host=settings.server_host, port=port, print=None)
    except KeyboardInterrupt:
        logger.info("Servidor detenido por usuario")
        sys.exit(0)
    except Exception as e:
        logger.error("Error fatal en servidor", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
