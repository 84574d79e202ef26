"""
Aplicación HTTP (aiohttp).

Rutas:
- POST /process-voice-message: procesa un mensaje de voz guardado
- POST /whatsapp-voice-webhook: webhook de Twilio para mensajes entrantes
- POST /send-whatsapp-voice-response: envía la respuesta de un mensaje
- GET  /health
"""

import asyncio
from typing import Optional

import structlog
from aiohttp import web
from pydantic import ValidationError

from brokerdesk.config import CORS_HEADERS, get_settings
from brokerdesk.errors import InvalidRequestError
from brokerdesk.messaging import DispatchQueue, ResponseDispatcher
from brokerdesk.models import InboundWhatsAppMessage
from brokerdesk.pipeline import VoiceMessageIntake, VoiceMessageProcessor

logger = structlog.get_logger()


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)


async def _read_json(request: web.Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        raise InvalidRequestError("Request body must be valid JSON")
    if not isinstance(body, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    return body


@web.middleware
async def cors_middleware(request: web.Request, handler):
    """Responde los preflight y agrega los headers CORS a toda respuesta."""
    if request.method == "OPTIONS":
        response = web.Response(text="ok")
    else:
        try:
            response = await handler(request)
        except web.HTTPException as e:
            e.headers.update(CORS_HEADERS)
            raise
    response.headers.update(CORS_HEADERS)
    return response


def create_app(
    processor: Optional[VoiceMessageProcessor] = None,
    intake: Optional[VoiceMessageIntake] = None,
    dispatcher: Optional[ResponseDispatcher] = None,
    dispatch_queue: Optional[DispatchQueue] = None,
    timeout: Optional[float] = None,
) -> web.Application:
    """
    Construye la aplicación con sus dependencias.

    Las dependencias no provistas se crean con la configuración global.
    """
    settings = get_settings()
    if timeout is None:
        timeout = settings.pipeline_timeout_seconds

    if dispatch_queue is None and processor is not None:
        dispatch_queue = processor.dispatch_queue
    dispatch_queue = dispatch_queue or DispatchQueue(dispatcher)
    dispatcher = dispatcher or dispatch_queue.dispatcher
    processor = processor or VoiceMessageProcessor(dispatch_queue=dispatch_queue)
    intake = intake or VoiceMessageIntake()

    # Mensajes en procesamiento dentro de este proceso
    in_flight: set[str] = set()
    background_tasks: set[asyncio.Task] = set()

    async def _guarded_process(
        voice_message_id: str, media_url: Optional[str], retranscribe: bool
    ):
        in_flight.add(voice_message_id)
        try:
            if retranscribe and not media_url:
                return await processor.reprocess(voice_message_id, timeout=timeout)
            return await processor.process(voice_message_id, media_url, timeout=timeout)
        finally:
            in_flight.discard(voice_message_id)

    async def process_voice_message(request: web.Request) -> web.Response:
        try:
            body = await _read_json(request)
            voice_message_id = body.get("voiceMessageId")
            media_url = body.get("mediaUrl")
            retranscribe = bool(body.get("retranscribe", False))

            if not voice_message_id:
                raise InvalidRequestError("voiceMessageId is required")
            if not media_url and not retranscribe:
                raise InvalidRequestError("mediaUrl is required")
        except InvalidRequestError as e:
            logger.warning("Request inválido", path=request.path, error=str(e))
            return _error(str(e), 400)

        if voice_message_id in in_flight:
            logger.warning(
                "Mensaje ya en procesamiento",
                voice_message_id=voice_message_id,
            )
            return _error("Voice message is already being processed", 409)

        try:
            result = await _guarded_process(voice_message_id, media_url, retranscribe)
        except InvalidRequestError as e:
            return _error(str(e), 400)
        except Exception as e:
            logger.error(
                "Error en process-voice-message",
                voice_message_id=voice_message_id,
                error=str(e) or type(e).__name__,
            )
            return _error(str(e) or type(e).__name__, 500)

        return web.json_response(
            {
                "success": True,
                "transcription": result.transcription,
                "responseText": result.response_text,
            }
        )

    async def _process_in_background(voice_message_id: str, media_url: str):
        try:
            await _guarded_process(voice_message_id, media_url, retranscribe=False)
        except Exception as e:
            logger.error(
                "Procesamiento en segundo plano falló",
                voice_message_id=voice_message_id,
                error=str(e) or type(e).__name__,
            )

    async def whatsapp_voice_webhook(request: web.Request) -> web.Response:
        form = await request.post()
        try:
            inbound = InboundWhatsAppMessage.model_validate(dict(form))
        except ValidationError as e:
            logger.warning("Webhook con payload inválido", error=str(e))
            return _error("Invalid webhook payload", 400)

        logger.info(
            "Webhook de WhatsApp recibido",
            message_sid=inbound.message_sid,
            from_number=inbound.from_number,
            num_media=inbound.num_media,
        )

        try:
            record = await intake.receive(inbound)
        except Exception as e:
            logger.error("Error en whatsapp-voice-webhook", error=str(e))
            return _error(str(e), 500)

        if record and record.get("id") and inbound.media_url:
            task = asyncio.create_task(
                _process_in_background(record["id"], inbound.media_url)
            )
            background_tasks.add(task)
            task.add_done_callback(background_tasks.discard)

        return web.Response(text="OK")

    async def send_whatsapp_voice_response(request: web.Request) -> web.Response:
        try:
            body = await _read_json(request)
            voice_message_id = body.get("voiceMessageId")
            if not voice_message_id:
                raise InvalidRequestError("voiceMessageId is required")
        except InvalidRequestError as e:
            return _error(str(e), 400)

        try:
            sid = await dispatcher.send_response(voice_message_id, body.get("audioPath"))
        except Exception as e:
            logger.error(
                "Error en send-whatsapp-voice-response",
                voice_message_id=voice_message_id,
                error=str(e),
            )
            return _error(str(e), 500)

        return web.json_response({"success": True, "messageSid": sid})

    async def health(_: web.Request) -> web.Response:
        return web.Response(text="ok")

    async def on_cleanup(_: web.Application):
        if background_tasks:
            await asyncio.gather(*list(background_tasks), return_exceptions=True)
        results = await dispatch_queue.drain()
        failed = [r for r in results if not r.success]
        logger.info(
            "Servidor detenido",
            dispatched=len(results),
            failed=len(failed),
        )

    app = web.Application(middlewares=[cors_middleware])
    app.router.add_post("/process-voice-message", process_voice_message)
    app.router.add_post("/whatsapp-voice-webhook", whatsapp_voice_webhook)
    app.router.add_post("/send-whatsapp-voice-response", send_whatsapp_voice_response)
    app.router.add_get("/health", health)
    app.on_cleanup.append(on_cleanup)
    return app
