"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from twilio.request_validator import RequestValidator

from sms_food_logger.api.twilio_models import InboundSms
from sms_food_logger.app_logging import configure_logging
from sms_food_logger.containers import AppContainer

EMPTY_TWIML = "<Response></Response>"


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/sms/webhook")
    async def sms_webhook(request: Request) -> Response:
        """Handle an inbound Twilio SMS and reply exactly once."""
        state_container: AppContainer = request.app.state.container
        settings = state_container.settings
        form = await request.form()
        fields = {key: value for key, value in form.items() if isinstance(value, str)}

        if settings.validate_twilio_signature and not _has_valid_signature(
            request, fields, settings.twilio_auth_token, settings.public_webhook_url
        ):
            logger.warning("Rejected SMS webhook with invalid Twilio signature")
            return Response(status_code=status.HTTP_403_FORBIDDEN)

        try:
            inbound = InboundSms.model_validate(fields)
        except ValidationError:
            logger.warning("Malformed SMS webhook payload", extra={"fields": list(fields)})
            return _twiml(status_code=status.HTTP_400_BAD_REQUEST)

        logger.info(
            "SMS received",
            extra={
                "phone": inbound.from_number,
                "to_number": inbound.to_number,
                "message_sid": inbound.message_sid,
            },
        )
        reply = await state_container.gateway.handle(inbound.from_number, inbound.body)
        if reply is None:
            return _twiml()

        if settings.test_mode:
            return JSONResponse(
                {
                    "response": reply,
                    "from": inbound.from_number,
                    "originalMessage": inbound.body,
                }
            )

        try:
            await state_container.gateway.send_reply(inbound.from_number, reply)
        except Exception:
            logger.exception(
                "Failed to send SMS reply", extra={"phone": inbound.from_number}
            )
        return _twiml()

    return app


def _twiml(status_code: int = status.HTTP_200_OK) -> Response:
    """Return the empty TwiML acknowledgement."""
    return Response(
        content=EMPTY_TWIML, media_type="application/xml", status_code=status_code
    )


def _has_valid_signature(
    request: Request,
    fields: dict[str, str],
    auth_token: str,
    public_url: str | None,
) -> bool:
    """Validate the X-Twilio-Signature header against the posted form."""
    signature = request.headers.get("X-Twilio-Signature", "")
    if not signature:
        return False
    url = public_url or str(request.url)
    return RequestValidator(auth_token).validate(url, fields, signature)
