from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from config import settings
from realtime import ReservedSlot
from schemas.notification import NotificationPayload, SetApiKeyRequest
from services.dispatcher import NotificationDispatcher, NoSubscribersError
from state import RelayState, get_relay
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, error: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, **extra})


@router.post("/notify")
async def notify(request: Request, apikey: str | None = Header(default=None), relay: RelayState = Depends(get_relay)):
    try:
        payload = NotificationPayload.model_validate_json(await request.body())
    except ValidationError as e:
        logger.error("[Notification] Invalid payload format: %s", e.errors(include_url=False))
        return _error(400, "Invalid payload format", details=e.errors(include_url=False, include_context=False, include_input=False))

    if settings.REQUIRE_API_KEY and not relay.credentials.verify_key(payload.droplertId, apikey):
        return _error(401, "Invalid API key")

    logger.info("[Notification] Received notification payload for %s -> %s", payload.droplertId, payload.websites)
    try:
        await NotificationDispatcher(relay.registry).dispatch(payload)
    except NoSubscribersError:
        return _error(404, "No connected websites found for user")
    except Exception:
        logger.exception("[Notification] Internal server error")
        return _error(500, "Internal server error")
    return {"success": True, "message": "Notification sent"}


@router.post("/set")
async def set_api_key(request: Request, apikey: str | None = Header(default=None), relay: RelayState = Depends(get_relay)):
    if not apikey:
        logger.error("[Set API Key] Missing API key in headers")
        return _error(401, "Missing API key in headers")
    try:
        body = SetApiKeyRequest.model_validate_json(await request.body())
    except ValidationError as e:
        logger.error("[Set API Key] Invalid request format: %s", e.errors(include_url=False))
        return _error(400, "Invalid request format", details=e.errors(include_url=False, include_context=False, include_input=False))

    try:
        relay.credentials.set_key(body.droplertId, apikey)
        # Placeholder entry: counts as a registration but can never be pushed to
        await relay.registry.register(body.droplertId, ReservedSlot(body.droplertId, body.websiteUrl))
    except Exception:
        logger.exception("[Set API Key] Error setting API key")
        return _error(500, "Internal server error")

    message = f"API key set successfully for user {body.droplertId} and website {body.websiteUrl} added to subscriptions"
    logger.info("[Set API Key] %s", message)
    return {"success": True, "message": message}
