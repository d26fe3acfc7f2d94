from fastapi import APIRouter, WebSocket, Depends
from pydantic import ValidationError
from realtime import ConnectionRegistry, LiveConnection, TransportError
from schemas.notification import SubscriptionMessage
from state import RelayState, get_relay
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


async def handle_subscription(registry: ConnectionRegistry, conn: LiveConnection, raw: str) -> bool:
    """Apply one inbound control frame. Returns True if the connection is now subscribed."""
    try:
        msg = SubscriptionMessage.model_validate_json(raw)
    except ValidationError as e:
        logger.warning("[WebSocket] Error parsing subscription message: %s", e.errors())
        await _reply(conn, {"error": "Invalid subscription message"})
        return False

    logger.info("[Subscription] Received subscription from %s for website: %s", msg.droplertId, msg.websiteUrl)
    if conn.account_id and (conn.account_id, conn.origin_url) != (msg.droplertId, msg.websiteUrl):
        logger.info("[Subscription] Moving connection from %s (%s)", conn.account_id, conn.origin_url)
    # Re-subscribing drops the previous registration first
    await registry.move(conn, msg.droplertId, msg.websiteUrl)

    logger.info("[Subscription] %s successfully subscribed to notifications for %s", msg.droplertId, msg.websiteUrl)
    await _reply(conn, {"success": True, "message": f"Subscribed to notifications for {msg.websiteUrl}"})
    return True


async def _reply(conn: LiveConnection, message: dict) -> None:
    try:
        await conn.send_json(message)
    except TransportError as e:
        logger.debug("[WebSocket] Reply failed: %s", e)


@router.websocket("/")
async def relay_ws(websocket: WebSocket, relay: RelayState = Depends(get_relay)):
    await websocket.accept()
    conn = LiveConnection(websocket)
    logger.info("[WebSocket] New connection established.")
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = (message.get("bytes") or b"").decode("utf-8", errors="replace")
            await handle_subscription(relay.registry, conn, raw)
    finally:
        logger.info("[WebSocket] Connection closed.")
        await relay.registry.unregister(conn)
