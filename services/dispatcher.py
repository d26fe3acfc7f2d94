from __future__ import annotations
import asyncio
import logging
from realtime import ConnectionRegistry, LiveConnection, TransportError
from schemas.notification import NotificationPayload

logger = logging.getLogger(__name__)


class NoSubscribersError(Exception):
    def __init__(self, account_id: str):
        super().__init__(f"No connected websites found for user {account_id}")
        self.account_id = account_id


class NotificationDispatcher:
    def __init__(self, registry: ConnectionRegistry) -> None:
        self.registry = registry

    async def dispatch(self, payload: NotificationPayload) -> int:
        """Push ``payload.notification`` to every writable connection of the account whose
        origin is listed in ``payload.websites``.

        Raises NoSubscribersError when the account has no registered connections. Delivery
        is best-effort: returns the number of frames actually written.
        """
        conns = await self.registry.connections_for(payload.droplertId)
        if not conns:
            logger.error("[Notification] No connected websites found for user: %s", payload.droplertId)
            raise NoSubscribersError(payload.droplertId)

        logger.info(
            "[Notification] Sending notification to %d websites for user %s",
            len(payload.websites), payload.droplertId,
        )
        targets = set(payload.websites)
        message = {"type": "notification", "data": payload.notification.model_dump(exclude_none=True)}
        recipients = [
            c for c in conns
            if isinstance(c, LiveConnection) and c.writable and c.origin_url in targets
        ]
        if not recipients:
            return 0
        results = await asyncio.gather(*(self._send(c, message) for c in recipients))
        return sum(results)

    async def _send(self, conn: LiveConnection, message: dict) -> int:
        try:
            await conn.send_json(message)
        except TransportError as e:
            # Closing socket; close handler or monitor will evict it
            logger.warning("[Notification] Send to %s failed: %s", conn.origin_url, e)
            return 0
        logger.info("[Notification] Sent notification to website %s", conn.origin_url)
        return 1
