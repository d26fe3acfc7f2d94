"""Periodic heartbeat sweep over the subscription registry.

The ping/pong control frames themselves are exchanged by uvicorn
(``ws_ping_interval``/``ws_ping_timeout``), which closes any socket whose peer
stops answering. Each cycle marks every live connection as not alive and probes
it; the probe succeeds only while the transport is still open. A connection that
failed the previous probe is unregistered and closed, so a peer that stops
answering is evicted within two cycles.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Optional
from realtime import ConnectionRegistry, LiveConnection, TransportError

logger = logging.getLogger(__name__)


class LivenessMonitor:
    def __init__(self, registry: ConnectionRegistry, interval: float = 30.0) -> None:
        self.registry = registry
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    async def sweep(self) -> int:
        logger.debug("[Cleanup] Running cleanup to check for dead connections.")
        evicted = 0
        for account_id in await self.registry.accounts():
            for conn in await self.registry.connections_for(account_id):
                if not isinstance(conn, LiveConnection):
                    logger.debug("[Cleanup] Skipping reserved slot for %s (%s)", account_id, conn.origin_url)
                    continue
                if not conn.alive:
                    logger.info("[Cleanup] Removing dead connection for %s", account_id)
                    await self.registry.unregister(conn)
                    evicted += 1
                    try:
                        await conn.close()
                    except TransportError as e:
                        logger.debug("[Cleanup] Close failed for %s: %s", account_id, e)
                    continue
                conn.alive = False
                try:
                    conn.probe()
                except TransportError as e:
                    logger.warning("[Cleanup] Heartbeat lost for %s: %s", account_id, e)
        return evicted

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.sweep()
            except Exception:
                logger.exception("[Cleanup] Sweep failed")

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
