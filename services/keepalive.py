import asyncio
import logging
from typing import Optional
import httpx

logger = logging.getLogger(__name__)


class KeepalivePinger:
    """GETs a URL on a fixed period so hosting platforms don't idle the process out."""

    def __init__(self, url: str, interval: float = 600.0, client: Optional[httpx.AsyncClient] = None) -> None:
        self.url = url
        self.interval = interval
        self._client = client
        self._task: Optional[asyncio.Task] = None

    async def ping(self) -> bool:
        client = self._client or httpx.AsyncClient(timeout=10.0)
        try:
            resp = await client.get(self.url)
            logger.info("[Ping] Ping successful: %s %s", resp.status_code, resp.reason_phrase)
            return True
        except httpx.HTTPError as e:
            logger.error("[Ping] Ping failed: %s", e)
            return False
        finally:
            if self._client is None:
                await client.aclose()

    async def _run(self) -> None:
        await self.ping()
        logger.info("[Ping] Initial ping completed.")
        while True:
            await asyncio.sleep(self.interval)
            await self.ping()

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
