"""WebSocket subscription registry.

In-process only: every subscription lives in this process's memory and is lost
on restart. For multi-process scale-out, replace the registry with Redis
pub/sub or similar.
"""
from __future__ import annotations
from typing import Dict, Set, Optional, Union, List, Any
from dataclasses import dataclass
from fastapi import WebSocket
from starlette.websockets import WebSocketState
import asyncio


class TransportError(Exception):
    """A send, probe or close failed on a websocket that is going away."""


class LiveConnection:
    """A subscribed (or about to be subscribed) websocket plus its tags."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket
        self.account_id: Optional[str] = None
        self.origin_url: Optional[str] = None
        self.alive = True
        self._send_lock = asyncio.Lock()

    @property
    def writable(self) -> bool:
        ws = self.websocket
        return (
            ws.client_state == WebSocketState.CONNECTED
            and ws.application_state == WebSocketState.CONNECTED
        )

    def tag(self, account_id: str, origin_url: str) -> None:
        self.account_id = account_id
        self.origin_url = origin_url

    async def send_json(self, message: dict) -> None:
        try:
            async with self._send_lock:
                await self.websocket.send_json(message)
        except Exception as e:
            raise TransportError(str(e)) from e

    def probe(self) -> None:
        """Check the outcome of the transport's native heartbeat.

        uvicorn sends the ping control frames itself (``ws_ping_interval``) and closes
        the socket when no pong arrives within ``ws_ping_timeout``, so a transport that
        is still open has answered.
        """
        if not self.writable:
            raise TransportError("transport closed")
        self.alive = True

    async def close(self) -> None:
        if self.websocket.application_state == WebSocketState.DISCONNECTED:
            return
        try:
            await self.websocket.close()
        except Exception as e:
            raise TransportError(str(e)) from e

    def __repr__(self) -> str:
        return f"<LiveConnection account={self.account_id!r} origin={self.origin_url!r} alive={self.alive}>"


@dataclass(eq=False)
class ReservedSlot:
    """Bookkeeping entry created by POST /set. Holds no transport and never receives pushes."""
    account_id: str
    origin_url: str
    alive: bool = True

    @property
    def writable(self) -> bool:
        return False


Connection = Union[LiveConnection, ReservedSlot]


class ConnectionRegistry:
    def __init__(self) -> None:
        # Map account_id -> set of connections
        self._account_conns: Dict[str, Set[Connection]] = {}
        self._lock = asyncio.Lock()

    async def register(self, account_id: str, conn: Connection) -> None:
        async with self._lock:
            self._account_conns.setdefault(account_id, set()).add(conn)

    async def unregister(self, conn: Connection) -> bool:
        """Remove ``conn`` from its tagged account. Returns False if it was not registered."""
        if not conn.account_id:
            return False
        async with self._lock:
            return self._discard(conn.account_id, conn)

    async def move(self, conn: LiveConnection, account_id: str, origin_url: str) -> None:
        """Drop any previous registration of ``conn``, re-tag it and register it under ``account_id``."""
        async with self._lock:
            if conn.account_id:
                self._discard(conn.account_id, conn)
            conn.tag(account_id, origin_url)
            self._account_conns.setdefault(account_id, set()).add(conn)

    async def connections_for(self, account_id: str) -> List[Connection]:
        # Snapshot without holding lock during network sends
        async with self._lock:
            return list(self._account_conns.get(account_id, ()))

    async def accounts(self) -> List[str]:
        async with self._lock:
            return list(self._account_conns)

    def _discard(self, account_id: str, conn: Connection) -> bool:
        conns = self._account_conns.get(account_id)
        if not conns or conn not in conns:
            return False
        conns.discard(conn)
        if not conns:
            self._account_conns.pop(account_id, None)
        return True

    def __contains__(self, account_id: Any) -> bool:
        return account_id in self._account_conns

    def __len__(self) -> int:
        return len(self._account_conns)
