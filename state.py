"""Process-wide relay state shared by the HTTP routes, the websocket handler and the monitor."""
from dataclasses import dataclass, field
from starlette.requests import HTTPConnection
from realtime import ConnectionRegistry
from credentials import CredentialStore


@dataclass
class RelayState:
    registry: ConnectionRegistry = field(default_factory=ConnectionRegistry)
    credentials: CredentialStore = field(default_factory=CredentialStore)


def get_relay(conn: HTTPConnection) -> RelayState:
    # Works for both Request and WebSocket dependencies
    return conn.app.state.relay
