import hmac
import logging
from typing import Dict

logger = logging.getLogger(__name__)


class CredentialStore:
    """Current API key per droplert account. Last write wins, no history, no expiry."""

    def __init__(self) -> None:
        self._keys: Dict[str, str] = {}

    def set_key(self, account_id: str, key: str) -> None:
        self._keys[account_id] = key

    def verify_key(self, account_id: str, key: str | None) -> bool:
        stored = self._keys.get(account_id)
        valid = bool(stored is not None and key and hmac.compare_digest(stored.encode(), key.encode()))
        if not valid:
            logger.warning("[API Key] Invalid API key for droplertId %s", account_id)
        return valid
