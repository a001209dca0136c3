"""Session validation — the opaque verify(token) → principal | None collaborator."""
import hmac
import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class SessionValidator(Protocol):
    def verify(self, token: Optional[str]) -> Optional[str]:
        ...


class StaticTokenValidator:
    """Accepts a fixed set of configured tokens; each maps to a principal name."""

    def __init__(self, tokens: dict[str, str]):
        self._tokens = dict(tokens)
        if not self._tokens:
            logger.warning("No session tokens configured; every data request will be rejected")

    @classmethod
    def from_settings(cls, settings) -> "StaticTokenValidator":
        return cls(settings.session_token_map)

    def verify(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        principal = None
        # No early exit: every configured token is compared
        for known, name in self._tokens.items():
            if hmac.compare_digest(known.encode(), token.encode()):
                principal = name
        return principal
