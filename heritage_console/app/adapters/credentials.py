"""
Credential store for the console client.
"""

import json
from pathlib import Path
from typing import Dict, Optional

from shared.logging import get_logger


TOKEN_KEY = "token"
REFRESH_TOKEN_KEY = "refreshToken"


class TokenStore:
    """Process-wide holder of the session's bearer token.

    Tokens are issued elsewhere (the login flow); this store only keeps
    them. With a ``path`` the tokens persist to a small JSON file and are
    re-read on every lookup, so a token written by another process is
    picked up by the next request.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else None
        self.logger = get_logger("console.credentials")
        self._values: Dict[str, str] = {}

    def _load(self) -> Dict[str, str]:
        if self.path is None:
            return self._values
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            self.logger.warning("Unreadable credential file", path=str(self.path), error=str(e))
            return {}
        return {k: v for k, v in raw.items() if isinstance(v, str)} if isinstance(raw, dict) else {}

    def _save(self, values: Dict[str, str]) -> None:
        self._values = values
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(values), encoding="utf-8")

    def get_token(self) -> Optional[str]:
        return self._load().get(TOKEN_KEY)

    def get_refresh_token(self) -> Optional[str]:
        return self._load().get(REFRESH_TOKEN_KEY)

    def set_tokens(self, token: str, refresh_token: Optional[str] = None) -> None:
        values = {TOKEN_KEY: token}
        if refresh_token:
            values[REFRESH_TOKEN_KEY] = refresh_token
        self._save(values)

    def clear(self) -> None:
        """Drop both tokens, e.g. after the backend rejected the session."""
        if self._load():
            self.logger.info("Clearing stored credentials")
        self._save({})
