#!/usr/bin/env python3
"""
Session state for a HiLink client

Holds the SessionID cookie value and the rotating CSRF token. The device
hands out a new token on (nearly) every exchange and rejects requests that
carry a superseded one, so the owning HilinkAPI only touches this object
while holding its request lock.
"""

import logging
from typing import Mapping, Optional

_LOGGER = logging.getLogger(__name__)

# Header used by the WebUI for CSRF tokens on requests and responses
TOKEN_HEADER = "__RequestVerificationToken"

# Header carrying the token issued by a successful login
LOGIN_TOKEN_HEADER = "__RequestVerificationTokenone"

SESSION_COOKIE = "SessionID"


class SessionState:
    """Current (cookie, token) pair of one client"""

    def __init__(self):
        self._cookie: Optional[str] = None
        self._token: Optional[str] = None

    @property
    def cookie(self) -> Optional[str]:
        return self._cookie

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def started(self) -> bool:
        """True once a bootstrap exchange installed a session"""
        return self._cookie is not None and self._token is not None

    def observe(self, headers: Mapping[str, str], session_id: Optional[str] = None) -> bool:
        """
        Take the token from a response, if it carries one

        Args:
            headers: Response headers (case-insensitive mapping)
            session_id: SessionID cookie set by the response, if any

        Returns:
            True if the stored token was replaced
        """
        if session_id and session_id != self._cookie:
            _LOGGER.debug("Session cookie rotated")
            self._cookie = session_id

        token = headers.get(TOKEN_HEADER)
        if not token:
            return False
        if token != self._token:
            _LOGGER.debug("CSRF token rotated")
        self._token = token
        return True

    def bootstrap(self, session_id: str, token: str) -> None:
        """Install the session obtained from api/webserver/SesTokInfo"""
        self._cookie = session_id
        self._token = token
        _LOGGER.debug("Session bootstrapped")

    def replace(self, session_id: str, token: str) -> None:
        """Install the session handed out by a successful login"""
        self._cookie = session_id
        self._token = token

    def clear(self) -> None:
        self._cookie = None
        self._token = None

    def __repr__(self) -> str:
        return f"SessionState(started={self.started})"
