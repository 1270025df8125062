#!/usr/bin/env python3
"""
Authentication and Credential Management for the HiLink API

Covers the pieces of the login handshake that do not touch the network:
password hashing, parsing of the session bootstrap and login responses,
and storage of credentials between runs. The exchange itself is driven by
HilinkAPI under its request lock.

Login scheme (password_type 4):

    password_digest = b64(sha256hex(password))             # once, at config time
    Password        = b64(sha256hex(username + password_digest + token))
"""

import os
import json
import stat
import base64
import hashlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

import requests

from .exceptions import InvalidResponseError
from .models import DataEnvelope, OkEnvelope
from .session import LOGIN_TOKEN_HEADER, SESSION_COOKIE

_LOGGER = logging.getLogger(__name__)

SESSION_INFO_PATH = "api/webserver/SesTokInfo"
LOGIN_PATH = "api/user/login"
SESSION_ID_PREFIX = "SessionID="
PASSWORD_TYPE = "4"

# Default credentials file location
DEFAULT_CREDENTIALS_FILE = Path.home() / ".hilink"


def b64_sha256(value: str) -> str:
    """Base64 of the hex SHA-256 digest of value, as the WebUI computes it"""
    hexdigest = hashlib.sha256(value.encode("utf-8")).hexdigest()
    return base64.b64encode(hexdigest.encode("ascii")).decode("ascii")


@dataclass(frozen=True)
class Credentials:
    """
    Login identity of a client

    Attributes:
        username: Account name (usually 'admin')
        password_digest: b64_sha256 of the password; the plaintext is never kept
    """

    username: str
    password_digest: str = field(repr=False)

    @classmethod
    def from_password(cls, username: str, password: str) -> "Credentials":
        return cls(username=username, password_digest=b64_sha256(password))

    def login_digest(self, token: str) -> str:
        """Password value for api/user/login, bound to the current token"""
        return b64_sha256(self.username + self.password_digest + token)

    def login_fields(self, token: str) -> List[Tuple[str, str]]:
        # order matters
        return [
            ("Username", self.username),
            ("Password", self.login_digest(token)),
            ("password_type", PASSWORD_TYPE),
        ]


def parse_session_info(data: DataEnvelope) -> Tuple[str, str]:
    """
    Extract (session_id, token) from an api/webserver/SesTokInfo response

    Raises:
        InvalidResponseError: SesInfo or TokInfo missing or not text
    """
    ses_info = data.fields.get("SesInfo")
    tok_info = data.fields.get("TokInfo")

    if not isinstance(ses_info, str) or not ses_info.startswith(SESSION_ID_PREFIX):
        raise InvalidResponseError("session info response has no SesInfo")
    if not isinstance(tok_info, str) or not tok_info:
        raise InvalidResponseError("session info response has no TokInfo")

    return ses_info[len(SESSION_ID_PREFIX):], tok_info


def parse_login_result(result: OkEnvelope, response: requests.Response) -> Tuple[str, str]:
    """
    Extract (session_id, token) handed out by a successful login

    Raises:
        InvalidResponseError: Login rejected, or the new token/cookie is missing
    """
    if not result.success:
        raise InvalidResponseError("login was not acknowledged by the device")

    token = response.headers.get(LOGIN_TOKEN_HEADER)
    if not token:
        raise InvalidResponseError(f"login response has no {LOGIN_TOKEN_HEADER} header")

    session_id = response.cookies.get(SESSION_COOKIE)
    if not session_id:
        raise InvalidResponseError(f"login response did not set the {SESSION_COOKIE} cookie")

    return session_id, token


def credentials_from_env(environ: Optional[Mapping[str, str]] = None) -> Tuple[str, Optional[Credentials], Optional[float]]:
    """
    Read connection settings from environment variables

    Environment variables:
        HILINK_URL: Device URL (default: http://192.168.8.1/)
        HILINK_USERNAME: Username (login is skipped when unset)
        HILINK_PASSWORD: Password
        HILINK_TIMEOUT: Request timeout in seconds

    Returns:
        Tuple of (url, credentials, timeout)
    """
    env = os.environ if environ is None else environ

    url = env.get("HILINK_URL") or "http://192.168.8.1/"
    username = env.get("HILINK_USERNAME")
    password = env.get("HILINK_PASSWORD", "")
    credentials = Credentials.from_password(username, password) if username else None

    timeout = env.get("HILINK_TIMEOUT")
    try:
        timeout = float(timeout) if timeout else None
    except ValueError:
        raise ValueError(f"HILINK_TIMEOUT must be a number of seconds, got {timeout!r}") from None

    return url, credentials, timeout


class CredentialStore:
    """Manages storage of device credentials (password digest only)"""

    def __init__(self, credentials_file: Optional[Path] = None):
        """
        Initialize credential store

        Args:
            credentials_file: Path to credentials file (default: ~/.hilink)
        """
        self.credentials_file = Path(credentials_file) if credentials_file else DEFAULT_CREDENTIALS_FILE

    def save(self, url: str, credentials: Credentials) -> bool:
        """
        Save credentials to file with secure permissions

        Returns:
            True if saved successfully
        """
        data = {
            "url": url,
            "username": credentials.username,
            "password_digest": credentials.password_digest,
        }
        try:
            with open(self.credentials_file, "w") as f:
                json.dump(data, f, indent=2)

            # Set permissions to 600 (rw for user only)
            os.chmod(self.credentials_file, stat.S_IRUSR | stat.S_IWUSR)
        except OSError as e:
            _LOGGER.warning("Could not save credentials to %s: %s", self.credentials_file, e)
            return False
        return True

    def load(self) -> Tuple[Optional[str], Optional[Credentials]]:
        """
        Load credentials from file

        Returns:
            Tuple of (url, credentials); (None, None) if nothing usable is stored
        """
        if not self.credentials_file.exists():
            return None, None

        try:
            file_stat = os.stat(self.credentials_file)
            if file_stat.st_mode & 0o077:  # Others have permissions
                _LOGGER.warning(
                    "%s has insecure permissions, run: chmod 600 %s",
                    self.credentials_file, self.credentials_file,
                )

            with open(self.credentials_file, "r") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            _LOGGER.warning("Could not read credentials from %s: %s", self.credentials_file, e)
            return None, None

        username = data.get("username")
        digest = data.get("password_digest")
        if not username or not digest:
            return data.get("url"), None
        return data.get("url"), Credentials(username=username, password_digest=digest)

    def delete(self) -> bool:
        """Delete saved credentials file"""
        try:
            if self.credentials_file.exists():
                self.credentials_file.unlink()
                return True
        except OSError as e:
            _LOGGER.warning("Could not delete credentials: %s", e)
        return False

    def exists(self) -> bool:
        """Check if credentials file exists"""
        return self.credentials_file.exists()
