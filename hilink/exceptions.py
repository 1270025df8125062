#!/usr/bin/env python3
"""
Exceptions for the HiLink API client

Every failure raised by the library derives from HilinkError, except
PreconditionViolated which flags programming mistakes in the caller.
Transport failures (timeouts, refused connections) are the underlying
requests exceptions and are never wrapped.
"""

from typing import Dict, Optional


# Known error codes reported by HiLink devices in <error><code>..</code></error>
# see: http://www.bez-kabli.pl/viewtopic.php?t=42168
ERROR_CODE_MESSAGES: Dict[int, str] = {
    -1: "system not available",
    100002: "not supported by firmware or incorrect API path",
    100003: "unauthorized",
    100004: "system busy",
    100005: "unknown error",
    100006: "invalid parameter",
    100009: "write error",
    103002: "unknown error",
    103015: "unknown error",
    108001: "invalid username",
    108002: "invalid password",
    108003: "user already logged in",
    108006: "invalid username or password",
    108007: "invalid username, password, or session timeout",
    110024: "battery charge less than 50%",
    111019: "no network response",
    111020: "network timeout",
    111022: "network not supported",
    113018: "system busy",
    114001: "file already exists",
    114002: "file already exists",
    114003: "SD card currently in use",
    114004: "path does not exist",
    114005: "path too long",
    114006: "no permission for specified file or directory",
    115001: "unknown error",
    117001: "incorrect WiFi password",
    117004: "incorrect WISPr password",
    120001: "voice busy",
    125001: "invalid token",
}


def error_message(code: Optional[str]) -> str:
    """
    Look up the message for a device error code

    Args:
        code: Error code as received in the XML body

    Returns:
        The known message, or the generic entry for unknown codes
    """
    try:
        return ERROR_CODE_MESSAGES[int(code)]
    except (TypeError, ValueError, KeyError):
        return ERROR_CODE_MESSAGES[-1]


class PreconditionViolated(Exception):
    """A caller broke an API precondition (e.g. an odd-length field list)"""


class HilinkError(Exception):
    """Base exception for the library"""


class BadStatusCodeError(HilinkError):
    """The device answered with a non-2xx HTTP status"""

    def __init__(self, status_code: int, path: str = ""):
        self.status_code = status_code
        self.path = path
        super().__init__(f"bad status code {status_code} for {path or 'request'}")


class DeviceError(HilinkError):
    """
    The device reported its own failure through an <error> document.

    Attributes:
        code: Error code as sent by the device (a numeric string)
        message: Message from the device, or from ERROR_CODE_MESSAGES
    """

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"hilink error {code}: {message}")


class InvalidResponseError(HilinkError):
    """A response was well formed but did not carry what the exchange needs"""


class MessageTooLongError(HilinkError, ValueError):
    """Outgoing text exceeds the protocol limit; raised before any request"""


class ProtocolError(HilinkError):
    """The response body could not be interpreted"""


class MalformedDocumentError(ProtocolError):
    """The body is not parsable XML"""


class MissingRootElementError(ProtocolError):
    """The document does not have exactly one top-level element"""


class InvalidErrorShapeError(ProtocolError):
    """The <error> element is not a mapping of code/message"""


class UnexpectedShapeError(ProtocolError):
    """A scalar was found where a mapping was expected"""


class InvalidShapeError(ProtocolError):
    """The decoded result is not the mapping a data request needs"""


class MissingFieldError(ProtocolError):
    """An expected element is absent from the response"""


class TypeMismatchError(ProtocolError):
    """An element holds nested data where text was expected"""
