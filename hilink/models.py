#!/usr/bin/env python3
"""
Response envelopes and protocol enumerations for the HiLink API
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class ErrorEnvelope:
    """
    Failure reported by the device in an <error> document

    Attributes:
        code: Error code string as received
        message: Device message, or the table entry when the device omits it
    """

    code: str
    message: str


@dataclass(frozen=True)
class DataEnvelope:
    """
    Structured data from a single-root response document

    Attributes:
        root_name: Tag of the top-level element (e.g. 'response')
        fields: Children of the root by name, in document order. Repeated
            names are collected into a list.
        pairs: Children of the root as received, one (name, value) per element
    """

    root_name: str
    fields: Dict[str, Any]
    pairs: List[Tuple[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class OkEnvelope:
    """Result of a command the device acknowledges with <response>OK</response>"""

    success: bool


class SmsBoxType(IntEnum):
    """SMS folders on the device"""

    INBOX = 1
    OUTBOX = 2
    DRAFT = 3


class PinType(IntEnum):
    """Operations accepted by api/pin/operate"""

    ENTER = 0
    ACTIVATE = 1
    DEACTIVATE = 2
    CHANGE = 3
    ENTER_PUK = 4


class UssdState(IntEnum):
    """USSD session states reported by api/ussd/status"""

    NONE = 0
    ACTIVE = 1
    WAITING = 2
