#!/usr/bin/env python3
"""
Response classification

Turns the output of xml_codec.decode into what the caller asked for:
structured data, a single text field, or an OK/not-OK flag. A device error
document always wins and is raised as DeviceError.
"""

from enum import Enum
from typing import Any, Dict, Optional, Union

from .exceptions import (
    DeviceError,
    InvalidShapeError,
    MissingFieldError,
    PreconditionViolated,
    TypeMismatchError,
)
from .models import DataEnvelope, ErrorEnvelope, OkEnvelope

Decoded = Union[ErrorEnvelope, DataEnvelope, Dict[str, Any]]


class Mode(Enum):
    """How a response body is interpreted"""

    DATA = "data"
    STRING = "string"
    OK = "ok"

    @property
    def single_element(self) -> bool:
        return self is not Mode.OK


def raise_for_error(decoded: Decoded) -> None:
    if isinstance(decoded, ErrorEnvelope):
        raise DeviceError(decoded.code, decoded.message)


def as_data(decoded: Decoded) -> DataEnvelope:
    raise_for_error(decoded)
    if not isinstance(decoded, DataEnvelope) or not isinstance(decoded.fields, dict):
        raise InvalidShapeError(f"expected structured data, got {type(decoded).__name__}")
    return decoded


def as_string(decoded: Decoded, name: str) -> str:
    """Extract the text of child element `name` from a data response"""
    data = as_data(decoded)
    if name not in data.fields:
        raise MissingFieldError(f"<{data.root_name}> has no <{name}> element")
    value = data.fields[name]
    if not isinstance(value, str):
        raise TypeMismatchError(f"<{name}> is not a text element")
    return value


def as_ok(decoded: Decoded) -> OkEnvelope:
    """Interpret a <response>OK</response> acknowledgement"""
    raise_for_error(decoded)
    if not isinstance(decoded, dict):
        raise InvalidShapeError(f"expected a document tree, got {type(decoded).__name__}")
    if "response" not in decoded:
        raise MissingFieldError("missing <response> element")
    value = decoded["response"]
    if not isinstance(value, str):
        raise TypeMismatchError("<response> is not a text element")
    return OkEnvelope(success=value == "OK")


def classify(decoded: Decoded, mode: Mode, field: Optional[str] = None) -> Union[DataEnvelope, OkEnvelope, str]:
    if mode is Mode.OK:
        return as_ok(decoded)
    if mode is Mode.STRING:
        if not field:
            raise PreconditionViolated("string mode needs a field name")
        return as_string(decoded, field)
    return as_data(decoded)
