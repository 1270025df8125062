from .hilink_api import DEFAULT_TIMEOUT, DEFAULT_URL, HilinkAPI
from .hilink_auth import CredentialStore, Credentials
from .models import DataEnvelope, ErrorEnvelope, OkEnvelope, PinType, SmsBoxType, UssdState
from .response import Mode
from .xml_codec import encode_request, request_xml
from .exceptions import (
    BadStatusCodeError,
    DeviceError,
    HilinkError,
    InvalidErrorShapeError,
    InvalidResponseError,
    InvalidShapeError,
    MalformedDocumentError,
    MessageTooLongError,
    MissingFieldError,
    MissingRootElementError,
    PreconditionViolated,
    ProtocolError,
    TypeMismatchError,
    UnexpectedShapeError,
)

__all__ = [
    "HilinkAPI",
    "DEFAULT_URL",
    "DEFAULT_TIMEOUT",
    "Credentials",
    "CredentialStore",
    "Mode",
    "DataEnvelope",
    "ErrorEnvelope",
    "OkEnvelope",
    "SmsBoxType",
    "PinType",
    "UssdState",
    "encode_request",
    "request_xml",
    "HilinkError",
    "BadStatusCodeError",
    "DeviceError",
    "InvalidResponseError",
    "MessageTooLongError",
    "ProtocolError",
    "MalformedDocumentError",
    "MissingRootElementError",
    "InvalidErrorShapeError",
    "UnexpectedShapeError",
    "InvalidShapeError",
    "MissingFieldError",
    "TypeMismatchError",
    "PreconditionViolated",
]
