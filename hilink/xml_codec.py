#!/usr/bin/env python3
"""
XML Codec for HiLink Requests and Responses

The WebUI on HiLink devices parses request parameters in a fixed order and
some requests repeat an element name (one <Phone> per SMS recipient), so
request bodies are built from an ordered sequence of (name, value) pairs
rather than from a dict. A value may itself be a sequence of pairs, which
becomes nested elements:

    encode_request([
        ("Index", "-1"),
        ("Phones", [("Phone", "+100"), ("Phone", "+200")]),
        ("Content", "hello"),
    ])

Responses are decoded into plain Python values: an element with children
becomes a dict (repeated names collected into a list), a leaf becomes its
text.
"""

import re
import xml.etree.ElementTree as ET
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union
from xml.sax.saxutils import escape

from .exceptions import (
    InvalidErrorShapeError,
    MalformedDocumentError,
    MissingRootElementError,
    PreconditionViolated,
    UnexpectedShapeError,
    error_message,
)
from .models import DataEnvelope, ErrorEnvelope

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>'
REQUEST_ELEMENT = "request"
INDENT = "  "

Pairs = Sequence[Tuple[str, Any]]
Body = Union[bytes, bytearray, Pairs]

_NAME = re.compile(r"^[A-Za-z_][\w.\-]*$")
_DECLARATION = re.compile(r"^\s*<\?xml.*?\?>", re.S)
_WRAPPER = "hilink-document"


def _check_pair(pair: Any) -> Tuple[str, Any]:
    if not isinstance(pair, (tuple, list)) or len(pair) != 2:
        raise PreconditionViolated(f"request fields must be (name, value) pairs, got {pair!r}")
    name, value = pair
    if not isinstance(name, str) or not _NAME.match(name):
        raise PreconditionViolated(f"invalid element name {name!r}")
    if not isinstance(value, (str, list, tuple)):
        raise PreconditionViolated(
            f"value of {name!r} must be a string or a sequence of pairs, got {type(value).__name__}")
    return name, value


def xml_pairs(fields: Pairs, indent: str = INDENT) -> List[str]:
    """Render ordered (name, value) pairs as lines of XML elements"""
    lines = []
    for pair in fields:
        name, value = _check_pair(pair)
        if isinstance(value, str):
            lines.append(f"{indent}<{name}>{escape(value)}</{name}>")
        elif not value:
            lines.append(f"{indent}<{name}></{name}>")
        else:
            lines.append(f"{indent}<{name}>")
            lines.extend(xml_pairs(value, indent + INDENT))
            lines.append(f"{indent}</{name}>")
    return lines


def encode_request(body: Body) -> bytes:
    """
    Encode a request body

    Args:
        body: Ordered (name, value) pairs, or an already encoded payload
              (bytes), which is sent unchanged

    Returns:
        UTF-8 XML document with all pairs inside a single <request> element
    """
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)

    lines = [XML_HEADER, f"<{REQUEST_ELEMENT}>"]
    lines.extend(xml_pairs(body))
    lines.append(f"</{REQUEST_ELEMENT}>")
    return ("\n".join(lines) + "\n").encode("utf-8")


def request_xml(*vals: str) -> bytes:
    """
    Build a request document from alternating names and values

    Example:
        >>> request_xml("Index", "40001")
        b'<?xml version="1.0" encoding="UTF-8"?>\\n<request>\\n  <Index>40001</Index>\\n</request>\\n'
    """
    if len(vals) % 2 != 0:
        raise PreconditionViolated(f"request_xml can only accept pairs of strings, length: {len(vals)}")
    return encode_request(list(zip(vals[0::2], vals[1::2])))


def parse_document(buf: bytes) -> List[ET.Element]:
    """
    Parse a response body into its top-level elements

    A well formed document has exactly one; more than one is reported to the
    caller rather than treated as a parse failure.
    """
    try:
        text = buf.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise MalformedDocumentError(f"response is not UTF-8: {e}") from e

    text = _DECLARATION.sub("", text, count=1)
    try:
        wrapper = ET.fromstring(f"<{_WRAPPER}>{text}</{_WRAPPER}>")
    except ET.ParseError as e:
        raise MalformedDocumentError(f"invalid XML: {e}") from e

    roots = list(wrapper)
    # only whitespace may surround the top-level elements
    for stray in [wrapper.text] + [root.tail for root in roots]:
        if stray and stray.strip():
            raise MalformedDocumentError(f"text outside the root element: {stray.strip()[:40]!r}")
    return roots


def element_value(elem: ET.Element) -> Union[str, Dict[str, Any]]:
    """Text of a leaf element, or a dict of its children"""
    if len(elem) == 0:
        return elem.text or ""
    return collect(element_pairs(elem))


def element_pairs(elem: ET.Element) -> List[Tuple[str, Any]]:
    return [(child.tag, element_value(child)) for child in elem]


def collect(pairs: Iterable[Tuple[str, Any]]) -> Dict[str, Any]:
    """Fold (name, value) pairs into a dict; repeated names become lists"""
    fields: Dict[str, Any] = {}
    for name, value in pairs:
        if name not in fields:
            fields[name] = value
        elif isinstance(fields[name], list):
            fields[name].append(value)
        else:
            fields[name] = [fields[name], value]
    return fields


def _error_envelope(value: Any) -> ErrorEnvelope:
    if not isinstance(value, dict):
        raise InvalidErrorShapeError(f"error element is not a mapping: {value!r}")

    code = value.get("code")
    code = code.strip() if isinstance(code, str) else ""
    message = value.get("message")
    message = message.strip() if isinstance(message, str) else ""
    # grab message if not passed by the device
    if not message:
        message = error_message(code)
    return ErrorEnvelope(code=code, message=message)


def decode(buf: bytes, single_element: bool) -> Union[ErrorEnvelope, DataEnvelope, Dict[str, Any]]:
    """
    Decode a response body

    Args:
        buf: Raw response body
        single_element: Unwrap the root element and return its children as a
                        DataEnvelope. Otherwise the whole top-level tree is
                        returned as a dict (e.g. {'response': 'OK'}).

    Returns:
        ErrorEnvelope when the device reported an error, else the decoded data

    Raises:
        MalformedDocumentError: Unparsable body
        InvalidErrorShapeError: <error> without code/message children
        MissingRootElementError: Zero or several top-level elements
        UnexpectedShapeError: single_element requested on a text-only root
    """
    roots = parse_document(buf)
    tree = collect((el.tag, element_value(el)) for el in roots)

    # check if error was returned
    if "error" in tree:
        return _error_envelope(tree["error"])

    if len(roots) != 1:
        raise MissingRootElementError(f"expected one root element, found {len(roots)}")

    if not single_element:
        return tree

    root = roots[0]
    if len(root) == 0:
        raise UnexpectedShapeError(f"root element <{root.tag}> holds text, not fields")

    pairs = element_pairs(root)
    return DataEnvelope(root_name=root.tag, fields=collect(pairs), pairs=pairs)
