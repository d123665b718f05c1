"""
EIP-712 Structured Data Encoder

Pure implementation of the EIP-712 hashing algorithm over a plain
``{types, primaryType, domain, message}`` document, as received from
``eth_signTypedData_v3``/``_v4`` calls.

    encode_type    "Mail(Person from,Person to,string contents)Person(string name,address wallet)"
    type_hash      keccak256(encode_type)
    encode_data    type_hash ‖ enc(field_1) ‖ ... ‖ enc(field_n)
    hash_struct    keccak256(encode_data)
    digest         keccak256(0x1901 ‖ hash_struct(EIP712Domain, domain) ‖ hash_struct(primaryType, message))

The input document is never mutated. Any problem with the document raises
``StructuredEncodingError``.
"""

import json
import re
from typing import Any, Dict, List, Mapping, Sequence

from eth_utils import keccak

from ...engine.exceptions import StructuredEncodingError
from ...utils import hex_to_bytes

TypeMap = Mapping[str, Sequence[Mapping[str, str]]]

EIP712_DOMAIN = "EIP712Domain"

# Field order used when a document omits the EIP712Domain type definition.
_DOMAIN_FIELDS = (
    ("name", "string"),
    ("version", "string"),
    ("chainId", "uint256"),
    ("verifyingContract", "address"),
    ("salt", "bytes32"),
)

_ARRAY_SUFFIX = re.compile(r"\[(\d*)\]$")
_INT_TYPE = re.compile(r"^(u?)int(\d*)$")
_BYTES_N_TYPE = re.compile(r"^bytes(\d+)$")


def _base_type(type_name: str) -> str:
    while _ARRAY_SUFFIX.search(type_name):
        type_name = _ARRAY_SUFFIX.sub("", type_name)
    return type_name


def _find_dependencies(type_name: str, types: TypeMap, found: List[str]) -> None:
    base = _base_type(type_name)
    if base in found or base not in types:
        return
    found.append(base)
    for field in types[base]:
        _find_dependencies(field["type"], types, found)


def encode_type(primary_type: str, types: TypeMap) -> str:
    """
    Build the canonical type signature for ``primary_type``.

    Referenced struct types are collected recursively, sorted by name and
    appended after the primary type.

    Raises:
        StructuredEncodingError: If ``primary_type`` is not defined in ``types``.
    """
    if primary_type not in types:
        raise StructuredEncodingError(f"Type {primary_type!r} is not defined")

    deps: List[str] = []
    _find_dependencies(primary_type, types, deps)
    deps.remove(primary_type)

    result = ""
    for name in [primary_type] + sorted(deps):
        fields = ",".join(f"{field['type']} {field['name']}" for field in types[name])
        result += f"{name}({fields})"
    return result


def type_hash(primary_type: str, types: TypeMap) -> bytes:
    return keccak(text=encode_type(primary_type, types))


def _to_int(type_name: str, value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.lower().startswith(("0x", "-0x")):
            return int(text, 16)
        return int(text, 10)
    raise StructuredEncodingError(f"Cannot encode {value!r} as {type_name}")


def _to_bytes(type_name: str, value: Any) -> bytes:
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return hex_to_bytes(value)
    if isinstance(value, list):
        return bytes(value)
    raise StructuredEncodingError(f"Cannot encode {value!r} as {type_name}")


def encode_value(type_name: str, value: Any) -> bytes:
    """
    Encode an atomic EIP-712 value into one 32-byte word.

    ``address``/``bool``/``uintN``/``intN`` are right-aligned big-endian
    (negative ``intN`` in two's complement); ``bytesN`` is left-aligned.
    """
    if type_name == "address":
        raw = _to_bytes(type_name, value or "0x" + "00" * 20)
        if len(raw) > 20:
            raise StructuredEncodingError(f"Address too long: {value!r}")
        return raw.rjust(32, b"\x00")

    if type_name == "bool":
        if isinstance(value, str):
            value = value.strip().lower() not in ("", "0", "false")
        return (1 if value else 0).to_bytes(32, "big")

    int_match = _INT_TYPE.match(type_name)
    if int_match:
        unsigned = int_match.group(1) == "u"
        bits = int(int_match.group(2) or 256)
        number = _to_int(type_name, value)
        if unsigned:
            if number < 0 or number >= 1 << bits:
                raise StructuredEncodingError(f"Value {number} out of range for {type_name}")
            return number.to_bytes(32, "big")
        if number < -(1 << (bits - 1)) or number >= 1 << (bits - 1):
            raise StructuredEncodingError(f"Value {number} out of range for {type_name}")
        return (number % (1 << 256)).to_bytes(32, "big")

    bytes_match = _BYTES_N_TYPE.match(type_name)
    if bytes_match:
        size = int(bytes_match.group(1))
        raw = _to_bytes(type_name, value)
        if size < 1 or size > 32 or len(raw) > size:
            raise StructuredEncodingError(f"Value {value!r} does not fit {type_name}")
        return raw.ljust(32, b"\x00")

    raise StructuredEncodingError(f"Unknown EIP-712 type: {type_name!r}")


def encode_field(type_name: str, value: Any, types: TypeMap) -> bytes:
    if type_name in types:
        return hash_struct(type_name, value if value is not None else {}, types)

    if type_name == "string":
        return keccak(text=value if value is not None else "")

    if type_name == "bytes":
        return keccak(_to_bytes(type_name, value if value is not None else "0x"))

    array_match = _ARRAY_SUFFIX.search(type_name)
    if array_match:
        element_type = type_name[:array_match.start()]
        items = value if value is not None else []
        if not isinstance(items, (list, tuple)):
            raise StructuredEncodingError(f"Expected a list for {type_name}, got {type(items).__name__}")
        if array_match.group(1) and len(items) != int(array_match.group(1)):
            raise StructuredEncodingError(f"Expected {array_match.group(1)} items for {type_name}, got {len(items)}")
        return keccak(b"".join(encode_field(element_type, item, types) for item in items))

    return encode_value(type_name, value)


def encode_data(primary_type: str, data: Mapping[str, Any], types: TypeMap) -> bytes:
    if not isinstance(data, Mapping):
        raise StructuredEncodingError(f"Expected an object for {primary_type}, got {type(data).__name__}")
    encoded = [type_hash(primary_type, types)]
    for field in types[primary_type]:
        encoded.append(encode_field(field["type"], data.get(field["name"]), types))
    return b"".join(encoded)


def hash_struct(primary_type: str, data: Mapping[str, Any], types: TypeMap) -> bytes:
    return keccak(encode_data(primary_type, data, types))


def _domain_types(types: TypeMap, domain: Mapping[str, Any]) -> Dict[str, Sequence[Mapping[str, str]]]:
    full = dict(types)
    if EIP712_DOMAIN not in full:
        full[EIP712_DOMAIN] = [
            {"name": name, "type": kind} for name, kind in _DOMAIN_FIELDS if name in domain
        ]
    return full


def parse_typed_data(document: Any) -> Mapping[str, Any]:
    """Accept a typed-data mapping or its JSON text."""
    if isinstance(document, (str, bytes)):
        try:
            document = json.loads(document)
        except ValueError as e:
            raise StructuredEncodingError(f"Typed data is not valid JSON: {e}") from e
    if not isinstance(document, Mapping):
        raise StructuredEncodingError(f"Typed data must be an object, got {type(document).__name__}")
    return document


def domain_separator(document: Mapping[str, Any]) -> bytes:
    domain = document.get("domain") or {}
    return hash_struct(EIP712_DOMAIN, domain, _domain_types(document["types"], domain))


def message_hash(document: Mapping[str, Any]) -> bytes:
    types = {name: fields for name, fields in document["types"].items() if name != EIP712_DOMAIN}
    return hash_struct(document["primaryType"], document.get("message") or {}, types)


def typed_data_digest(document: Any) -> bytes:
    """
    Compute the 32-byte EIP-712 signing digest of a typed-data document.

    Args:
        document: ``{types, primaryType, domain, message}`` mapping or JSON text.

    Returns:
        ``keccak256(0x1901 ‖ domainSeparator ‖ hashStruct(message))``.

    Raises:
        StructuredEncodingError: On any malformed type definition or value.
    """
    try:
        parsed = parse_typed_data(document)
        prefix = b"\x19\x01" + domain_separator(parsed)
        if parsed["primaryType"] == EIP712_DOMAIN:
            return keccak(prefix)
        return keccak(prefix + message_hash(parsed))
    except StructuredEncodingError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise StructuredEncodingError(f"Cannot encode typed data: {e!r}") from e
