"""
EVM Off-Chain Signing Utilities

Local secp256k1 signing helpers for the Ethereum-style sandbox wallet. All
cryptographic operations are performed in-process using ``eth_keys`` and
``eth_utils``; no RPC calls are made and nothing is broadcast.

Exported helpers
----------------
generate_keypair / keypair_from_private_key
    Create or rebuild a secp256k1 keypair with its checksummed address.

derive_address / to_checksum_address
    Address derivation from an uncompressed public key and EIP-55 casing.

sign_personal_message
    ``personal_sign``/``eth_sign`` signature (EIP-191 version 0x45 prefix).

sign_typed_data
    EIP-712 signature, with a JSON-hash fallback for documents that cannot
    be encoded.

generate_tx_hash_placeholder
    Random 32-byte hash returned for sandbox send/sign-transaction calls.
"""

import json
import os
import re
from typing import Any, Sequence, Union

from eth_keys import keys
from eth_keys.exceptions import ValidationError
from eth_utils import keccak

from ...engine.exceptions import StructuredEncodingError
from ...schemas.bases import Chain, Keypair
from ...utils import bytes_to_hex, hex_to_bytes, logger
from .eip712 import typed_data_digest

PRIVATE_KEY_LENGTH = 32
UNCOMPRESSED_PUBLIC_KEY_LENGTH = 65
PERSONAL_MESSAGE_PREFIX = "\x19Ethereum Signed Message:\n"

_HEX_ADDRESS = re.compile(r"^(0x)?[0-9a-fA-F]{40}$")

MessageInput = Union[str, bytes, bytearray, Sequence[int]]


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------

def to_checksum_address(address: str) -> str:
    """
    Apply EIP-55 mixed-case checksum to a hex address.

    The casing depends only on the lowercase form, so feeding the result
    back in returns the same string.

    Raises:
        ValueError: If ``address`` is not 20 bytes of hex.
    """
    if not _HEX_ADDRESS.match(address):
        raise ValueError(f"Not a hex address: {address!r}")
    lower = address.lower().replace("0x", "")
    digest = keccak(text=lower).hex()
    return "0x" + "".join(
        char.upper() if int(digest[i], 16) >= 8 else char
        for i, char in enumerate(lower)
    )


def derive_address(public_key: bytes) -> str:
    """
    Derive the checksummed address of a secp256k1 public key.

    Args:
        public_key: 65-byte uncompressed key (``0x04`` prefix) or the raw
                    64-byte ``X ‖ Y`` form.

    Returns:
        EIP-55 checksummed ``0x`` address.
    """
    if len(public_key) == UNCOMPRESSED_PUBLIC_KEY_LENGTH:
        if public_key[0] != 0x04:
            raise ValueError("Uncompressed public key must start with 0x04")
        public_key = public_key[1:]
    if len(public_key) != 64:
        raise ValueError(f"Expected a 64 or 65 byte public key, got {len(public_key)}")
    return to_checksum_address(keccak(public_key)[-20:].hex())


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------

def keypair_from_private_key(private_key: bytes) -> Keypair:
    """
    Rebuild a keypair from a raw 32-byte scalar.

    Raises:
        ValueError: If the scalar is not a valid secp256k1 private key.
    """
    if len(private_key) != PRIVATE_KEY_LENGTH:
        raise ValueError(f"secp256k1 private key must be {PRIVATE_KEY_LENGTH} bytes, got {len(private_key)}")
    try:
        key = keys.PrivateKey(bytes(private_key))
    except ValidationError as e:
        raise ValueError(f"Invalid secp256k1 private key: {e}") from e
    public_key = b"\x04" + key.public_key.to_bytes()
    return Keypair(
        chain=Chain.ETHEREUM,
        private_key=bytes(private_key),
        public_key=public_key,
        address=derive_address(public_key),
    )


def generate_keypair() -> Keypair:
    # A random scalar is out of range with negligible probability; retry then.
    while True:
        try:
            return keypair_from_private_key(os.urandom(PRIVATE_KEY_LENGTH))
        except ValueError:
            continue


# ---------------------------------------------------------------------------
# Signing
# ---------------------------------------------------------------------------

def sign_hash(message_hash: bytes, private_key: bytes) -> str:
    """
    ECDSA-sign a 32-byte digest and return ``0x`` ‖ r ‖ s ‖ v.

    Nonces are RFC 6979 deterministic and ``s`` is normalised to the lower
    half of the curve order, so the output is stable for a given key and
    digest. ``v`` is the recovery id plus 27.
    """
    if len(message_hash) != 32:
        raise ValueError(f"Digest must be 32 bytes, got {len(message_hash)}")
    signature = keys.PrivateKey(bytes(private_key)).sign_msg_hash(bytes(message_hash))
    return (
        "0x"
        + signature.r.to_bytes(32, "big").hex()
        + signature.s.to_bytes(32, "big").hex()
        + format(signature.v + 27, "02x")
    )


def to_message_bytes(message: MessageInput) -> bytes:
    """
    ``0x`` strings are decoded as hex; other text is UTF-8 encoded.

    Byte-value sequences (a JSON-serialized ``Uint8Array``) are packed as is.

    Raises:
        ValueError: If ``message`` is neither text nor a sequence of byte values.
    """
    if isinstance(message, (bytes, bytearray, memoryview)):
        return bytes(message)
    if isinstance(message, (list, tuple)):
        try:
            return bytes(message)
        except (TypeError, ValueError) as e:
            raise ValueError(f"message must be text, hex or a sequence of byte values: {e}") from e
    if not isinstance(message, str):
        raise ValueError(f"message must be text, hex or a sequence of byte values, got {type(message).__name__}")
    if message.startswith("0x"):
        try:
            return hex_to_bytes(message)
        except ValueError:
            return message.encode("utf-8")
    return message.encode("utf-8")


def hash_personal_message(message: MessageInput) -> bytes:
    """Keccak256 of ``"\\x19Ethereum Signed Message:\\n" + len(message) + message``."""
    data = to_message_bytes(message)
    return keccak(f"{PERSONAL_MESSAGE_PREFIX}{len(data)}".encode("utf-8") + data)


def sign_personal_message(message: MessageInput, private_key: bytes) -> str:
    """
    Sign a message the way ``personal_sign`` and ``eth_sign`` do.

    Args:
        message:     Text, ``0x`` hex string, raw bytes or a list of byte values.
        private_key: Raw 32-byte secp256k1 scalar.

    Returns:
        65-byte signature as a 132-character ``0x`` hex string.
    """
    return sign_hash(hash_personal_message(message), private_key)


def _json_fallback_bytes(document: Any) -> bytes:
    """Compact JSON of ``document``; JSON text is re-serialized so layout does not matter."""
    if isinstance(document, (str, bytes, bytearray)):
        try:
            document = json.loads(document)
        except ValueError:
            return document.encode("utf-8") if isinstance(document, str) else bytes(document)
    return json.dumps(
        document,
        separators=(",", ":"),
        ensure_ascii=False,
        default=lambda o: bytes_to_hex(o) if isinstance(o, (bytes, bytearray)) else str(o),
    ).encode("utf-8")


def sign_typed_data(document: Any, private_key: bytes) -> str:
    """
    Sign an EIP-712 typed-data document.

    The digest is ``keccak256(0x1901 ‖ domainSeparator ‖ hashStruct(message))``
    computed by ``typed_data_digest``. If the document cannot be encoded the
    signer still answers: it signs ``keccak256`` of the document's compact
    JSON text instead. That fallback signature will not verify against the
    typed data; it only keeps the sandbox from failing the page's request.

    Args:
        document:    Typed-data mapping or its JSON text.
        private_key: Raw 32-byte secp256k1 scalar.

    Returns:
        65-byte signature as a 132-character ``0x`` hex string.
    """
    try:
        digest = typed_data_digest(document)
    except StructuredEncodingError as e:
        logger.warning("[ETH] Typed data could not be encoded, signing its JSON hash instead: %s", e)
        digest = keccak(_json_fallback_bytes(document))
    else:
        logger.debug("[ETH] Signing EIP-712 digest %s", bytes_to_hex(digest))
    return sign_hash(digest, private_key)


def generate_tx_hash_placeholder() -> str:
    """Random ``0x`` 32-byte hash; no transaction exists behind it."""
    return bytes_to_hex(os.urandom(32))
