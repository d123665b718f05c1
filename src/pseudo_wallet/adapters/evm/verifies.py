"""
EVM Signature Verification Helpers

Off-chain checks for signatures produced by the sandbox Ethereum wallet.
Recovery and message encoding go through ``eth_account``, independently of
the sandbox's own digest code, so a passing check means a real verifier
would accept the signature too.

Current coverage
----------------
recover_personal_signer / verify_personal_signature
    ``personal_sign``/``eth_sign`` (EIP-191 version 0x45).

recover_typed_data_signer / verify_typed_data_signature
    EIP-712 typed data. Signatures made by the JSON-hash fallback do not
    verify here.
"""

import json
from typing import Any, Mapping, Optional, Union

from eth_account import Account
from eth_account.messages import encode_defunct, encode_typed_data

from .signatures import MessageInput, to_message_bytes


def _split_signature(signature: Union[str, bytes]) -> bytes:
    if isinstance(signature, str):
        signature = bytes.fromhex(signature[2:] if signature.startswith("0x") else signature)
    if len(signature) != 65:
        raise ValueError(f"Expected a 65-byte signature, got {len(signature)}")
    return bytes(signature)


def recover_personal_signer(message: MessageInput, signature: Union[str, bytes]) -> str:
    """
    Recover the address that ``personal_sign``-ed ``message``.

    ``message`` is interpreted the same way the sandbox signer reads it
    (``0x`` strings as hex, other text as UTF-8).
    """
    signable = encode_defunct(primitive=to_message_bytes(message))
    return Account.recover_message(signable, signature=_split_signature(signature))


def verify_personal_signature(message: MessageInput, signature: Union[str, bytes], address: str) -> bool:
    try:
        recovered = recover_personal_signer(message, signature)
    except Exception:
        return False
    return recovered.lower() == address.lower()


def recover_typed_data_signer(document: Union[str, Mapping[str, Any]], signature: Union[str, bytes]) -> str:
    """Recover the signer of an EIP-712 document (mapping or JSON text)."""
    if isinstance(document, str):
        document = json.loads(document)
    signable = encode_typed_data(full_message=dict(document))
    return Account.recover_message(signable, signature=_split_signature(signature))


def verify_typed_data_signature(
    document: Union[str, Mapping[str, Any]],
    signature: Union[str, bytes],
    address: Optional[str],
) -> bool:
    """
    Check an EIP-712 signature against ``address``.

    Returns:
        ``False`` for malformed documents or signatures as well as for
        signatures by another key.
    """
    if not address:
        return False
    try:
        recovered = recover_typed_data_signer(document, signature)
    except Exception:
        return False
    return recovered.lower() == address.lower()
