"""
SVM Adapter Schema Models

Result types returned by the Solana-style sandbox dispatcher. They expose the
same accessors dApps use on ``@solana/web3.js`` objects (base58/string form,
raw bytes, buffer view, equality) as a fixed interface instead of ad hoc
objects.

Classes:
    - SolanaPublicKey: 32-byte Ed25519 public key with base58 accessors.
    - SignaturePair: (public key, signature) entry of a signed transaction.
    - SignedSolanaTransaction: Original transaction plus sandbox signature.
    - SignedMessage: ``signMessage`` result.
    - ConnectResult / SendResult: ``connect`` and ``signAndSendTransaction`` results.
    - SolanaMethod: Every method the SVM sandbox answers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from .base58 import base58_decode, base58_encode


class SolanaPublicKey:
    """
    Immutable Ed25519 public key.

    ``equals`` compares the base58 form, so a key equals any object whose
    ``str()`` is the same address (matching ``PublicKey.equals`` semantics).
    """

    __slots__ = ("_bytes", "_address")

    def __init__(self, key: bytes, address: Optional[str] = None) -> None:
        key = bytes(key)
        if len(key) != 32:
            raise ValueError(f"Solana public key must be 32 bytes, got {len(key)}")
        self._bytes = key
        self._address = address or base58_encode(key)

    @classmethod
    def from_base58(cls, address: str) -> "SolanaPublicKey":
        return cls(base58_decode(address), address)

    def to_base58(self) -> str:
        return self._address

    def to_string(self) -> str:
        return self._address

    def to_json(self) -> str:
        return self._address

    def to_bytes(self) -> bytes:
        return self._bytes

    def to_buffer(self) -> memoryview:
        return memoryview(self._bytes)

    def equals(self, other: Any) -> bool:
        if other is None:
            return False
        return str(other) == self._address

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, SolanaPublicKey):
            return other._bytes == self._bytes
        if isinstance(other, str):
            return other == self._address
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._bytes)

    def __str__(self) -> str:
        return self._address

    def __repr__(self) -> str:
        return f"SolanaPublicKey({self._address})"


@dataclass(frozen=True)
class SignaturePair:
    """One signer entry on a signed transaction."""
    public_key: SolanaPublicKey
    signature: bytes

    def __post_init__(self) -> None:
        if len(self.signature) != 64:
            raise ValueError(f"Ed25519 signature must be 64 bytes, got {len(self.signature)}")


@dataclass
class SignedSolanaTransaction:
    """
    A transaction signed by the sandbox keypair.

    ``transaction`` is the caller's original object, untouched; attribute
    lookups not defined here fall through to it, so code that reads fields
    off the signed transaction keeps working.
    """
    transaction: Any
    signature: bytes
    signatures: List[SignaturePair] = field(default_factory=list)

    def __getattr__(self, name: str) -> Any:
        # Only reached for names missing on the dataclass itself.
        if name.startswith("__") or name == "transaction":
            raise AttributeError(name)
        transaction = self.__dict__.get("transaction")
        if transaction is not None and hasattr(transaction, name):
            return getattr(transaction, name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")


@dataclass(frozen=True)
class SignedMessage:
    """``signMessage`` result."""
    signature: bytes
    public_key: SolanaPublicKey


@dataclass(frozen=True)
class ConnectResult:
    """``connect`` result."""
    public_key: SolanaPublicKey


@dataclass(frozen=True)
class SendResult:
    """``signAndSendTransaction`` result; the signature is a placeholder."""
    signature: str


class SolanaMethod(str, Enum):
    """Solana provider methods handled by the sandbox."""
    CONNECT = "connect"
    SIGN_TRANSACTION = "signTransaction"
    SIGN_ALL_TRANSACTIONS = "signAllTransactions"
    SIGN_MESSAGE = "signMessage"
    SIGN_AND_SEND_TRANSACTION = "signAndSendTransaction"
