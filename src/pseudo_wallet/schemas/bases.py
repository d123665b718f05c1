"""
Base Schema Models for the Pseudo Sandbox

This module defines the fundamental models shared by the interception engine
and the sandbox signers. It provides the foundation for validation and
consistent serialization across the package.

Core Classes:
    - CanonicalModel: Pydantic base model with deterministic JSON serialization
    - Chain: Supported chain families
    - Decision: Outcome of a consent prompt
    - KeypairRecord: Persisted layout of a sandbox keypair
    - Keypair: In-memory keypair handed to the chain signers

Dependencies:
    - pydantic: For data validation and serialization
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Annotated


class CanonicalModel(BaseModel):
    """
    Pydantic base model with canonical JSON serialization.

    The JSON representation is deterministic (sorted keys, no extra
    whitespace) so persisted records and hashed payloads are stable.

    Example:
        class MyModel(CanonicalModel):
            name: str
            value: int

        model = MyModel(name="test", value=123)
        model.to_canonical_json()  # '{"name":"test","value":123}'
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_canonical_json(self) -> str:
        """
        Convert model to a canonical JSON string.

        ``model_dump(mode="json", by_alias=True)`` converts enums and nested
        models to plain types; ``json.dumps`` with sorted keys and compact
        separators makes the output byte-stable.

        Returns:
            str: JSON string with sorted keys and no extra whitespace.
        """
        data = self.model_dump(mode="json", by_alias=True)
        return json.dumps(
            data,
            separators=(",", ":"),
            sort_keys=True,
            ensure_ascii=False
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert model to dictionary representation.

        Returns:
            Dict[str, Any]: Dictionary with all model fields.
        """
        return self.model_dump()


class Chain(str, Enum):
    """Chain families the sandbox can stand in for."""
    SOLANA = "solana"
    ETHEREUM = "ethereum"


class Decision(CanonicalModel):
    """
    Outcome of a consent prompt.

    ``approved=False`` rejects the call. ``approved=True`` with
    ``use_sandbox=False`` forwards it to the real provider;
    ``use_sandbox=True`` answers it with the sandbox signer.
    """

    approved: bool = Field(..., description="Whether the user let the request proceed")
    use_sandbox: bool = Field(False, description="Answer locally instead of forwarding")

    @classmethod
    def reject(cls) -> "Decision":
        return cls(approved=False, use_sandbox=False)

    @classmethod
    def forward(cls) -> "Decision":
        return cls(approved=True, use_sandbox=False)

    @classmethod
    def sandbox(cls) -> "Decision":
        return cls(approved=True, use_sandbox=True)


ByteValue = Annotated[int, Field(ge=0, le=255)]


class KeypairRecord(CanonicalModel):
    """
    Persisted sandbox keypair.

    Byte fields are stored as lists of ints so the record is plain JSON.

    Attributes:
        private_key: Raw 32-byte secp256k1 scalar or Ed25519 seed.
        public_key: 65-byte uncompressed secp256k1 key or 32-byte Ed25519 key.
        address: Address derived from ``public_key`` at generation time.
    """

    private_key: List[ByteValue] = Field(..., alias="privateKeyMaterial")
    public_key: List[ByteValue] = Field(..., alias="publicKey")
    address: str = Field(..., min_length=1)

    @classmethod
    def from_bytes(cls, private_key: bytes, public_key: bytes, address: str) -> "KeypairRecord":
        return cls(privateKeyMaterial=list(private_key), publicKey=list(public_key), address=address)

    def private_key_bytes(self) -> bytes:
        return bytes(self.private_key)

    def public_key_bytes(self) -> bytes:
        return bytes(self.public_key)


@dataclass(frozen=True)
class Keypair:
    """
    In-memory sandbox keypair for one chain.

    Owned by ``KeypairStore``; the private key is only handed to the chain
    signers. ``repr`` never includes it.
    """

    chain: Chain
    private_key: bytes = field(repr=False)
    public_key: bytes
    address: str

    def __repr__(self) -> str:
        return f"Keypair(chain={self.chain.value}, address={self.address})"

    def to_record(self) -> "KeypairRecord":
        return KeypairRecord.from_bytes(self.private_key, self.public_key, self.address)
