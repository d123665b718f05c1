"""
SVM Off-Chain Signing Utilities

Ed25519 helpers for the Solana-style sandbox wallet. Signing happens
in-process with PyNaCl; nothing is sent to a cluster.

Exported helpers
----------------
generate_keypair
    Create a fresh Ed25519 keypair from a random 32-byte seed.

keypair_from_seed
    Rebuild a keypair from a persisted seed.

derive_address
    Base58 address of a raw 32-byte public key.

sign_message
    Deterministic 64-byte Ed25519 signature over raw message bytes.

sign_and_send_placeholder
    88-character base58 string shaped like a transaction signature.
"""

import secrets

from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from ...schemas.bases import Chain, Keypair
from .base58 import BASE58_ALPHABET, base58_encode


SEED_LENGTH = 32
PUBLIC_KEY_LENGTH = 32
SIGNATURE_PLACEHOLDER_LENGTH = 88


def derive_address(public_key: bytes) -> str:
    """
    Encode a raw Ed25519 public key as a Solana address.

    Raises:
        ValueError: If ``public_key`` is not 32 bytes.
    """
    if len(public_key) != PUBLIC_KEY_LENGTH:
        raise ValueError(f"Ed25519 public key must be {PUBLIC_KEY_LENGTH} bytes, got {len(public_key)}")
    return base58_encode(public_key)


def keypair_from_seed(seed: bytes) -> Keypair:
    """
    Rebuild a keypair from its 32-byte seed.

    Raises:
        ValueError: If ``seed`` has the wrong length.
    """
    if len(seed) != SEED_LENGTH:
        raise ValueError(f"Ed25519 seed must be {SEED_LENGTH} bytes, got {len(seed)}")
    signing_key = SigningKey(bytes(seed))
    public_key = bytes(signing_key.verify_key)
    return Keypair(
        chain=Chain.SOLANA,
        private_key=bytes(seed),
        public_key=public_key,
        address=derive_address(public_key),
    )


def generate_keypair() -> Keypair:
    return keypair_from_seed(bytes(SigningKey.generate()))


def sign_message(keypair: Keypair, message: bytes) -> bytes:
    """
    Sign raw bytes with the keypair's Ed25519 key.

    No prefix or pre-hash is applied, matching ``signMessage`` in Solana
    wallets. Ed25519 is deterministic: same key and message, same signature.

    Returns:
        64-byte detached signature.
    """
    signed = SigningKey(keypair.private_key).sign(bytes(message))
    return bytes(signed.signature)


def verify_message(public_key: bytes, message: bytes, signature: bytes) -> bool:
    """Check a detached Ed25519 signature; returns ``False`` instead of raising."""
    try:
        VerifyKey(bytes(public_key)).verify(bytes(message), bytes(signature))
    except (BadSignatureError, ValueError):
        return False
    return True


def sign_and_send_placeholder() -> str:
    """
    Produce a random base58 string with the length of an encoded transaction
    signature. The sandbox never submits anything, so this is not a real
    signature of any transaction.
    """
    return "".join(secrets.choice(BASE58_ALPHABET) for _ in range(SIGNATURE_PLACEHOLDER_LENGTH))
