from .adapter import SVMDispatcher, transaction_message
from .base58 import base58_decode, base58_encode
from .schemas import (
    ConnectResult,
    SendResult,
    SignaturePair,
    SignedMessage,
    SignedSolanaTransaction,
    SolanaMethod,
    SolanaPublicKey,
)
from .signatures import (
    derive_address,
    generate_keypair,
    keypair_from_seed,
    sign_and_send_placeholder,
    sign_message,
    verify_message,
)

__all__ = [
    "SVMDispatcher",
    "transaction_message",
    "base58_decode",
    "base58_encode",
    "ConnectResult",
    "SendResult",
    "SignaturePair",
    "SignedMessage",
    "SignedSolanaTransaction",
    "SolanaMethod",
    "SolanaPublicKey",
    "derive_address",
    "generate_keypair",
    "keypair_from_seed",
    "sign_and_send_placeholder",
    "sign_message",
    "verify_message",
]
