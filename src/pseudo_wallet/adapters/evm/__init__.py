from .adapter import EVMDispatcher
from .eip712 import encode_type, hash_struct, type_hash, typed_data_digest
from .schemas import EthereumMethod, PermissionCaveat, WalletPermission
from .verifies import (
    recover_personal_signer,
    recover_typed_data_signer,
    verify_personal_signature,
    verify_typed_data_signature,
)
from .signatures import (
    derive_address,
    generate_keypair,
    generate_tx_hash_placeholder,
    hash_personal_message,
    keypair_from_private_key,
    sign_hash,
    sign_personal_message,
    sign_typed_data,
    to_checksum_address,
)

__all__ = [
    "EVMDispatcher",
    "encode_type",
    "hash_struct",
    "type_hash",
    "typed_data_digest",
    "EthereumMethod",
    "PermissionCaveat",
    "WalletPermission",
    "derive_address",
    "generate_keypair",
    "generate_tx_hash_placeholder",
    "hash_personal_message",
    "keypair_from_private_key",
    "sign_hash",
    "sign_personal_message",
    "sign_typed_data",
    "to_checksum_address",
    "recover_personal_signer",
    "recover_typed_data_signer",
    "verify_personal_signature",
    "verify_typed_data_signature",
]
