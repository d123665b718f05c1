"""
EVM Adapter Schema Models

JSON-RPC shaped results returned by the Ethereum-style sandbox dispatcher,
and the method enum the dispatcher is keyed on.

Classes:
    - EthereumMethod: Every method the EVM sandbox answers.
    - PermissionCaveat / WalletPermission: ``wallet_requestPermissions`` result items.
"""

from enum import Enum
from typing import Any, Dict, List

from pydantic import Field

from ...schemas.bases import CanonicalModel


class EthereumMethod(str, Enum):
    """Ethereum provider methods handled by the sandbox."""
    REQUEST_ACCOUNTS = "eth_requestAccounts"
    ACCOUNTS = "eth_accounts"
    REQUEST_PERMISSIONS = "wallet_requestPermissions"
    SEND_TRANSACTION = "eth_sendTransaction"
    SIGN_TRANSACTION = "eth_signTransaction"
    SIGN = "eth_sign"
    PERSONAL_SIGN = "personal_sign"
    SIGN_TYPED_DATA = "eth_signTypedData"
    SIGN_TYPED_DATA_V3 = "eth_signTypedData_v3"
    SIGN_TYPED_DATA_V4 = "eth_signTypedData_v4"


class PermissionCaveat(CanonicalModel):
    """EIP-2255 caveat restricting the accounts a permission exposes."""
    type: str = "restrictReturnedAccounts"
    value: List[str] = Field(default_factory=list)


class WalletPermission(CanonicalModel):
    """EIP-2255 permission object."""
    parent_capability: str = Field("eth_accounts", alias="parentCapability")
    caveats: List[PermissionCaveat] = Field(default_factory=list)

    @classmethod
    def for_accounts(cls, *accounts: str) -> "WalletPermission":
        return cls(caveats=[PermissionCaveat(value=list(accounts))])

    def to_rpc(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
