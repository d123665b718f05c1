"""
EVM Sandbox Dispatcher

Answers Ethereum provider ``request({method, params})`` calls with the
sandbox secp256k1 keypair. Results use the plain JSON-RPC shapes wallets
return: address lists, ``0x`` signatures and transaction hashes.

Parameter layouts accepted:
    personal_sign           [message, address]
    eth_sign                [address, message]
    eth_signTypedData*      [address, typedData]   (typedData may be JSON text)
                            [typedData, address]   (legacy order, also accepted)
"""

import re
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

from ...schemas.bases import Chain, Keypair
from ...utils import logger
from ..bases import ConnectionUpdate, DispatchResult, Handler, MethodDispatcher
from .schemas import EthereumMethod, WalletPermission
from .signatures import generate_tx_hash_placeholder, sign_personal_message, sign_typed_data

if TYPE_CHECKING:
    from ..keystore import KeypairStore

_ADDRESS = re.compile(r"^0x[0-9a-fA-F]{40}$")


def _param(params: Sequence[Any], index: int) -> Any:
    return params[index] if len(params) > index else None


def _is_address(value: Any) -> bool:
    return isinstance(value, str) and bool(_ADDRESS.match(value))


class EVMDispatcher(MethodDispatcher[EthereumMethod]):
    """
    Ethereum-style sandbox dispatcher.

    Args:
        keystore: Shared keypair store.
        chain_id: Hex chain id sent with the ``connect`` event after
                  ``eth_requestAccounts``.
    """

    chain = Chain.ETHEREUM
    methods = EthereumMethod

    def __init__(self, keystore: "KeypairStore", chain_id: str = "0x1") -> None:
        self.chain_id = chain_id
        super().__init__(keystore)

    def handlers(self) -> Dict[EthereumMethod, Handler]:
        return {
            EthereumMethod.REQUEST_ACCOUNTS: self._request_accounts,
            EthereumMethod.ACCOUNTS: self._accounts,
            EthereumMethod.REQUEST_PERMISSIONS: self._request_permissions,
            EthereumMethod.SEND_TRANSACTION: self._transaction,
            EthereumMethod.SIGN_TRANSACTION: self._transaction,
            EthereumMethod.SIGN: self._eth_sign,
            EthereumMethod.PERSONAL_SIGN: self._personal_sign,
            EthereumMethod.SIGN_TYPED_DATA: self._sign_typed_data,
            EthereumMethod.SIGN_TYPED_DATA_V3: self._sign_typed_data,
            EthereumMethod.SIGN_TYPED_DATA_V4: self._sign_typed_data,
        }

    async def _request_accounts(self, keypair: Keypair, params: Sequence[Any]) -> DispatchResult:
        logger.info("[ETH] Returning sandbox address")
        return DispatchResult(
            value=[keypair.address],
            connection=ConnectionUpdate(
                public_key=keypair.address,
                address=keypair.address,
                event="connect",
                payload={"chainId": self.chain_id},
            ),
        )

    async def _accounts(self, keypair: Keypair, params: Sequence[Any]) -> DispatchResult:
        return DispatchResult(value=[keypair.address])

    async def _request_permissions(self, keypair: Keypair, params: Sequence[Any]) -> DispatchResult:
        logger.info("[ETH] Granting permissions")
        return DispatchResult(value=[WalletPermission.for_accounts(keypair.address).to_rpc()])

    async def _transaction(self, keypair: Keypair, params: Sequence[Any]) -> DispatchResult:
        logger.info("[ETH] Signing transaction (simulated, nothing is broadcast)")
        return DispatchResult(value=generate_tx_hash_placeholder())

    async def _eth_sign(self, keypair: Keypair, params: Sequence[Any]) -> DispatchResult:
        logger.info("[ETH] Signing message (eth_sign)")
        return DispatchResult(value=sign_personal_message(_param(params, 1) or "", keypair.private_key))

    async def _personal_sign(self, keypair: Keypair, params: Sequence[Any]) -> DispatchResult:
        logger.info("[ETH] Signing personal message")
        return DispatchResult(value=sign_personal_message(_param(params, 0) or "", keypair.private_key))

    async def _sign_typed_data(self, keypair: Keypair, params: Sequence[Any]) -> DispatchResult:
        logger.info("[ETH] Signing typed data")
        return DispatchResult(value=sign_typed_data(self._typed_data_param(params), keypair.private_key))

    @staticmethod
    def _typed_data_param(params: Sequence[Any]) -> Optional[Any]:
        first, second = _param(params, 0), _param(params, 1)
        if _is_address(first) or (second is not None and not _is_address(second)):
            return second
        return first
