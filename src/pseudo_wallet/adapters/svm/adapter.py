"""
SVM Sandbox Dispatcher

Answers Solana wallet-adapter calls (``connect``, ``signTransaction``,
``signAllTransactions``, ``signMessage``, ``signAndSendTransaction``) with the
sandbox Ed25519 keypair.

Transactions are treated as opaque objects: the bytes to sign are taken from
the first of ``serialize_message()``, ``serializeMessage()``,
``message.serialize()``, or the transaction itself when it is already bytes.
A transaction that exposes none of these is signed over 32 zero bytes so the
page still receives a well-formed result.
"""

from typing import Any, Dict, List, Sequence

from ...schemas.bases import Chain, Keypair
from ...utils import logger
from ..bases import ConnectionUpdate, DispatchResult, Handler, MethodDispatcher
from .schemas import (
    ConnectResult,
    SolanaMethod,
    SendResult,
    SignaturePair,
    SignedMessage,
    SignedSolanaTransaction,
    SolanaPublicKey,
)
from .signatures import sign_and_send_placeholder, sign_message

EMPTY_MESSAGE = bytes(32)


def transaction_message(transaction: Any) -> bytes:
    """Extract the bytes a Solana transaction's signature covers."""
    if isinstance(transaction, (bytes, bytearray, memoryview)):
        return bytes(transaction)
    for name in ("serialize_message", "serializeMessage"):
        serializer = getattr(transaction, name, None)
        if callable(serializer):
            return bytes(serializer())
    message = getattr(transaction, "message", None)
    serializer = getattr(message, "serialize", None)
    if callable(serializer):
        return bytes(serializer())
    return EMPTY_MESSAGE


def _message_bytes(message: Any) -> bytes:
    if isinstance(message, str):
        return message.encode("utf-8")
    if message is None:
        return b""
    return bytes(message)


class SVMDispatcher(MethodDispatcher[SolanaMethod]):
    """Solana-style sandbox dispatcher."""

    chain = Chain.SOLANA
    methods = SolanaMethod

    def handlers(self) -> Dict[SolanaMethod, Handler]:
        return {
            SolanaMethod.CONNECT: self._connect,
            SolanaMethod.SIGN_TRANSACTION: self._sign_transaction,
            SolanaMethod.SIGN_ALL_TRANSACTIONS: self._sign_all_transactions,
            SolanaMethod.SIGN_MESSAGE: self._sign_message,
            SolanaMethod.SIGN_AND_SEND_TRANSACTION: self._sign_and_send,
        }

    @staticmethod
    def public_key(keypair: Keypair) -> SolanaPublicKey:
        return SolanaPublicKey(keypair.public_key, keypair.address)

    def _sign(self, keypair: Keypair, transaction: Any) -> SignedSolanaTransaction:
        signature = sign_message(keypair, transaction_message(transaction))
        return SignedSolanaTransaction(
            transaction=transaction,
            signature=signature,
            signatures=[SignaturePair(public_key=self.public_key(keypair), signature=signature)],
        )

    async def _connect(self, keypair: Keypair, params: Sequence[Any]) -> DispatchResult:
        logger.info("[SOL] Connecting with sandbox wallet")
        public_key = self.public_key(keypair)
        return DispatchResult(
            value=ConnectResult(public_key=public_key),
            connection=ConnectionUpdate(
                public_key=public_key,
                address=keypair.address,
                event="connect",
                payload=public_key,
            ),
        )

    async def _sign_transaction(self, keypair: Keypair, params: Sequence[Any]) -> DispatchResult:
        logger.info("[SOL] Signing transaction")
        return DispatchResult(value=self._sign(keypair, params[0] if params else None))

    async def _sign_all_transactions(self, keypair: Keypair, params: Sequence[Any]) -> DispatchResult:
        transactions = list(params[0] or []) if params else []
        logger.info("[SOL] Signing %d transactions", len(transactions))
        signed: List[SignedSolanaTransaction] = [self._sign(keypair, tx) for tx in transactions]
        return DispatchResult(value=signed)

    async def _sign_message(self, keypair: Keypair, params: Sequence[Any]) -> DispatchResult:
        logger.info("[SOL] Signing message")
        message = _message_bytes(params[0] if params else None)
        return DispatchResult(
            value=SignedMessage(signature=sign_message(keypair, message), public_key=self.public_key(keypair)),
        )

    async def _sign_and_send(self, keypair: Keypair, params: Sequence[Any]) -> DispatchResult:
        logger.info("[SOL] Sign and send (simulated, nothing is submitted)")
        return DispatchResult(value=SendResult(signature=sign_and_send_placeholder()))
