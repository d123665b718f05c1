"""
Abstract Base Classes for Sandbox Method Dispatchers

Defines the interface every chain-specific dispatcher (EVM, SVM) implements.
A dispatcher maps a sensitive provider method to a sandbox handler built on
that chain's signer and returns values shaped like the ones real wallets
return.

Core Classes:
    - MethodDispatcher: per-chain method table with ``dispatch``.
    - DispatchResult: handler return value plus an optional connection update.
    - ConnectionUpdate: provider state a connect-class method must expose.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Generic, Optional, Sequence, Type, TypeVar

from ..engine.exceptions import UnsupportedMethodError
from ..schemas.bases import Chain, Keypair
from ..utils import logger

if TYPE_CHECKING:
    from .keystore import KeypairStore


MethodT = TypeVar("MethodT", bound=Enum)
Handler = Callable[[Keypair, Sequence[Any]], Awaitable["DispatchResult"]]


@dataclass(frozen=True)
class ConnectionUpdate:
    """
    Connection state to publish on the provider after a sandbox connect.

    Attributes:
        public_key: Value assigned to the provider's public key field
                    (``publicKey`` for Solana, ``selectedAddress`` for Ethereum).
        address: Sandbox address as a string.
        event: Event name passed to ``provider.emit``.
        payload: Event payload passed to ``provider.emit``.
    """
    public_key: Any
    address: str
    event: str = "connect"
    payload: Any = None


@dataclass(frozen=True)
class DispatchResult:
    """Sandbox response for one intercepted call."""
    value: Any
    connection: Optional[ConnectionUpdate] = None


class MethodDispatcher(ABC, Generic[MethodT]):
    """
    Abstract Base Class for chain-specific sandbox dispatchers.

    Subclasses declare ``chain``, the ``methods`` enum and a ``handlers``
    mapping with one coroutine per enum member. Construction fails if any
    member lacks a handler, so the table is exhaustive; names outside the enum
    fail at dispatch time with ``UnsupportedMethodError``.

    Example Implementation:
        class EVMDispatcher(MethodDispatcher[EthereumMethod]):
            chain = Chain.ETHEREUM
            methods = EthereumMethod

            def handlers(self):
                return {EthereumMethod.PERSONAL_SIGN: self._personal_sign, ...}
    """

    chain: Chain
    methods: Type[MethodT]

    def __init__(self, keystore: "KeypairStore") -> None:
        self._keystore = keystore
        self._handlers: Dict[MethodT, Handler] = self.handlers()
        missing = [m.value for m in self.methods if m not in self._handlers]
        if missing:
            raise TypeError(f"{type(self).__name__} has no handler for: {', '.join(missing)}")

    @abstractmethod
    def handlers(self) -> Dict[MethodT, Handler]:
        """Return the method table; called once from ``__init__``."""
        pass

    @property
    def keystore(self) -> "KeypairStore":
        return self._keystore

    def parse_method(self, method: str) -> MethodT:
        """
        Map a method name onto the chain's enum.

        Raises:
            UnsupportedMethodError: If the name is not a member.
        """
        try:
            return self.methods(method)
        except ValueError:
            raise UnsupportedMethodError(method, chain=self.chain.value) from None

    def supports(self, method: str) -> bool:
        return any(member.value == method for member in self.methods)

    async def dispatch(self, method: str, params: Optional[Sequence[Any]] = None) -> DispatchResult:
        """
        Answer ``method`` with the sandbox keypair.

        Args:
            method: Provider method name (``"personal_sign"``, ``"connect"``...).
            params: Positional arguments of the original call.

        Returns:
            DispatchResult carrying the value to hand back to the page.

        Raises:
            UnsupportedMethodError: For methods this chain does not implement.
        """
        member = self.parse_method(method)
        keypair = await self._keystore.get_keypair(self.chain)
        logger.info("[SANDBOX] Handling %s with wallet %s", member.value, keypair.address)
        return await self._handlers[member](keypair, list(params or []))
