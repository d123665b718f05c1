"""
Provider Test Mocks Module

Stand-ins for injected wallet providers. They record every call that reaches
them so tests can tell whether the interceptor forwarded a request, and they
expose the attributes the interceptor mutates on a sandbox connect.

Usage:
    from test_mocks import MockSolanaProvider, MockEthereumProvider, make_window

    window = make_window()
    await window.ethereum.request({"method": "eth_chainId"})
"""

from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Tuple


class MockSolanaProvider:
    """Phantom-style provider with one coroutine per method."""

    def __init__(self) -> None:
        self.publicKey = None
        self.isConnected = False
        self.calls: List[Tuple[str, tuple]] = []
        self.emitted: List[Tuple[str, Any]] = []

    async def connect(self, *args):
        self.calls.append(("connect", args))
        return {"publicKey": "real-wallet"}

    async def signTransaction(self, transaction):
        self.calls.append(("signTransaction", (transaction,)))
        return "real-signed"

    async def signAllTransactions(self, transactions):
        self.calls.append(("signAllTransactions", (transactions,)))
        return ["real-signed"] * len(transactions)

    async def signMessage(self, message, display=None):
        self.calls.append(("signMessage", (message, display)))
        return {"signature": b"real"}

    async def signAndSendTransaction(self, transaction):
        self.calls.append(("signAndSendTransaction", (transaction,)))
        return {"signature": "real-send"}

    def emit(self, event: str, payload: Any = None) -> None:
        self.emitted.append((event, payload))


class MockEthereumProvider:
    """EIP-1193 provider; ``fail_with`` makes ``request`` raise that object."""

    def __init__(self, fail_with: Optional[BaseException] = None) -> None:
        self.selectedAddress = None
        self.fail_with = fail_with
        self.calls: List[Dict[str, Any]] = []
        self.emitted: List[Tuple[str, Any]] = []

    async def request(self, args):
        self.calls.append(args)
        if self.fail_with is not None:
            raise self.fail_with
        return f"real:{args['method']}"

    def isConnected(self) -> bool:
        return True

    def emit(self, event: str, payload: Any = None) -> None:
        self.emitted.append((event, payload))


class SyncEthereumProvider:
    """Provider whose ``request`` is a plain function."""

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []

    def request(self, args):
        self.calls.append(args)
        return "sync-result"


class SlottedProvider:
    """Cannot be weakly referenced."""
    __slots__ = ("calls",)

    def __init__(self) -> None:
        self.calls = []

    async def request(self, args):
        self.calls.append(args)
        return "slotted"


class ReadOnlyProvider:
    """Refuses replacement of ``request``."""

    @property
    def request(self):
        async def _request(args):
            return "read-only"
        return _request


class FakeTransaction:
    def __init__(self, payload: bytes) -> None:
        self.payload = payload
        self.fee_payer = "payer"

    def serialize_message(self) -> bytes:
        return self.payload


def make_window(solana=None, ethereum=None, phantom_alias: bool = True) -> SimpleNamespace:
    solana = solana if solana is not None else MockSolanaProvider()
    ethereum = ethereum if ethereum is not None else MockEthereumProvider()
    phantom = SimpleNamespace(solana=solana if phantom_alias else None, ethereum=None)
    return SimpleNamespace(solana=solana, ethereum=ethereum, phantom=phantom)
