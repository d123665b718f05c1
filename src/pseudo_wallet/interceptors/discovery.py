"""
Provider discovery.

Wallets inject their providers at unpredictable times, so discovery is
retried on a fixed schedule and whenever the page signals a lifecycle event.
Wrapping is idempotent, which makes repeated passes harmless.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Sequence, Tuple, Union

from ..config import DEFAULT_DISCOVERY_DELAYS_MS
from ..schemas.bases import Chain
from ..utils import logger

if TYPE_CHECKING:
    from .providers import ProviderInterceptor


LIFECYCLE_EVENTS = frozenset({"DOMContentLoaded", "readystatechange", "eip6963:announceProvider"})

# (source label, attribute path, chain)
PROVIDER_LOCATIONS: Tuple[Tuple[str, Tuple[str, ...], Chain], ...] = (
    ("window.solana", ("solana",), Chain.SOLANA),
    ("window.phantom.solana", ("phantom", "solana"), Chain.SOLANA),
    ("window.ethereum", ("ethereum",), Chain.ETHEREUM),
    ("window.phantom.ethereum", ("phantom", "ethereum"), Chain.ETHEREUM),
)


@dataclass(frozen=True)
class ProviderHandle:
    """A provider found in the environment and the place it was found."""
    chain: Chain
    provider: Any
    source: str


class EnvironmentProbe(ABC):
    """Lists the wallet providers currently present in the host environment."""

    @abstractmethod
    def providers(self) -> List[ProviderHandle]:
        pass


def _lookup(container: Any, name: str) -> Any:
    if isinstance(container, Mapping):
        return container.get(name)
    return getattr(container, name, None)


class NamespaceProbe(EnvironmentProbe):
    """
    Probe over a window-like namespace (an object or a mapping).

    Looks for ``solana``, ``phantom.solana``, ``ethereum`` and
    ``phantom.ethereum``. An alias pointing at a provider already listed is
    skipped. Providers announced with ``announce_provider`` are listed after
    the namespace ones.
    """

    def __init__(self, window: Any) -> None:
        self.window = window
        self._announced: List[ProviderHandle] = []

    def announce_provider(self, chain: Union[Chain, str], provider: Any, name: Optional[str] = None) -> ProviderHandle:
        """Register a provider announced by the wallet (EIP-6963 style)."""
        handle = ProviderHandle(chain=Chain(chain), provider=provider, source=f"announced:{name or type(provider).__name__}")
        self._announced.append(handle)
        return handle

    def providers(self) -> List[ProviderHandle]:
        found: List[ProviderHandle] = []
        seen = set()
        for source, path, chain in PROVIDER_LOCATIONS:
            provider = self.window
            for name in path:
                if provider is None:
                    break
                provider = _lookup(provider, name)
            if provider is None or id(provider) in seen:
                continue
            seen.add(id(provider))
            found.append(ProviderHandle(chain=chain, provider=provider, source=source))

        for handle in self._announced:
            if id(handle.provider) not in seen:
                seen.add(id(handle.provider))
                found.append(handle)
        return found


class DiscoveryScheduler:
    """
    Runs ``interceptor.discover()`` on a timer schedule and on lifecycle events.

    Args:
        interceptor: The interceptor whose ``discover`` is run.
        delays_ms: Offsets from ``start()`` at which discovery runs.
    """

    def __init__(self, interceptor: "ProviderInterceptor", delays_ms: Optional[Sequence[int]] = None) -> None:
        self.interceptor = interceptor
        self.delays_ms = tuple(DEFAULT_DISCOVERY_DELAYS_MS if delays_ms is None else delays_ms)
        self._handles: List[asyncio.TimerHandle] = []
        self._tasks: set = set()

    @property
    def running(self) -> bool:
        return any(not handle.cancelled() for handle in self._handles)

    def start(self) -> None:
        """Schedule every discovery pass; must be called from the running loop."""
        loop = asyncio.get_running_loop()
        self.stop()
        for delay in self.delays_ms:
            self._handles.append(loop.call_later(delay / 1000, self._spawn, f"timer:{delay}ms"))

    def notify(self, event_name: str) -> bool:
        """
        Run a discovery pass for a page lifecycle event.

        Returns:
            ``False`` for event names that do not trigger discovery.
        """
        if event_name not in LIFECYCLE_EVENTS:
            return False
        self._spawn(event_name)
        return True

    def stop(self) -> None:
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()

    def _spawn(self, trigger: str) -> None:
        task = asyncio.get_running_loop().create_task(self._run(trigger))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, trigger: str) -> None:
        try:
            wrapped = await self.interceptor.discover()
        except Exception:
            logger.exception("Provider discovery failed (%s)", trigger)
            return
        if wrapped:
            logger.debug("Discovery pass %s wrapped %d method(s)", trigger, len(wrapped))
