"""
Composition root.

Wires storage → KeypairStore → DispatcherHub → ConsentGate →
ProviderInterceptor → DiscoveryScheduler from ``Settings``.

Example::

    sandbox = PseudoSandbox.from_settings(window)
    sandbox.start()                      # inside a running event loop
    sandbox.surface.approve(use_sandbox=True)
"""

from typing import Any, Optional

from .adapters.adapters_hub import DispatcherHub
from .adapters.keystore import KeypairStore
from .adapters.storages import InMemoryStorage, JsonFileStorage, KeyValueStorage
from .config import Settings, load_settings
from .engine.consent import ConsentGate, ConsentSurface, PromptConsentSurface
from .engine.events import Dependencies, EventBus
from .interceptors.discovery import DiscoveryScheduler, EnvironmentProbe, NamespaceProbe
from .interceptors.providers import ProviderInterceptor
from .utils import logger, setup_logging


class PseudoSandbox:
    """Holds every component of one interception session."""

    def __init__(
        self,
        probe: EnvironmentProbe,
        surface: ConsentSurface,
        hub: DispatcherHub,
        settings: Optional[Settings] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.probe = probe
        self.surface = surface
        self.hub = hub
        self.event_bus = event_bus or EventBus()
        self.gate = ConsentGate(surface)
        self.interceptor = ProviderInterceptor(
            probe,
            self.gate,
            hub,
            event_bus=self.event_bus,
            deps=Dependencies(hub=hub, settings=self.settings),
        )
        self.scheduler = DiscoveryScheduler(self.interceptor, self.settings.discovery_delays_ms)

    @classmethod
    def from_settings(
        cls,
        window: Any,
        surface: Optional[ConsentSurface] = None,
        settings: Optional[Settings] = None,
        storage: Optional[KeyValueStorage] = None,
    ) -> "PseudoSandbox":
        """
        Build a sandbox for ``window``.

        Args:
            window: Object or mapping the wallets inject their providers into.
            surface: Consent surface; a ``PromptConsentSurface`` when omitted.
            settings: Runtime settings; read from the environment when omitted.
            storage: Keypair storage; chosen from ``settings.storage_path`` when omitted.
        """
        settings = settings or load_settings()
        setup_logging(settings.log_level)

        if storage is None:
            storage = JsonFileStorage(settings.storage_path) if settings.storage_path else InMemoryStorage()
        hub = DispatcherHub(KeypairStore(storage), eth_chain_id=settings.eth_chain_id)
        if surface is None:
            surface = PromptConsentSurface(use_sandbox=settings.sandbox_default)
        return cls(NamespaceProbe(window), surface, hub, settings=settings)

    def start(self) -> None:
        """Begin scheduled provider discovery; call from the running loop."""
        logger.info("Sandbox started, discovery at %s ms", list(self.settings.discovery_delays_ms))
        self.scheduler.start()

    def notify(self, event_name: str) -> bool:
        return self.scheduler.notify(event_name)

    async def discover(self):
        return await self.interceptor.discover()

    def stop(self) -> None:
        self.scheduler.stop()
