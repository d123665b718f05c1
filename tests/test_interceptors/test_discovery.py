"""
Tests for NamespaceProbe and DiscoveryScheduler.
"""
import asyncio
import pytest
from types import SimpleNamespace

from pseudo_wallet.adapters import DispatcherHub, InMemoryStorage, KeypairStore
from pseudo_wallet.engine.consent import ConsentGate, StaticConsentSurface
from pseudo_wallet.interceptors import DiscoveryScheduler, NamespaceProbe, ProviderInterceptor
from pseudo_wallet.schemas.bases import Chain, Decision

from test_mocks import MockEthereumProvider, MockSolanaProvider


def make_interceptor(window):
    probe = NamespaceProbe(window)
    gate = ConsentGate(StaticConsentSurface(Decision.sandbox()))
    return ProviderInterceptor(probe, gate, DispatcherHub(KeypairStore(InMemoryStorage())))


def test_probe_lists_namespaces_and_skips_aliases():
    solana = MockSolanaProvider()
    phantom_eth = MockEthereumProvider()
    window = SimpleNamespace(
        solana=solana,
        ethereum=None,
        phantom=SimpleNamespace(solana=solana, ethereum=phantom_eth),
    )
    handles = NamespaceProbe(window).providers()

    assert [(h.source, h.chain) for h in handles] == [
        ("window.solana", Chain.SOLANA),
        ("window.phantom.ethereum", Chain.ETHEREUM),
    ]


def test_probe_accepts_mappings_and_announcements():
    eth = MockEthereumProvider()
    announced = MockEthereumProvider()
    probe = NamespaceProbe({"ethereum": eth})
    probe.announce_provider("ethereum", announced, name="Rabby")
    probe.announce_provider(Chain.ETHEREUM, eth, name="duplicate")

    handles = probe.providers()
    assert [h.provider for h in handles] == [eth, announced]
    assert handles[1].source == "announced:Rabby"


@pytest.mark.asyncio
async def test_scheduler_wraps_late_injected_provider():
    window = SimpleNamespace()
    scheduler = DiscoveryScheduler(make_interceptor(window), delays_ms=(0, 20, 40))
    scheduler.start()
    assert scheduler.running

    provider = MockEthereumProvider()
    await asyncio.sleep(0.005)
    window.ethereum = provider

    await asyncio.sleep(0.15)
    assert getattr(provider.request, "__pseudo_wrapped__", False)
    assert await provider.request({"method": "eth_requestAccounts"}) == [provider.selectedAddress]
    scheduler.stop()
    assert not scheduler.running


@pytest.mark.asyncio
async def test_scheduler_stop_cancels_pending_passes():
    provider = MockEthereumProvider()
    original = provider.request
    scheduler = DiscoveryScheduler(make_interceptor(SimpleNamespace(ethereum=provider)), delays_ms=(30,))
    scheduler.start()
    scheduler.stop()

    await asyncio.sleep(0.08)
    assert provider.request == original


@pytest.mark.asyncio
async def test_lifecycle_events_trigger_discovery():
    provider = MockSolanaProvider()
    scheduler = DiscoveryScheduler(make_interceptor(SimpleNamespace(solana=provider)), delays_ms=())

    assert scheduler.notify("click") is False
    assert scheduler.notify("DOMContentLoaded") is True
    await asyncio.sleep(0.01)
    assert getattr(provider.connect, "__pseudo_wrapped__", False)
