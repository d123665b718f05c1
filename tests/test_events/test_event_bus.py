"""
Test suite for the interception EventBus.
Tests: 1) Hooks run before subscribers 2) Results are collected 3) Observer failures stay contained
"""
import pytest

from pseudo_wallet.engine.events import (
    Dependencies,
    EventBus,
    RequestInterceptedEvent,
    RequestRejectedEvent,
)


@pytest.mark.asyncio
async def test_hooks_run_before_subscribers():
    order = []

    async def hook(event, deps):
        order.append("hook")

    async def subscriber(event, deps):
        order.append("subscriber")
        return event.method

    bus = EventBus()
    bus.subscribe(RequestInterceptedEvent, subscriber)
    bus.hook(RequestInterceptedEvent, hook)

    event = RequestInterceptedEvent(chain="ethereum", method="eth_sign", params=["0x0", "0x00"])
    results = await bus.publish(event, Dependencies())

    assert order == ["hook", "subscriber"]
    assert results == ["eth_sign"]


@pytest.mark.asyncio
async def test_dispatch_only_reaches_matching_event_type():
    calls = []

    async def subscriber(event, deps):
        calls.append(event)

    bus = EventBus()
    bus.subscribe(RequestRejectedEvent, subscriber)
    results = [r async for r in bus.dispatch(RequestInterceptedEvent(chain="solana", method="connect"), Dependencies())]

    assert results == []
    assert calls == []


@pytest.mark.asyncio
async def test_failing_observer_is_logged_not_raised(caplog):
    async def broken(event, deps):
        raise ValueError("observer bug")

    bus = EventBus()
    bus.hook(RequestRejectedEvent, broken)
    results = await bus.publish(
        RequestRejectedEvent(chain="solana", method="connect", reason="User rejected the request"),
        Dependencies(),
    )

    assert results == []
    assert "observer bug" in caplog.text


def test_handlers_must_be_coroutines():
    bus = EventBus()
    with pytest.raises(TypeError):
        bus.subscribe(RequestInterceptedEvent, lambda event, deps: None)
    with pytest.raises(TypeError):
        bus.hook(RequestInterceptedEvent, lambda event, deps: None)


def test_event_repr():
    event = RequestInterceptedEvent(chain="ethereum", method="personal_sign", params=["hi"])
    assert repr(event) == "RequestInterceptedEvent(chain=ethereum, method=personal_sign)"
