"""
Event-driven observer surface for the interception engine.

Every wrapped provider call publishes typed events (intercepted, rejected,
forwarded, handled in the sandbox). Observers register async hooks or
subscribers, the same way an extension background page would receive a copy
of each intercepted request. Dependencies are injected separately from the
event data.
"""

import asyncio
import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..utils import logger

# ==================== Base Event ====================

class BaseEvent(ABC):
    """Base class for all events in the system."""

    @abstractmethod
    def __repr__(self) -> str:
        """String representation of the event."""
        pass


# ==================== Provider Events ====================

class ProviderWrappedEvent(BaseModel, BaseEvent):
    """A discovery pass wrapped new methods on a provider."""
    chain: str
    source: str
    methods: List[str] = Field(default_factory=list)

    def __repr__(self) -> str:
        return f"ProviderWrappedEvent(source={self.source}, methods={self.methods})"


# ==================== Request Events ====================

class RequestInterceptedEvent(BaseModel, BaseEvent):
    """A sensitive call reached the consent gate."""
    chain: str
    method: str
    params: List[Any] = Field(default_factory=list)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def __repr__(self) -> str:
        return f"RequestInterceptedEvent(chain={self.chain}, method={self.method})"


class RequestRejectedEvent(BaseModel, BaseEvent):
    """The consent surface declined (or superseded) the call."""
    chain: str
    method: str
    reason: str

    def __repr__(self) -> str:
        return f"RequestRejectedEvent(method={self.method}, reason={self.reason})"


class RequestForwardedEvent(BaseModel, BaseEvent):
    """The call was passed to the original provider method."""
    chain: str
    method: str

    def __repr__(self) -> str:
        return f"RequestForwardedEvent(method={self.method})"


class SandboxHandledEvent(BaseModel, BaseEvent):
    """The call was answered by the sandbox signer."""
    chain: str
    method: str
    address: Optional[str] = None
    connected: bool = False

    def __repr__(self) -> str:
        return f"SandboxHandledEvent(method={self.method}, address={self.address})"


class SandboxFailedEvent(BaseModel, BaseEvent):
    """The sandbox could not answer the call."""
    chain: str
    method: str
    error_message: str

    def __repr__(self) -> str:
        return f"SandboxFailedEvent(method={self.method}, error={self.error_message})"


# ==================== Dependencies Container ====================

@dataclass(frozen=True)
class Dependencies:
    """Container for infrastructure dependencies (read-only)."""
    hub: Any = None
    settings: Any = None


# ==================== Event Bus ====================

EventHandlerFunc = Callable[[BaseEvent, Dependencies], Awaitable[Optional[Any]]]
EventHookFunc = Callable[[BaseEvent, Dependencies], Awaitable[None]]


class EventBus:
    """Event dispatcher for publishing and subscribing to events."""

    def __init__(self) -> None:
        """Initialize with empty subscribers and hooks."""
        self._subscribers: Dict[type, List[EventHandlerFunc]] = {}
        self._hooks: Dict[type, List[EventHookFunc]] = {}

    def subscribe(self, event_class: type, handler: EventHandlerFunc) -> None:
        """
        Register an async handler for the given event class.
        Multiple handlers can be subscribed to the same event type and run in parallel.

        Args:
            event_class: The event class to subscribe to.
            handler: The async handler function to call when the event is published.

        Raises:
            TypeError: If handler is not a coroutine function.
        """
        if not inspect.iscoroutinefunction(handler):
            raise TypeError(f"Handler must be a coroutine function, got {type(handler).__name__}")

        self._subscribers.setdefault(event_class, []).append(handler)

    def hook(self, event_class: type, hook_func: EventHookFunc) -> None:
        """
        Register a hook for the given event class.
        Hooks are executed before subscribers when the event is dispatched.

        Args:
            event_class: The event class to hook into.
            hook_func: The hook function to call when the event is published.
        """
        if not inspect.iscoroutinefunction(hook_func):
            raise TypeError(f"Handler must be a coroutine function, got {type(hook_func).__name__}")

        self._hooks.setdefault(event_class, []).append(hook_func)

    async def dispatch(self, event: BaseEvent, deps: Dependencies) -> AsyncGenerator[Optional[Any], None]:
        """
        Dispatch an event to all registered hooks and subscribers.
        Hooks run first, then all subscribers run in parallel.

        Args:
            event: The event to dispatch.
            deps: Dependencies container with injected services.

        Yields:
            Results from all subscribers as they complete. Yields nothing if no subscribers are registered.
        """
        hooks = self._hooks.get(type(event), [])
        await asyncio.gather(*(hook(event, deps) for hook in hooks))

        handlers = self._subscribers.get(type(event), [])
        if not handlers:
            return

        tasks = [handler(event, deps) for handler in handlers]
        for coro in asyncio.as_completed(tasks):
            yield await coro

    async def publish(self, event: BaseEvent, deps: Dependencies) -> List[Any]:
        """
        Dispatch ``event`` and collect subscriber results.

        Observer failures are logged and never reach the intercepted call.
        """
        results: List[Any] = []
        try:
            async for result in self.dispatch(event, deps):
                results.append(result)
        except Exception:
            logger.exception("Event observer failed for %r", event)
        return results
