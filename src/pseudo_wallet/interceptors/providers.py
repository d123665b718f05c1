"""
Provider Interceptor

Replaces the sensitive methods of injected wallet providers with wrappers
that ask the consent gate first. Depending on the decision a call is
rejected, answered by the sandbox dispatcher, or passed to the original
method untouched.

Flow per wrapped call:
    wrapper ──▶ ConsentGate.request ──▶ Decision
        approved=False            → UserRejectedError (original never called)
        approved, use_sandbox     → DispatcherHub.dispatch → shaped result
        approved, not use_sandbox → original(*args, **kwargs)
"""

import functools
import inspect
import weakref
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple

from ..adapters.adapters_hub import DispatcherHub
from ..adapters.bases import ConnectionUpdate
from ..engine.consent import ConsentGate
from ..engine.events import (
    Dependencies,
    EventBus,
    ProviderWrappedEvent,
    RequestForwardedEvent,
    RequestInterceptedEvent,
    RequestRejectedEvent,
    SandboxFailedEvent,
    SandboxHandledEvent,
)
from ..engine.exceptions import ProviderWrapError, UserRejectedError
from ..schemas.bases import Chain
from ..utils import logger
from .discovery import EnvironmentProbe, ProviderHandle


SENSITIVE_ETH_METHODS = frozenset({
    "eth_requestAccounts",
    "wallet_requestPermissions",
    "eth_sendTransaction",
    "eth_signTransaction",
    "eth_sign",
    "personal_sign",
    "eth_signTypedData",
    "eth_signTypedData_v3",
    "eth_signTypedData_v4",
})

SENSITIVE_SOLANA_METHODS = frozenset({
    "connect",
    "signTransaction",
    "signAllTransactions",
    "signMessage",
    "signAndSendTransaction",
})

_TAGS = {Chain.SOLANA: "[SOL]", Chain.ETHEREUM: "[ETH]"}

WRAPPED_MARKER = "__pseudo_wrapped__"


def parse_request_args(args: Any) -> Tuple[str, List[Any]]:
    """Read ``method`` and ``params`` from an EIP-1193 request argument."""
    if isinstance(args, Mapping):
        method, params = args.get("method"), args.get("params")
    else:
        method, params = getattr(args, "method", None), getattr(args, "params", None)
    if params is None:
        params = []
    elif not isinstance(params, (list, tuple)):
        params = [params]
    return str(method), list(params)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class ProviderInterceptor:
    """
    Wraps providers reported by an ``EnvironmentProbe``.

    Wrapping state is kept per provider in a ``WeakKeyDictionary``, so a
    method is wrapped at most once and the interceptor never keeps a
    provider alive.

    Args:
        probe: Source of provider handles.
        gate: Consent gate every sensitive call goes through.
        hub: Sandbox dispatchers for approved sandbox calls.
        event_bus: Optional observer bus; events are published on it.
        deps: Dependencies handed to observers.
    """

    def __init__(
        self,
        probe: EnvironmentProbe,
        gate: ConsentGate,
        hub: DispatcherHub,
        event_bus: Optional[EventBus] = None,
        deps: Optional[Dependencies] = None,
    ) -> None:
        self.probe = probe
        self.gate = gate
        self.hub = hub
        self.event_bus = event_bus
        self.deps = deps or Dependencies(hub=hub)
        self._wrapped: "weakref.WeakKeyDictionary[Any, Set[str]]" = weakref.WeakKeyDictionary()

    def wrapped_methods(self, provider: Any) -> Set[str]:
        try:
            return set(self._wrapped.get(provider, ()))
        except TypeError:
            return set()

    async def discover(self) -> List[Tuple[str, str]]:
        """
        Wrap every unwrapped sensitive method on the providers present now.

        Returns:
            ``(source, method)`` pairs wrapped by this pass; empty when there
            was nothing new.
        """
        newly: List[Tuple[str, str]] = []
        for handle in self.probe.providers():
            try:
                methods = self.wrap(handle)
            except ProviderWrapError as e:
                logger.warning("Skipping provider at %s: %s", handle.source, e)
                continue
            if not methods:
                continue
            logger.info("%s Wrapped %s on %s", _TAGS[handle.chain], ", ".join(methods), handle.source)
            newly.extend((handle.source, method) for method in methods)
            await self._publish(ProviderWrappedEvent(chain=handle.chain.value, source=handle.source, methods=methods))
        return newly

    def wrap(self, handle: ProviderHandle) -> List[str]:
        """
        Wrap the sensitive methods of one provider.

        Raises:
            ProviderWrapError: If the provider cannot be tracked or patched.
        """
        provider = handle.provider
        try:
            done = self._wrapped.setdefault(provider, set())
        except TypeError as e:
            raise ProviderWrapError(f"{type(provider).__name__} cannot be tracked: {e}") from e

        if handle.chain == Chain.ETHEREUM:
            candidates = ["request"]
        else:
            candidates = sorted(SENSITIVE_SOLANA_METHODS)

        newly: List[str] = []
        for name in candidates:
            if name in done:
                continue
            original = getattr(provider, name, None)
            if not callable(original):
                continue
            if getattr(original, WRAPPED_MARKER, False):
                done.add(name)
                continue
            if handle.chain == Chain.ETHEREUM:
                wrapper = self._ethereum_wrapper(provider, original)
            else:
                wrapper = self._solana_wrapper(provider, name, original)
            try:
                setattr(provider, name, wrapper)
            except (AttributeError, TypeError) as e:
                raise ProviderWrapError(f"cannot replace {name}: {e}") from e
            done.add(name)
            newly.append(name)
        return newly

    # ==================== Wrappers ====================

    def _solana_wrapper(self, provider: Any, method: str, original: Callable) -> Callable:
        @functools.wraps(original)
        async def wrapper(*args, **kwargs):
            return await self._intercept(Chain.SOLANA, method, list(args), provider, original, args, kwargs)

        setattr(wrapper, WRAPPED_MARKER, True)
        return wrapper

    def _ethereum_wrapper(self, provider: Any, original: Callable) -> Callable:
        @functools.wraps(original)
        async def wrapper(*args, **kwargs):
            method, params = parse_request_args(args[0] if args else kwargs.get("args"))
            if method not in SENSITIVE_ETH_METHODS:
                return await _resolve(original(*args, **kwargs))
            return await self._intercept(Chain.ETHEREUM, method, params, provider, original, args, kwargs)

        setattr(wrapper, WRAPPED_MARKER, True)
        return wrapper

    async def _intercept(
        self,
        chain: Chain,
        method: str,
        params: List[Any],
        provider: Any,
        original: Callable,
        args: tuple,
        kwargs: Dict[str, Any],
    ) -> Any:
        tag = _TAGS[chain]
        logger.info("%s Intercepted %s", tag, method)
        await self._publish(RequestInterceptedEvent(chain=chain.value, method=method, params=params))

        try:
            decision = await self.gate.request(chain.value, method, params)
        except UserRejectedError as e:
            await self._publish(RequestRejectedEvent(chain=chain.value, method=method, reason=str(e)))
            raise

        if not decision.approved:
            logger.info("%s Rejected %s", tag, method)
            error = UserRejectedError(chain=chain.value, method=method)
            await self._publish(RequestRejectedEvent(chain=chain.value, method=method, reason=str(error)))
            raise error

        if not decision.use_sandbox:
            logger.info("%s Forwarding %s to the original provider", tag, method)
            await self._publish(RequestForwardedEvent(chain=chain.value, method=method))
            return await _resolve(original(*args, **kwargs))

        try:
            result = await self.hub.dispatch(chain, method, params)
        except Exception as e:
            logger.error("%s Sandbox failed on %s: %s", tag, method, e)
            await self._publish(SandboxFailedEvent(chain=chain.value, method=method, error_message=str(e)))
            raise

        if result.connection is not None:
            await self._apply_connection(chain, provider, result.connection)
        await self._publish(SandboxHandledEvent(
            chain=chain.value,
            method=method,
            address=result.connection.address if result.connection else None,
            connected=result.connection is not None,
        ))
        return result.value

    async def _apply_connection(self, chain: Chain, provider: Any, update: ConnectionUpdate) -> None:
        """
        Expose the sandbox account on the provider; failures are only logged.

        Solana providers get ``publicKey`` and a boolean ``isConnected``.
        EIP-1193 providers only get ``selectedAddress``; their ``isConnected``
        is a method and is left alone.
        """
        try:
            if chain == Chain.SOLANA:
                provider.publicKey = update.public_key
                if not callable(getattr(provider, "isConnected", None)):
                    provider.isConnected = True
            else:
                provider.selectedAddress = update.address
        except Exception as e:
            logger.warning("%s Could not update provider connection state: %s", _TAGS[chain], e)

        emit = getattr(provider, "emit", None)
        if not callable(emit):
            return
        try:
            await _resolve(emit(update.event, update.payload))
        except Exception as e:
            logger.warning("%s provider.emit(%r) failed: %s", _TAGS[chain], update.event, e)

    async def _publish(self, event) -> None:
        if self.event_bus is not None:
            await self.event_bus.publish(event, self.deps)
