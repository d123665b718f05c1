"""
Consent Gate

Single-slot synchronisation point between an intercepted provider call and
an external consent surface (the prompt the user answers).

State of the slot:

    empty ──request()──▶ pending ──surface decides──▶ empty
                           │
                           └──newer request()──▶ stale request rejected
                                                 with RequestSupersededError,
                                                 newer request pending

There is no timeout. A prompt the user never answers keeps its caller
suspended; consent is user-paced. A decision always settles exactly the
request it was presented for, never an older or newer one.
"""

import asyncio
import inspect
import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Union

from ..schemas.bases import Decision
from ..utils import logger
from .exceptions import RequestSupersededError


class ConsentSurface(ABC):
    """
    Interface of whatever asks the user about a request.

    ``present_request`` is awaited exactly once per pending request. It
    returns a ``Decision`` (or raises, which rejects the request with that
    error). The gate cancels the call when the request is superseded.
    """

    @abstractmethod
    async def present_request(self, chain: str, method: str, params: Optional[Sequence[Any]]) -> Decision:
        pass


@dataclass
class PendingRequest:
    """The one request currently waiting for a decision."""
    id: int
    chain: str
    method: str
    params: List[Any]
    future: asyncio.Future
    task: Optional[asyncio.Task] = field(default=None, repr=False)

    def done(self) -> bool:
        return self.future.done()


def _as_decision(value: Union[Decision, dict]) -> Decision:
    if isinstance(value, Decision):
        return value
    return Decision.model_validate(value)


class ConsentGate:
    """
    Bridges intercepted calls to a ``ConsentSurface``.

    Example::

        gate = ConsentGate(StaticConsentSurface(Decision.sandbox()))
        decision = await gate.request("ethereum", "personal_sign", ["hello"])
    """

    def __init__(self, surface: ConsentSurface) -> None:
        self._surface = surface
        self._pending: Optional[PendingRequest] = None
        self._ids = itertools.count(1)

    @property
    def surface(self) -> ConsentSurface:
        return self._surface

    @property
    def pending(self) -> Optional[PendingRequest]:
        if self._pending is not None and self._pending.done():
            return None
        return self._pending

    async def request(self, chain: str, method: str, params: Optional[Sequence[Any]] = None) -> Decision:
        """
        Present a request and wait for its decision.

        A request still pending when this is called is rejected with
        ``RequestSupersededError`` before the new one is presented.

        Returns:
            The surface's ``Decision`` for this request.

        Raises:
            RequestSupersededError: If a newer request replaced this one.
            Exception: Whatever the surface raised while presenting.
        """
        loop = asyncio.get_running_loop()
        pending = PendingRequest(
            id=next(self._ids),
            chain=chain,
            method=method,
            params=list(params or []),
            future=loop.create_future(),
        )

        stale = self._pending
        if stale is not None and not stale.done():
            self._supersede(stale)

        self._pending = pending
        pending.task = asyncio.create_task(self._present(pending))
        try:
            return await pending.future
        finally:
            if self._pending is pending:
                self._pending = None
            if not pending.task.done():
                pending.task.cancel()

    def _supersede(self, stale: PendingRequest) -> None:
        logger.info("Request #%d (%s) superseded by a newer request", stale.id, stale.method)
        stale.future.set_exception(RequestSupersededError(chain=stale.chain, method=stale.method))
        if stale.task is not None and not stale.task.done():
            stale.task.cancel()

    async def _present(self, pending: PendingRequest) -> None:
        try:
            decision = _as_decision(
                await self._surface.present_request(pending.chain, pending.method, pending.params)
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not pending.future.done():
                pending.future.set_exception(e)
            return
        if not pending.future.done():
            pending.future.set_result(decision)


# ==================== Consent Surfaces ====================

@dataclass
class PromptRequest:
    """A request shown on a ``PromptConsentSurface``."""
    chain: str
    method: str
    params: List[Any]
    future: asyncio.Future = field(repr=False)


class PromptConsentSurface(ConsentSurface):
    """
    Push-style surface: the request waits until someone calls ``approve`` or
    ``reject`` (the prompt's Continue/Reject buttons, an HTTP endpoint...).

    Args:
        use_sandbox: Initial state of the "use sandbox" toggle; ``approve()``
                     without an explicit choice uses it.
    """

    def __init__(self, use_sandbox: bool = False) -> None:
        self.use_sandbox = use_sandbox
        self._current: Optional[PromptRequest] = None
        self._presented = asyncio.Event()

    @property
    def current(self) -> Optional[PromptRequest]:
        if self._current is not None and self._current.future.done():
            return None
        return self._current

    async def present_request(self, chain: str, method: str, params: Optional[Sequence[Any]]) -> Decision:
        prompt = PromptRequest(
            chain=chain,
            method=method,
            params=list(params or []),
            future=asyncio.get_running_loop().create_future(),
        )
        self._current = prompt
        self._presented.set()
        logger.debug("Prompt shown for %s on %s", method, chain)
        try:
            return await prompt.future
        finally:
            if self._current is prompt:
                self._current = None

    async def wait_for_request(self) -> PromptRequest:
        """Wait until a request is on screen and return it."""
        while True:
            current = self.current
            if current is not None:
                return current
            self._presented.clear()
            await self._presented.wait()

    def approve(self, use_sandbox: Optional[bool] = None) -> bool:
        """
        Continue the current request.

        Args:
            use_sandbox: Overrides (and updates) the toggle when given.

        Returns:
            ``False`` when nothing is waiting.
        """
        if use_sandbox is not None:
            self.use_sandbox = use_sandbox
        return self._settle(Decision(approved=True, use_sandbox=self.use_sandbox))

    def reject(self) -> bool:
        """Reject the current request; ``False`` when nothing is waiting."""
        return self._settle(Decision.reject())

    def _settle(self, decision: Decision) -> bool:
        current = self.current
        if current is None:
            return False
        current.future.set_result(decision)
        return True


class StaticConsentSurface(ConsentSurface):
    """Answers every request with the same decision and records what it saw."""

    def __init__(self, decision: Decision) -> None:
        self.decision = decision
        self.requests: List[PromptRequest] = []

    async def present_request(self, chain: str, method: str, params: Optional[Sequence[Any]]) -> Decision:
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        future.set_result(self.decision)
        self.requests.append(PromptRequest(chain=chain, method=method, params=list(params or []), future=future))
        return self.decision


DecisionCallback = Callable[[str, str, List[Any]], Union[Decision, Awaitable[Decision]]]


class CallbackConsentSurface(ConsentSurface):
    """Delegates the decision to a plain or async callable."""

    def __init__(self, callback: DecisionCallback) -> None:
        self._callback = callback

    async def present_request(self, chain: str, method: str, params: Optional[Sequence[Any]]) -> Decision:
        result = self._callback(chain, method, list(params or []))
        if inspect.isawaitable(result):
            result = await result
        return _as_decision(result)
