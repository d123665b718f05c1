"""
Consent Server - FastAPI surface for the consent prompt.

Lets a remote prompt see the intercepted request that is waiting and press
Continue or Reject on it, and shows the sandbox addresses.

Endpoints (409 when no request is pending):
    GET  /pending              current request
    POST /pending/approve      continue, optionally choosing the sandbox
    POST /pending/reject       reject
    GET  /sandbox/addresses    sandbox address per chain
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from ..adapters.adapters_hub import DispatcherHub
from ..engine.consent import PromptConsentSurface
from ..schemas.https import (
    ApproveRequest,
    DecisionResponse,
    ErrorResponse,
    PendingRequestView,
    SandboxAddressesResponse,
    jsonable_param,
)
from ..utils import logger


class ConsentServer(FastAPI):
    """FastAPI app driving a ``PromptConsentSurface``."""

    def __init__(
        self,
        surface: PromptConsentSurface,
        hub: DispatcherHub,
        **fastapi_kwargs
    ):
        """Initialize the consent server.

        Args:
            surface: Prompt surface the consent gate presents requests on
            hub: Dispatcher hub the sandbox answers with; its addresses are reported
            **fastapi_kwargs: FastAPI arguments (title, version, etc.)
        """
        self.surface = surface
        self.hub = hub
        super().__init__(**fastapi_kwargs)
        self._setup_routes()

    def _nothing_pending(self) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content=ErrorResponse(error="No request is pending").model_dump(),
        )

    def _setup_routes(self) -> None:
        @self.get("/pending")
        async def get_pending():
            current = self.surface.current
            if current is None:
                return self._nothing_pending()
            return PendingRequestView(
                chain=current.chain,
                method=current.method,
                params=[jsonable_param(p) for p in current.params],
                use_sandbox=self.surface.use_sandbox,
            ).model_dump(mode="json")

        @self.post("/pending/approve")
        async def approve_pending(body: Optional[ApproveRequest] = None):
            use_sandbox = body.use_sandbox if body is not None else None
            if not self.surface.approve(use_sandbox=use_sandbox):
                return self._nothing_pending()
            logger.info("Pending request approved over HTTP (sandbox=%s)", self.surface.use_sandbox)
            return DecisionResponse(approved=True, use_sandbox=self.surface.use_sandbox).model_dump()

        @self.post("/pending/reject")
        async def reject_pending():
            if not self.surface.reject():
                return self._nothing_pending()
            logger.info("Pending request rejected over HTTP")
            return DecisionResponse(approved=False).model_dump()

        @self.get("/sandbox/addresses")
        async def sandbox_addresses():
            return SandboxAddressesResponse(addresses=await self.hub.addresses()).model_dump()
