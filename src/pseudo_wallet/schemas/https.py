"""
HTTP Request/Response Schema Models for the consent server

Pydantic models exchanged between a remote prompt (a browser overlay, a test
harness, a CLI) and ``ConsentServer``.
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


def jsonable_param(value: Any) -> Any:
    """Render a request parameter for display; non-JSON values become ``repr``."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "0x" + bytes(value).hex()
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return repr(value)
    return value


class PendingRequestView(BaseModel):
    """The request currently waiting on the prompt.

    Attributes:
        chain: Chain family of the intercepted provider.
        method: Intercepted method name.
        params: Call parameters, rendered for display.
        use_sandbox: Current state of the "use sandbox" toggle.
    """
    chain: str
    method: str
    params: List[Any] = Field(default_factory=list)
    use_sandbox: bool = False


class ApproveRequest(BaseModel):
    """Body of ``POST /pending/approve``; omitting ``use_sandbox`` keeps the toggle."""
    use_sandbox: Optional[bool] = None


class DecisionResponse(BaseModel):
    """Decision that settled the pending request."""
    approved: bool
    use_sandbox: bool = False


class SandboxAddressesResponse(BaseModel):
    """Sandbox address per chain."""
    addresses: Dict[str, str] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    error: str
