from .bases import CanonicalModel, Chain, Decision, Keypair, KeypairRecord
from .https import (
    ApproveRequest,
    DecisionResponse,
    ErrorResponse,
    PendingRequestView,
    SandboxAddressesResponse,
)

__all__ = [
    "CanonicalModel",
    "Chain",
    "Decision",
    "Keypair",
    "KeypairRecord",
    "ApproveRequest",
    "DecisionResponse",
    "ErrorResponse",
    "PendingRequestView",
    "SandboxAddressesResponse",
]
