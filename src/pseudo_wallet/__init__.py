from .schemas import Chain, Decision, Keypair
from .engine.exceptions import (
    RequestSupersededError,
    UnsupportedMethodError,
    UserRejectedError,
)
from .engine.consent import (
    CallbackConsentSurface,
    ConsentGate,
    ConsentSurface,
    PromptConsentSurface,
    StaticConsentSurface,
)
from .adapters import DispatcherHub, InMemoryStorage, JsonFileStorage, KeypairStore
from .interceptors import DiscoveryScheduler, NamespaceProbe, ProviderInterceptor
from .config import Settings, load_settings
from .sandbox import PseudoSandbox

__version__ = "0.1.0"

__all__ = [
    "Chain",
    "Decision",
    "Keypair",
    "RequestSupersededError",
    "UnsupportedMethodError",
    "UserRejectedError",
    "CallbackConsentSurface",
    "ConsentGate",
    "ConsentSurface",
    "PromptConsentSurface",
    "StaticConsentSurface",
    "DispatcherHub",
    "InMemoryStorage",
    "JsonFileStorage",
    "KeypairStore",
    "DiscoveryScheduler",
    "NamespaceProbe",
    "ProviderInterceptor",
    "Settings",
    "load_settings",
    "PseudoSandbox",
]
