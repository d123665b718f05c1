from .discovery import (
    DiscoveryScheduler,
    EnvironmentProbe,
    LIFECYCLE_EVENTS,
    NamespaceProbe,
    ProviderHandle,
)
from .providers import (
    SENSITIVE_ETH_METHODS,
    SENSITIVE_SOLANA_METHODS,
    ProviderInterceptor,
    parse_request_args,
)

__all__ = [
    "DiscoveryScheduler",
    "EnvironmentProbe",
    "LIFECYCLE_EVENTS",
    "NamespaceProbe",
    "ProviderHandle",
    "SENSITIVE_ETH_METHODS",
    "SENSITIVE_SOLANA_METHODS",
    "ProviderInterceptor",
    "parse_request_args",
]
