from .exceptions import (
    BaseException,
    ConfigurationError,
    KeyImportError,
    KeyPersistenceError,
    KeyStoreError,
    ProviderWrapError,
    RequestSupersededError,
    StructuredEncodingError,
    UnsupportedMethodError,
    UserRejectedError,
)

__all__ = [
    "BaseException",
    "ConfigurationError",
    "KeyImportError",
    "KeyPersistenceError",
    "KeyStoreError",
    "ProviderWrapError",
    "RequestSupersededError",
    "StructuredEncodingError",
    "UnsupportedMethodError",
    "UserRejectedError",
]
