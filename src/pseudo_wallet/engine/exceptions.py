"""
Exception and Error Definitions Module

Defines the exception hierarchy for provider interception, sandbox signing
and keypair management. All exceptions inherit from BaseException for
unified exception handling.

Exception Hierarchy:
    BaseException (root)
    ├── UserRejectedError
    │   └── RequestSupersededError
    ├── UnsupportedMethodError
    ├── KeyStoreError
    │   ├── KeyPersistenceError
    │   └── KeyImportError
    ├── StructuredEncodingError
    ├── ProviderWrapError
    └── ConfigurationError

Errors raised by an original (non-sandbox) provider method are never wrapped
in this hierarchy; they reach the caller unchanged.
"""

from typing import Optional


class BaseException(Exception):
    """
    Root exception class for all project-specific exceptions.

    All custom exceptions should inherit from this class to enable
    unified exception handling and centralized error processing.
    """
    pass


class UserRejectedError(BaseException):
    """
    Raised when the consent surface declines an intercepted request.

    Mirrors the EIP-1193 ``4001 User Rejected Request`` error so pages that
    branch on ``code`` keep working. Never retried.

    Attributes:
        code: EIP-1193 provider error code (always 4001).
        chain: Chain the request was made on, when known.
        method: Intercepted method name, when known.
    """

    code = 4001
    default_reason = "User rejected the request"

    def __init__(
        self,
        reason: Optional[str] = None,
        *,
        chain: Optional[str] = None,
        method: Optional[str] = None,
    ) -> None:
        super().__init__(reason or self.default_reason)
        self.chain = chain
        self.method = method


class RequestSupersededError(UserRejectedError):
    """
    Raised on a pending request that was replaced by a newer intercepted call
    before the consent surface decided on it.
    """

    default_reason = "Request superseded by a newer request"


class UnsupportedMethodError(BaseException):
    """
    Raised when a sandbox dispatcher receives a method name it has no
    handler for. Fatal to that call only.

    Attributes:
        method: The unsupported method name.
        chain: Chain of the dispatcher that rejected it.
    """

    def __init__(self, method: str, chain: Optional[str] = None) -> None:
        where = f" on {chain}" if chain else ""
        super().__init__(f"Unsupported sandbox method{where}: {method}")
        self.method = method
        self.chain = chain


class KeyStoreError(BaseException):
    """
    Base exception for sandbox keypair storage errors.
    """
    pass


class KeyPersistenceError(KeyStoreError):
    """
    Raised when a keypair record cannot be written to storage.

    Non-fatal: the keypair store logs it and keeps using the in-memory key.
    The next session will generate a different sandbox address.
    """
    pass


class KeyImportError(KeyStoreError):
    """
    Raised when a persisted keypair record is corrupted or inconsistent.

    Recovered by regenerating the keypair, which replaces the user-visible
    sandbox address with a new one.
    """
    pass


class StructuredEncodingError(BaseException):
    """
    Raised when an EIP-712 document cannot be encoded.

    This includes scenarios such as:
    - Missing ``EIP712Domain`` or ``primaryType`` definitions
    - Values that do not fit the declared field type
    - Malformed hex strings for ``address``/``bytes`` fields

    The typed-data signer catches it and falls back to a JSON hash signature.
    """
    pass


class ProviderWrapError(BaseException):
    """
    Raised when a provider object cannot be patched (read-only attributes,
    no weak reference support).
    """
    pass


class ConfigurationError(BaseException):
    """
    Raised when configuration is missing or invalid.

    This includes scenarios such as:
    - Unparseable discovery delay lists
    - Invalid boolean or log level values
    - Malformed chain id strings
    """
    pass
