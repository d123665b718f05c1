from .keystore import KEY_ALGORITHMS, KeypairStore
from .storages import InMemoryStorage, JsonFileStorage, KeyValueStorage
from .bases import ConnectionUpdate, DispatchResult, MethodDispatcher
from .adapters_hub import DispatcherHub
from .evm import EVMDispatcher, EthereumMethod
from .svm import SVMDispatcher, SolanaMethod, SolanaPublicKey

__all__ = [
    "KEY_ALGORITHMS",
    "KeypairStore",
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorage",
    "ConnectionUpdate",
    "DispatchResult",
    "MethodDispatcher",
    "DispatcherHub",
    "EVMDispatcher",
    "EthereumMethod",
    "SVMDispatcher",
    "SolanaMethod",
    "SolanaPublicKey",
]
