from .apps import ConsentServer

__all__ = [
    "ConsentServer",
]
