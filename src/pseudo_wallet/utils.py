import logging
from typing import Optional, Union


logger = logging.getLogger("pseudo_wallet")


def setup_logging(level: Union[str, int] = "INFO", fmt: Optional[str] = None) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Safe to call more than once; the handler is only added the first time.
    """
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)
    if not any(getattr(h, "_pseudo_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt or "%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        handler._pseudo_handler = True
        logger.addHandler(handler)
    return logger


def bytes_to_hex(data: bytes, prefix: bool = True) -> str:
    return ("0x" if prefix else "") + bytes(data).hex()


def hex_to_bytes(hexstr: str) -> bytes:
    """Decode a hex string with or without ``0x``; odd lengths are left-padded."""
    clean = hexstr[2:] if hexstr[:2].lower() == "0x" else hexstr
    if len(clean) % 2:
        clean = "0" + clean
    return bytes.fromhex(clean)
