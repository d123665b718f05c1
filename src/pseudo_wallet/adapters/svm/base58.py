"""
Base58 (Bitcoin alphabet) codec used for Solana-style addresses and
transaction signatures.

Encoding uses schoolbook long division over a little-endian digit buffer so
that the leading-zero handling matches what Solana wallets emit: one ``1`` per
leading zero byte, followed by the significant digits.
"""

BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_INDEX = {char: i for i, char in enumerate(BASE58_ALPHABET)}


def base58_encode(data: bytes) -> str:
    """
    Encode bytes as a base58 string.

    Args:
        data: Raw bytes (e.g. a 32-byte Ed25519 public key).

    Returns:
        Base58 text. An all-zero input yields only ``1`` characters, one per byte.
    """
    digits = []
    for byte in data:
        carry = byte
        for j in range(len(digits)):
            carry += digits[j] << 8
            digits[j] = carry % 58
            carry //= 58
        while carry > 0:
            digits.append(carry % 58)
            carry //= 58

    leading = 0
    for byte in data:
        if byte != 0:
            break
        leading += 1

    return BASE58_ALPHABET[0] * leading + "".join(BASE58_ALPHABET[d] for d in reversed(digits))


def base58_decode(text: str) -> bytes:
    """
    Decode a base58 string produced by ``base58_encode``.

    Raises:
        ValueError: If ``text`` contains a character outside the alphabet.
    """
    out = []
    for char in text:
        if char not in _INDEX:
            raise ValueError(f"Invalid base58 character: {char!r}")
        carry = _INDEX[char]
        for j in range(len(out)):
            carry += out[j] * 58
            out[j] = carry & 0xFF
            carry >>= 8
        while carry > 0:
            out.append(carry & 0xFF)
            carry >>= 8

    leading = 0
    for char in text:
        if char != BASE58_ALPHABET[0]:
            break
        leading += 1

    return bytes(leading) + bytes(reversed(out))
