"""
Multibase / multicodec decoding of Ed25519 public keys.

An Ed25519VerificationKey2020 ``publicKeyMultibase`` value is:
1. the 32-byte raw Ed25519 public key,
2. prefixed with the Ed25519 multicodec tag ``0xed 0x01``,
3. multibase encoded (normally base58btc, prefix ``z``).

https://w3c-ccg.github.io/di-eddsa-2020/#ed25519verificationkey2020
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

import base58

ED25519_PUB_CODEC = b"\xed\x01"
ED25519_PUBLIC_KEY_LENGTH = 32

_BASE64URL_RE = re.compile(r"[A-Za-z0-9_-]*")
_BASE16_RE = re.compile(r"(?:[0-9a-f]{2})*")


class MultikeyError(ValueError):
    """Raised when a multibase/multicodec value cannot be decoded."""


class KeyTypeError(MultikeyError):
    """Raised when the multicodec tag is not the Ed25519 public key tag."""


@dataclass(frozen=True)
class DecodedKey:
    """A multicodec-tagged public key split into tag and raw bytes."""

    codec: bytes
    raw_bytes: bytes


def decode_multibase(value: str) -> bytes:
    """Decode a multibase-encoded string.

    Args:
        value: Multibase string (``z`` base58btc, ``u`` base64url, ``f`` base16).

    Returns:
        The decoded bytes.

    Raises:
        MultikeyError: If the prefix is unsupported or the payload is malformed.
    """
    if not value:
        raise MultikeyError("Empty multibase value")

    prefix, payload = value[0], value[1:]
    try:
        if prefix == "z":
            return base58.b58decode(payload)
        if prefix == "u":
            if not _BASE64URL_RE.fullmatch(payload):
                raise ValueError("unexpected character in base64url payload")
            padding = -len(payload) % 4
            return base64.b64decode(
                payload + "=" * padding, altchars=b"-_", validate=True
            )
        if prefix == "f":
            if not _BASE16_RE.fullmatch(payload):
                raise ValueError("expected lowercase hexadecimal digits")
            return bytes.fromhex(payload)
    except (ValueError, binascii.Error) as e:
        raise MultikeyError(f"Malformed multibase value {value!r}: {e}") from e

    raise MultikeyError(f"Unsupported multibase prefix: {prefix!r}")


def decode_public_key(public_key_multibase: str) -> DecodedKey:
    """Decode a multibase Ed25519 public key to its raw 32 bytes.

    Raises:
        KeyTypeError: If the multicodec tag is not Ed25519.
        MultikeyError: If decoding fails or the key has the wrong length.
    """
    multicodec = decode_multibase(public_key_multibase)

    if multicodec[:2] != ED25519_PUB_CODEC:
        raise KeyTypeError(
            f"Unexpected multicodec tag 0x{multicodec[:2].hex()}, "
            "expected Ed25519 public key (0xed01)"
        )

    raw_bytes = multicodec[len(ED25519_PUB_CODEC):]
    if len(raw_bytes) != ED25519_PUBLIC_KEY_LENGTH:
        raise MultikeyError(
            f"Ed25519 public key must be {ED25519_PUBLIC_KEY_LENGTH} bytes, "
            f"got {len(raw_bytes)}"
        )

    return DecodedKey(codec=ED25519_PUB_CODEC, raw_bytes=raw_bytes)


def is_valid_public_key_multibase(value: str) -> bool:
    """Check whether a string is a multibase Ed25519 public key.

    Decode errors mean "not a key"; they are never raised.
    """
    try:
        decoded = decode_public_key(value)
    except MultikeyError:
        return False
    return len(decoded.raw_bytes) == ED25519_PUBLIC_KEY_LENGTH


def encode_public_key(raw_bytes: bytes) -> str:
    """Encode a raw Ed25519 public key as a base58btc multikey (``z6Mk...``)."""
    if len(raw_bytes) != ED25519_PUBLIC_KEY_LENGTH:
        raise MultikeyError(
            f"Ed25519 public key must be {ED25519_PUBLIC_KEY_LENGTH} bytes, "
            f"got {len(raw_bytes)}"
        )
    return "z" + base58.b58encode(ED25519_PUB_CODEC + raw_bytes).decode("ascii")
