from __future__ import annotations

import re

ADDRESS_LENGTH = 20

_HEX_BODY = re.compile(r"^[0-9a-fA-F]*$")


class AddressError(ValueError):
    pass


def hex_to_bytes(value: str, *, purpose: str) -> bytes:
    """Decode a 0x-prefixed (or bare) hex string; odd lengths are left-padded."""

    if not isinstance(value, str):
        raise ValueError(f"{purpose}: expected hex string, got {type(value).__name__}")
    token = value.strip()
    if token[:2] in ("0x", "0X"):
        token = token[2:]
    if not _HEX_BODY.match(token):
        raise ValueError(f"{purpose}: not a hex string")
    if len(token) % 2:
        token = "0" + token
    return bytes.fromhex(token)


def bytes_to_hex(value: bytes) -> str:
    return "0x" + bytes(value).hex()


def fixed_bytes(value: str | bytes, *, length: int, purpose: str) -> bytes:
    raw = bytes(value) if isinstance(value, (bytes, bytearray)) else hex_to_bytes(value, purpose=purpose)
    if len(raw) != length:
        raise ValueError(f"{purpose}: expected {length} bytes, got {len(raw)}")
    return raw


def normalize_address(value: str | bytes) -> bytes:
    """Return the 20-byte form of an account address, left-padded.

    Accepts a hex string (any case, with or without 0x) or raw bytes of at most
    20 bytes.
    """

    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str):
        try:
            raw = hex_to_bytes(value, purpose="address")
        except ValueError as exc:
            raise AddressError(str(exc)) from exc
    else:
        raise AddressError(f"address: unsupported type {type(value).__name__}")
    if not raw:
        raise AddressError("address: empty")
    if len(raw) > ADDRESS_LENGTH:
        raise AddressError(f"address: {len(raw)} bytes exceeds {ADDRESS_LENGTH}")
    return raw.rjust(ADDRESS_LENGTH, b"\x00")


def address_hex(address: str | bytes) -> str:
    """Lower-case 0x form used in node request bodies."""

    return bytes_to_hex(normalize_address(address))
