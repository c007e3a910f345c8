"""
Group and Scalar Field
======================

This module provides the prime-order group used for every commitment and proof
element, and the scalar field it is defined over.

- Scalar field Z_L with L = 2^252 + 27742317777372353535851937790883648493
- Group: the prime-order subgroup of Ed25519

Representation:
---------------
- Scalars are Python ints in [0, L). Canonical encoding: 32 bytes little-endian.
- Group elements are their 32-byte compressed encoding (bytes).
- The identity element is encoded as 0x01 || 0x00 * 31.

According to libsodium (exposed through nacl.bindings):
- crypto_core_ed25519_add / _sub accept any point on the curve, identity included
- crypto_scalarmult_ed25519_noclamp rejects the identity both as input and as result,
  so multiplication by zero and of the identity are handled here
- crypto_core_ed25519_is_valid_point only accepts points in the prime-order subgroup
"""

import hashlib
import struct
from typing import List, Sequence

import nacl.bindings
from nacl.exceptions import CryptoError

from .errors import DecodingError, GroupError


# Order of the prime-order subgroup (size of the scalar field)
CURVE_ORDER = 2**252 + 27742317777372353535851937790883648493

POINT_SIZE = 32
SCALAR_SIZE = 32

IDENTITY = b'\x01' + b'\x00' * 31

DOMAIN_HASH_TO_POINT = b"blindbid.hash_to_point.v1"
DOMAIN_HASH_TO_SCALAR = b"blindbid.hash_to_scalar.v1"


# ============================================================================
# SCALARS
# ============================================================================

def scalar_to_bytes(s: int) -> bytes:
    """Canonical 32-byte little-endian encoding of s mod L."""
    return (s % CURVE_ORDER).to_bytes(SCALAR_SIZE, 'little')


def scalar_from_bytes(data: bytes) -> int:
    """
    Decode a canonical scalar.

    Parameters
    ----------
    data : bytes
        Exactly 32 bytes, little-endian, value < L

    Returns
    -------
    int
        The scalar in [0, L)

    Raises
    ------
    DecodingError
        If the length is wrong or the value is not reduced mod L
    """
    if len(data) != SCALAR_SIZE:
        raise DecodingError(f"Scalar must be {SCALAR_SIZE} bytes, got {len(data)}")
    s = int.from_bytes(data, 'little')
    if s >= CURVE_ORDER:
        raise DecodingError("Scalar is not canonical (>= group order)")
    return s


def random_scalar(rng) -> int:
    """
    Sample a uniform scalar from the injected random source.

    Parameters
    ----------
    rng : random.Random
        Any object with getrandbits(k); secrets.SystemRandom() in production,
        a seeded random.Random in tests.

    Notes
    -----
    512 random bits are reduced mod L, so the bias is below 2^-259.
    """
    return rng.getrandbits(512) % CURVE_ORDER


def scalar_inv(s: int) -> int:
    """Multiplicative inverse mod L."""
    s %= CURVE_ORDER
    if s == 0:
        raise GroupError("Zero has no inverse")
    return pow(s, CURVE_ORDER - 2, CURVE_ORDER)


def hash_to_scalar(*parts: bytes) -> int:
    """Hash data to a scalar with SHA-512 and reduction mod L."""
    h = hashlib.sha512(DOMAIN_HASH_TO_SCALAR)
    for part in parts:
        h.update(struct.pack('<I', len(part)))
        h.update(part)
    return int.from_bytes(h.digest(), 'little') % CURVE_ORDER


# ============================================================================
# POINTS
# ============================================================================

def is_valid_point(point: bytes) -> bool:
    """Check that bytes encode an element of the prime-order subgroup."""
    if not isinstance(point, bytes) or len(point) != POINT_SIZE:
        return False
    if point == IDENTITY:
        return True
    return nacl.bindings.crypto_core_ed25519_is_valid_point(point)


def point_add(p: bytes, q: bytes) -> bytes:
    """Add two group elements."""
    if p == IDENTITY:
        return q
    if q == IDENTITY:
        return p
    try:
        return nacl.bindings.crypto_core_ed25519_add(p, q)
    except CryptoError as e:
        raise GroupError(f"Point addition failed: {e}") from e


def point_sub(p: bytes, q: bytes) -> bytes:
    """Subtract group elements: p - q."""
    if q == IDENTITY:
        return p
    try:
        return nacl.bindings.crypto_core_ed25519_sub(p, q)
    except CryptoError as e:
        raise GroupError(f"Point subtraction failed: {e}") from e


def point_mul(s: int, p: bytes) -> bytes:
    """Scalar multiplication s * P."""
    s %= CURVE_ORDER
    if s == 0 or p == IDENTITY:
        return IDENTITY
    try:
        if p == BASEPOINT:
            return nacl.bindings.crypto_scalarmult_ed25519_base_noclamp(scalar_to_bytes(s))
        return nacl.bindings.crypto_scalarmult_ed25519_noclamp(scalar_to_bytes(s), p)
    except CryptoError as e:
        raise GroupError(f"Scalar multiplication failed: {e}") from e


def multiexp(scalars: Sequence[int], points: Sequence[bytes]) -> bytes:
    """
    Compute the multi-exponentiation ∑ scalars[i] · points[i].

    Parameters
    ----------
    scalars : Sequence[int]
        Exponents in Z_L
    points : Sequence[bytes]
        Group elements

    Returns
    -------
    bytes
        The sum, IDENTITY for empty input

    Notes
    -----
    Zero scalars are skipped. No windowing or Pippenger; the product is computed
    term by term.
    """
    if len(scalars) != len(points):
        raise ValueError(f"scalars and points must have same length: {len(scalars)} != {len(points)}")

    result = IDENTITY
    for s, p in zip(scalars, points):
        s = int(s) % CURVE_ORDER
        if s == 0:
            continue
        result = point_add(result, point_mul(s, p))
    return result


def _double(p: bytes) -> bytes:
    return nacl.bindings.crypto_core_ed25519_add(p, p)


def hash_to_point(data: bytes) -> bytes:
    """
    Hash data to an element of the prime-order subgroup.

    Try-and-increment: each SHA-512 candidate is decoded as a curve point and the
    cofactor 8 is cleared with three doublings. Candidates that do not decode, or
    that land on the identity (small order), are skipped.

    Raises
    ------
    GroupError
        If no candidate decodes within 256 attempts
    """
    for counter in range(256):
        candidate = hashlib.sha512(DOMAIN_HASH_TO_POINT + data + struct.pack('<B', counter)).digest()[:POINT_SIZE]
        try:
            result = _double(_double(_double(candidate)))
        except CryptoError:
            continue
        if result != IDENTITY:
            return result

    raise GroupError("Hash to point failed after 256 attempts")


BASEPOINT = nacl.bindings.crypto_scalarmult_ed25519_base_noclamp(scalar_to_bytes(1))


def powers(base: int, n: int) -> List[int]:
    """[1, base, base^2, ..., base^{n-1}] mod L."""
    result = []
    acc = 1
    for _ in range(n):
        result.append(acc)
        acc = acc * base % CURVE_ORDER
    return result
