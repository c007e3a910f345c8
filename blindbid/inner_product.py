"""
Inner-Product Argument
======================

Proves knowledge of vectors a, b such that

    P = <a, G'> + <b, H'> + <a, b> · Q,    G'_i = g_i · G_i,  H'_i = h_i · H_i

in log2(n) rounds. Each round halves the vectors and publishes two points (L_j, R_j).
The per-generator factors g_i, h_i let the constraint-system prover use the
rescaled generators H'_i = y^{-i} · H_i without computing them.

Serialization:
--------------
L_0 || R_0 || ... || L_{k-1} || R_{k-1} || a || b,   k = log2(n)
"""

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .errors import DecodingError
from .fs_oracles import Transcript
from .groups import (
    CURVE_ORDER,
    POINT_SIZE,
    SCALAR_SIZE,
    is_valid_point,
    multiexp,
    scalar_from_bytes,
    scalar_inv,
    scalar_to_bytes,
)


@dataclass(frozen=True)
class InnerProductProof:
    L_vec: List[bytes]
    R_vec: List[bytes]
    a: int
    b: int

    def serialized_size(self) -> int:
        return (len(self.L_vec) * 2 + 2) * 32

    def to_bytes(self) -> bytes:
        buf = bytearray()
        for L, R in zip(self.L_vec, self.R_vec):
            buf.extend(L)
            buf.extend(R)
        buf.extend(scalar_to_bytes(self.a))
        buf.extend(scalar_to_bytes(self.b))
        return bytes(buf)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'InnerProductProof':
        if len(data) % 32 != 0:
            raise DecodingError("Inner-product proof length is not a multiple of 32")
        num_elements = len(data) // 32
        if num_elements < 2 or num_elements % 2 != 0:
            raise DecodingError(f"Inner-product proof has {num_elements} elements")
        lg_n = (num_elements - 2) // 2
        if lg_n >= 32:
            raise DecodingError("Inner-product proof is too large")

        L_vec, R_vec = [], []
        for i in range(lg_n):
            pos = 2 * i * 32
            L = data[pos:pos + POINT_SIZE]
            R = data[pos + 32:pos + 32 + POINT_SIZE]
            if not (is_valid_point(L) and is_valid_point(R)):
                raise DecodingError(f"Inner-product round {i} holds an invalid point")
            L_vec.append(L)
            R_vec.append(R)

        pos = 2 * lg_n * 32
        a = scalar_from_bytes(data[pos:pos + SCALAR_SIZE])
        b = scalar_from_bytes(data[pos + 32:pos + 32 + SCALAR_SIZE])
        return cls(L_vec=L_vec, R_vec=R_vec, a=a, b=b)


def create_inner_product_proof(
    transcript: Transcript,
    Q: bytes,
    G_factors: Sequence[int],
    H_factors: Sequence[int],
    G_vec: Sequence[bytes],
    H_vec: Sequence[bytes],
    a_vec: Sequence[int],
    b_vec: Sequence[int],
) -> InnerProductProof:
    """
    Create an inner-product proof.

    Parameters
    ----------
    transcript : Transcript
        The session transcript; receives every L_j, R_j and yields the round challenges
    Q : bytes
        Generator carrying the inner product <a, b>
    G_factors, H_factors : Sequence[int]
        Per-generator scalars applied to G_vec and H_vec
    G_vec, H_vec : Sequence[bytes]
        Generators, length n (a power of two)
    a_vec, b_vec : Sequence[int]
        Witness vectors, length n

    Returns
    -------
    InnerProductProof
    """
    n = len(G_vec)
    if not (len(H_vec) == n and len(a_vec) == n and len(b_vec) == n
            and len(G_factors) == n and len(H_factors) == n):
        raise ValueError("Inner-product inputs must all have the same length")
    if n == 0 or n & (n - 1):
        raise ValueError(f"Inner-product length must be a power of two, got {n}")

    transcript.innerproduct_domain_sep(n)

    G = list(G_vec)
    H = list(H_vec)
    a = np.array([int(x) for x in a_vec], dtype=object)
    b = np.array([int(x) for x in b_vec], dtype=object)
    g_f = np.array([int(x) for x in G_factors], dtype=object)
    h_f = np.array([int(x) for x in H_factors], dtype=object)

    L_vec, R_vec = [], []

    while n != 1:
        n //= 2
        a_L, a_R = a[:n], a[n:]
        b_L, b_R = b[:n], b[n:]
        G_L, G_R = G[:n], G[n:]
        H_L, H_R = H[:n], H[n:]

        c_L = int(a_L.dot(b_R)) % CURVE_ORDER
        c_R = int(a_R.dot(b_L)) % CURVE_ORDER

        # L = <a_L, G_R> + <b_R, H_L> + c_L · Q
        L = multiexp(
            list(a_L * g_f[n:]) + list(b_R * h_f[:n]) + [c_L],
            G_R + H_L + [Q],
        )
        # R = <a_R, G_L> + <b_L, H_R> + c_R · Q
        R = multiexp(
            list(a_R * g_f[:n]) + list(b_L * h_f[n:]) + [c_R],
            G_L + H_R + [Q],
        )
        L_vec.append(L)
        R_vec.append(R)

        transcript.append_point(b"L", L)
        transcript.append_point(b"R", R)

        u = transcript.challenge_scalar(b"u")
        u_inv = scalar_inv(u)

        a = (a_L * u + a_R * u_inv) % CURVE_ORDER
        b = (b_L * u_inv + b_R * u) % CURVE_ORDER
        G = [multiexp([u_inv * g_f[i], u * g_f[n + i]], [G_L[i], G_R[i]]) for i in range(n)]
        H = [multiexp([u * h_f[i], u_inv * h_f[n + i]], [H_L[i], H_R[i]]) for i in range(n)]

        # factors are folded into G and H after the first round
        g_f = np.ones(n, dtype=object)
        h_f = np.ones(n, dtype=object)

    return InnerProductProof(L_vec=L_vec, R_vec=R_vec, a=int(a[0]), b=int(b[0]))
