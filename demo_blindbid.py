#!/usr/bin/env python3
"""
Blind-Bid Demo
==============

Walks through the request/response cycle of a blind bid:

1. The bidder derives a bid identifier x from its secrets (d, k) and a public seed
2. x is published in a list of candidate bids
3. The bidder sends a witness bundle; a fresh proof is generated from it
4. The proof is encoded for transport and decoded again
"""

import logging
import secrets
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from blindbid import decode_and_reprove, decode_proof, encode_proof, encode_witness
from blindbid.gadgets import CONSTANTS, mimc, multiplier_count
from blindbid.groups import CURVE_ORDER, scalar_inv
from blindbid.proofs import Witness


def build_witness(list_len, toggle, constants=CONSTANTS, d=None, k=None, seed=None):
    """
    Derive a witness satisfying the blind-bid relation and a public list of
    list_len bids holding its identifier at position toggle.
    """
    rng = secrets.SystemRandom()
    d = rng.randrange(1, CURVE_ORDER) if d is None else d
    k = rng.randrange(1, CURVE_ORDER) if k is None else k
    seed = rng.randrange(1, CURVE_ORDER) if seed is None else seed

    m = mimc(k, 0, constants)
    x = mimc(d, m, constants)
    y = mimc(seed, x, constants)
    y_inv = scalar_inv(y)

    witness = Witness(
        d=d,
        k=k,
        y=y,
        y_inv=y_inv,
        q=d * y_inv % CURVE_ORDER,
        z_img=mimc(seed, m, constants),
        seed=seed,
    )
    public_list = [rng.randrange(CURVE_ORDER) for _ in range(list_len)]
    public_list[toggle] = x
    return witness, public_list


def main():
    print("=" * 70)
    print("Blind-bid proof demo")
    print("=" * 70)
    print()

    # 1. Bid
    n, toggle = 8, 5
    print(f"[1] Deriving a bid and a public list of {n} bids...")
    witness, public_list = build_witness(n, toggle)
    print(f"✅ Bid placed at position {toggle} ({multiplier_count(len(CONSTANTS), n)} gates)")
    print()

    # 2. Request
    print("[2] Encoding the witness bundle...")
    bundle = encode_witness(witness, public_list, toggle)
    print(f"✅ Witness bundle: {len(bundle)} bytes")
    print()

    # 3. Prove
    print("[3] Proving from the bundle...")
    proof = decode_and_reprove(bundle)
    print(f"✅ Proof: {len(proof.proof_bytes)} bytes, "
          f"{len(proof.commitments)} commitments, {len(proof.toggle_commitments)} toggle commitments")
    print()

    # 4. Transport
    print("[4] Encoding and decoding the proof...")
    data = encode_proof(proof)
    assert decode_proof(data) == proof
    print(f"✅ Proof stream: {len(data)} bytes, decodes to the same proof")
    print()

    # 5. Re-proving never reproduces the same bytes
    print("[5] Proving the same bundle again...")
    again = decode_and_reprove(bundle)
    print(f"✅ Same commitments: {again.commitments == proof.commitments}, "
          f"same proof bytes: {again.proof_bytes == proof.proof_bytes}")


if __name__ == "__main__":
    if "-v" in sys.argv:
        logging.basicConfig(level=logging.DEBUG)
    main()
