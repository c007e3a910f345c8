"""
Blind-Bid Commit-and-Prove
==========================

Zero-knowledge proof generation for the blind-bid statement: a bidder commits to
private bid values and proves, without revealing them, that they satisfy the bid
relation and select exactly one entry of a public list.

Commitments are Pedersen commitments over the Ed25519 prime-order group (PyNaCl /
libsodium); the relation is proved with a Bulletproofs constraint-system proof.

Modules:
--------
- groups: Scalar field and group arithmetic
- crs: Pedersen and Bulletproof generators, Pedersen commitments
- fs_oracles: Fiat-Shamir transcript
- r1cs: Constraint-system prover and proof encoding
- inner_product: Inner-product argument
- gadgets: Blind-bid relation gadget (MiMC, one-of-many, score)
- commit: Commitment layer and toggle encoder
- proofs: prove, encode_proof, decode_proof, decode_and_reprove
- serialization: Length-prefixed record codec
- errors: Exception hierarchy
- config: Environment-driven configuration

Usage:
------
    from blindbid import Witness, prove, encode_proof, decode_proof

    witness = Witness(d=d, k=k, y=y, y_inv=y_inv, q=q, z_img=z_img, seed=seed)
    proof = prove(witness, public_list, toggle)
    data = encode_proof(proof)
    assert decode_proof(data) == proof
"""

__version__ = "0.1.0"

from .errors import (
    BlindBidError,
    CodecError,
    DecodingError,
    EncodingError,
    ProvingError,
    UnexpectedEOFError,
)
from .proofs import Proof, Witness, decode_and_reprove, decode_proof, encode_proof, encode_witness, prove

__all__ = [
    'Witness',
    'Proof',
    'prove',
    'encode_proof',
    'decode_proof',
    'encode_witness',
    'decode_and_reprove',
    'BlindBidError',
    'CodecError',
    'UnexpectedEOFError',
    'DecodingError',
    'EncodingError',
    'ProvingError',
]
