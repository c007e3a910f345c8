"""
Blind-Bid Proof Generation
==========================

This module binds the commitment layer, the toggle encoder and the relation gadget
into one constraint-system proof, and exposes the proof wire format.

Operations:
-----------
- prove: witness + public list + toggle -> Proof
- encode_proof / decode_proof: Proof <-> proof stream (three records)
- decode_and_reprove: witness bundle stream -> freshly generated Proof

The witness-bundle path is not the inverse of encode_proof: only the witness
travels, and the proof is regenerated with new randomness on every call.
"""

import logging
import secrets
import time
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from .commit import commit_toggle, commit_witness
from .errors import DecodingError, GroupError, InvalidToggleError, ProvingError
from .fs_oracles import generate_cs_transcript
from .gadgets import CONSTANTS, proof_gadget
from .groups import CURVE_ORDER
from .r1cs import Prover, R1CSProof
from .serialization import (
    decode_proof_records,
    decode_witness_bundle,
    encode_proof_records,
    encode_witness_bundle,
)

logger = logging.getLogger(__name__)

NUM_COMMITMENTS = 4


@dataclass(frozen=True)
class Witness:
    """
    Private inputs of the blind-bid relation.

    y_inv is expected to be the inverse of y; the relation gadget enforces it,
    this type does not.
    """
    d: int
    k: int
    y: int
    y_inv: int
    q: int
    z_img: int
    seed: int

    def __post_init__(self):
        for name in ('d', 'k', 'y', 'y_inv', 'q', 'z_img', 'seed'):
            if not isinstance(getattr(self, name), int):
                raise TypeError(f"Witness.{name} must be an int scalar")

    def __repr__(self) -> str:
        # Never expose witness values
        return "Witness(<redacted>)"

    def scalars(self) -> List[int]:
        """d, k, y, y_inv, q, z_img, seed, reduced mod L."""
        return [v % CURVE_ORDER for v in (self.d, self.k, self.y, self.y_inv, self.q, self.z_img, self.seed)]

    def committed_values(self) -> List[int]:
        """The values that get Pedersen commitments, in commitment order."""
        return self.scalars()[:NUM_COMMITMENTS]


@dataclass(frozen=True)
class Proof:
    """
    A blind-bid proof.

    proof_bytes : opaque constraint-system proof
    commitments : commitments to d, k, y, y_inv
    toggle_commitments : one indicator commitment per public-list entry
    """
    proof_bytes: bytes
    commitments: Tuple[bytes, ...]
    toggle_commitments: Tuple[bytes, ...]

    def to_bytes(self) -> bytes:
        return encode_proof_records(self.proof_bytes, self.commitments, self.toggle_commitments)

    @classmethod
    def from_bytes(cls, data) -> 'Proof':
        proof_bytes, commitments, toggle_commitments = decode_proof_records(data)
        if len(commitments) != NUM_COMMITMENTS:
            raise DecodingError(f"Expected {NUM_COMMITMENTS} commitments, got {len(commitments)}")
        return cls(
            proof_bytes=proof_bytes,
            commitments=tuple(commitments),
            toggle_commitments=tuple(toggle_commitments),
        )

    def r1cs_proof(self) -> R1CSProof:
        """Parse the opaque proof bytes."""
        return R1CSProof.from_bytes(self.proof_bytes)


def prove(
    witness: Witness,
    public_list: Sequence[int],
    toggle: int,
    rng=None,
    gadget: Callable = proof_gadget,
    constants: Sequence[int] = None,
    capacity: int = None,
) -> Proof:
    """
    Generate a blind-bid proof.

    Algorithm:
    ----------
    1. Fresh generators and transcript for this session
    2. Commit d, k, y, y_inv with independent blindings
    3. Commit the one-hot indicator of toggle, one commitment per list entry
    4. Run the relation gadget over the committed variables and the public list
    5. Finalise the constraint system into proof bytes

    Parameters
    ----------
    witness : Witness
        Private inputs
    public_list : Sequence[int]
        Public candidate values; index is identity
    toggle : int
        Index of the selected entry, 0 <= toggle < len(public_list)
    rng : random.Random, optional
        Source of every blinding factor. A new secrets.SystemRandom() is used
        when omitted. Never share one seeded source between concurrent proofs.
    gadget : Callable, optional
        Relation builder with the signature of gadgets.proof_gadget
    constants : Sequence[int], optional
        Gadget round constants, defaults to gadgets.CONSTANTS
    capacity : int, optional
        Bulletproof generator capacity, defaults to config.gens_capacity

    Returns
    -------
    Proof

    Raises
    ------
    InvalidToggleError
        If toggle is not an index of public_list (checked before any commitment)
    ProvingError
        If the gadget or the constraint-system prover fails
    """
    if not isinstance(toggle, int) or not 0 <= toggle < len(public_list):
        raise InvalidToggleError(f"Toggle {toggle} out of range for public list of length {len(public_list)}")

    if rng is None:
        rng = secrets.SystemRandom()
    if constants is None:
        constants = CONSTANTS

    start = time.perf_counter()

    pc_gens, bp_gens, transcript = generate_cs_transcript(capacity=capacity)
    prover = Prover(pc_gens, transcript)

    try:
        commitments, variables = commit_witness(prover, witness.committed_values(), rng)
        toggle_commitments, toggle_vars = commit_toggle(prover, len(public_list), toggle, rng)

        # public list enters the circuit as constants
        list_constants = [int(x) % CURVE_ORDER for x in public_list]

        d_var, k_var, _, y_inv_var = variables
        _, _, _, _, q, z_img, seed = witness.scalars()
        gadget(prover, d_var, k_var, y_inv_var, q, z_img, seed, constants, toggle_vars, list_constants)

        r1cs_proof = prover.prove(bp_gens, rng)
    except GroupError as e:
        raise ProvingError(f"Group operation failed while proving: {e}") from e

    proof_bytes = r1cs_proof.to_bytes()
    logger.debug(
        "Blind-bid proof: %d multipliers, %d toggle commitments, %d proof bytes, %.3fs",
        prover.multipliers_len, len(toggle_commitments), len(proof_bytes), time.perf_counter() - start,
    )

    return Proof(
        proof_bytes=proof_bytes,
        commitments=tuple(commitments),
        toggle_commitments=tuple(toggle_commitments),
    )


def encode_proof(proof: Proof) -> bytes:
    """record(proof_bytes) || list(commitments) || list(toggle_commitments)"""
    return proof.to_bytes()


def decode_proof(data) -> Proof:
    """Inverse of encode_proof. No verification is performed."""
    return Proof.from_bytes(data)


def encode_witness(witness: Witness, public_list: Sequence[int], toggle: int) -> bytes:
    """Serialize a witness bundle for decode_and_reprove."""
    return encode_witness_bundle(witness.scalars(), public_list, toggle)


def decode_and_reprove(stream, rng=None, **kwargs) -> Proof:
    """
    Read a witness bundle and generate a fresh proof for it.

    Parameters
    ----------
    stream : bytes or binary stream
        Seven scalar records (d, k, y, y_inv, q, z_img, seed), a list of scalar
        records (the public list) and a u64 record (the toggle)
    rng : random.Random, optional
        Passed to prove()
    **kwargs
        Passed to prove()

    Raises
    ------
    UnexpectedEOFError
        If the stream ends before all nine records are read
    DecodingError
        If a record is malformed
    ProvingError
        As for prove(), including InvalidToggleError
    """
    scalars, public_list, toggle = decode_witness_bundle(stream)
    return prove(Witness(*scalars), public_list, toggle, rng=rng, **kwargs)
