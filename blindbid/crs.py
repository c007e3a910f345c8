"""
Public Parameter Generation
===========================

This module generates the public generators for Pedersen commitments and for the
Bulletproofs constraint-system prover.

- Pedersen generators: B (the Ed25519 basepoint) and B_blinding = H2P(B)
- Bulletproof generators: G_i = H2P("G" || i), H_i = H2P("H" || i) for i ∈ [0, capacity)

Every generator other than B comes from hash_to_point, so nobody knows a discrete
log relation between any two of them. Unlike a structured reference string there
is no trapdoor and nothing to delete after setup.
"""

import functools
import logging
import struct

from .config import config
from .errors import GroupError
from .groups import BASEPOINT, hash_to_point, is_valid_point, multiexp

logger = logging.getLogger(__name__)

DOMAIN_BP_GENS = b"blindbid.bulletproof_gens.v1"


def keygen_pc_gens() -> dict:
    """
    Generate the Pedersen commitment generators.

    Formula (Pedersen commitment):
    ------------------------------
    Com(v; r) := v · B + r · B_blinding

    Returns
    -------
    dict
        - 'B': the Ed25519 basepoint, carries the committed value
        - 'B_blinding': hash_to_point(B), carries the blinding factor
    """
    return {
        'B': BASEPOINT,
        'B_blinding': hash_to_point(BASEPOINT),
    }


@functools.lru_cache(maxsize=4)
def _bp_gens_lists(capacity: int) -> tuple:
    G_list = tuple(hash_to_point(DOMAIN_BP_GENS + b"G" + struct.pack('<Q', i)) for i in range(capacity))
    H_list = tuple(hash_to_point(DOMAIN_BP_GENS + b"H" + struct.pack('<Q', i)) for i in range(capacity))
    if not validate_bp_gens({'capacity': capacity, 'G_list': G_list, 'H_list': H_list}):
        raise GroupError(f"Bulletproof generators of capacity {capacity} are malformed")
    logger.debug("Generated %d Bulletproof generator pairs", capacity)
    return G_list, H_list


def keygen_bp_gens(capacity: int = None) -> dict:
    """
    Generate the Bulletproof generator vectors.

    Parameters
    ----------
    capacity : int, optional
        Number of generators per vector; bounds the padded number of
        multiplication gates a proof can have. Defaults to config.gens_capacity.

    Returns
    -------
    dict
        - 'capacity': the vector length
        - 'G_list': tuple of capacity generators G_0 .. G_{capacity-1}
        - 'H_list': tuple of capacity generators H_0 .. H_{capacity-1}

    Notes
    -----
    The lists are memoised per capacity. They are public and deterministic, so
    sharing them across proving sessions leaks nothing.
    They are checked with validate_bp_gens() once, when first generated.

    Raises
    ------
    ValueError
        If capacity is not positive
    GroupError
        If the generated lists fail validate_bp_gens()
    """
    if capacity is None:
        capacity = config.gens_capacity
    if capacity <= 0:
        raise ValueError(f"Generator capacity must be positive, got {capacity}")

    G_list, H_list = _bp_gens_lists(capacity)
    return {
        'capacity': capacity,
        'G_list': G_list,
        'H_list': H_list,
    }


def validate_bp_gens(gens: dict) -> bool:
    """
    Check that the Bulletproof generators are well-formed.

    Checks:
    - G_list and H_list both have 'capacity' elements
    - every element is a valid group element
    - no generator is repeated
    """
    n = gens['capacity']
    if len(gens['G_list']) != n or len(gens['H_list']) != n:
        return False

    all_gens = list(gens['G_list']) + list(gens['H_list'])
    if len(set(all_gens)) != len(all_gens):
        return False

    return all(is_valid_point(g) for g in all_gens)


def pedersen_commit(value: int, blinding: int, pc_gens: dict) -> bytes:
    """
    Pedersen commitment.

    Formula:
    --------
    Com(v; r) := v · B + r · B_blinding

    Parameters
    ----------
    value : int
        The committed scalar v
    blinding : int
        The blinding factor r
    pc_gens : dict
        Generators from keygen_pc_gens()

    Returns
    -------
    bytes
        The 32-byte compressed commitment
    """
    return multiexp([value, blinding], [pc_gens['B'], pc_gens['B_blinding']])
