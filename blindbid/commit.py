"""
Commitment Generation
=====================

This module turns private scalars into Pedersen commitments inside a proving
session:

- Witness commitments: one per bid value d, k, y, y_inv, in that order
- Toggle commitments: one boolean indicator per public-list position

Every commitment uses its own fresh blinding factor drawn from the injected
random source. Blinding factors are never reused or returned.

Each commitment is crs.pedersen_commit(v, r), computed by Prover.commit() so
the value also becomes a constraint-system variable.
"""

from typing import List, Sequence, Tuple

from .groups import random_scalar
from .r1cs import Prover, Variable


def commit_witness(prover: Prover, values: Sequence[int], rng) -> Tuple[List[bytes], List[Variable]]:
    """
    Commit to each witness value with an independent blinding factor.

    Parameters
    ----------
    prover : Prover
        The session prover; each commitment is appended to its transcript
    values : Sequence[int]
        Witness scalars, committed in the given order
    rng : random.Random
        Blinding source

    Returns
    -------
    Tuple[List[bytes], List[Variable]]
        (commitments, opening variables), index-aligned with values
    """
    commitments = []
    variables = []
    for v in values:
        V, var = prover.commit(v, random_scalar(rng))
        commitments.append(V)
        variables.append(var)
    return commitments, variables


def commit_toggle(prover: Prover, list_len: int, toggle: int, rng) -> Tuple[List[bytes], List[Variable]]:
    """
    Commit to the one-hot indicator vector of the selected public-list entry.

    Position i is committed to 1 if i == toggle, else 0:

        t_i = [i == toggle],   T_i = t_i · B + r_i · B_blinding

    The caller guarantees 0 <= toggle < list_len. With fresh r_i the commitment
    to 1 cannot be told apart from the commitments to 0.

    Returns
    -------
    Tuple[List[bytes], List[Variable]]
        (toggle commitments, indicator variables) in public-list order
    """
    return commit_witness(prover, [int(i == toggle) for i in range(list_len)], rng)
