"""
Blind-Bid Relation Gadget
=========================

Constraint gadgets asserting the blind-bid statement over a constraint-system
builder (anything with multiply() and constrain(), e.g. r1cs.Prover).

Relation:
---------
    m     = MiMC(k, 0)
    x     = MiMC(d, m)              the bid identifier
    x     = ∑ t_i · list_i          with t one-hot (exactly one public entry selected)
    y     = MiMC(seed, x)
    z_img = MiMC(seed, m)
    1     = y · y_inv
    q     = d · y_inv               the score

MiMC round:  x ← (x + key + c_i)^3,  output x + key.

Gate count: 8 · rounds (four MiMC hashes) + len(list) (booleanity) + 2 (score).
"""

import functools
import struct
from typing import List, Sequence

from .config import config
from .errors import GadgetError
from .groups import CURVE_ORDER, hash_to_scalar
from .r1cs import LinearCombination

DOMAIN_MIMC = b"blindbid.mimc.v1"


@functools.lru_cache(maxsize=8)
def mimc_constants(rounds: int) -> tuple:
    """Round constants c_i = H(DOMAIN_MIMC || i) mod L, for i ∈ [0, rounds)."""
    return tuple(hash_to_scalar(DOMAIN_MIMC, struct.pack('<Q', i)) for i in range(rounds))


CONSTANTS = mimc_constants(config.mimc_rounds)


def mimc(left: int, right: int, constants: Sequence[int] = CONSTANTS) -> int:
    """MiMC evaluated on plain scalars, matching mimc_hash()."""
    x = left % CURVE_ORDER
    for c in constants:
        x = pow(x + right + c, 3, CURVE_ORDER)
    return (x + right) % CURVE_ORDER


def mimc_hash(cs, left, right, constants: Sequence[int]) -> LinearCombination:
    """
    MiMC inside the constraint system.

    Each round costs two multiplication gates: a^2 and a^2 · a.
    """
    x = LinearCombination.of(left)
    key = LinearCombination.of(right)

    for c in constants:
        a = x + key + c
        a_var, _, a_2 = cs.multiply(a, a)
        _, _, a_3 = cs.multiply(a_2, a_var)
        x = LinearCombination.of(a_3)

    return x + key


def one_of_many_gadget(cs, x, toggle: List, items: Sequence[int]):
    """
    Assert that toggle is a one-hot vector selecting an entry of items equal to x.

    Parameters
    ----------
    cs : constraint-system builder
    x : LinearCombination
        The value that must appear in items
    toggle : List[Variable]
        Committed indicator variables, one per entry of items
    items : Sequence[int]
        The public list, as constants

    Raises
    ------
    GadgetError
        If toggle and items differ in length or are empty
    """
    if len(toggle) != len(items):
        raise GadgetError(f"Toggle has {len(toggle)} entries, public list has {len(items)}")
    if not toggle:
        raise GadgetError("Public list is empty")

    total = LinearCombination()
    selected = LinearCombination()
    for t, item in zip(toggle, items):
        # t · (1 - t) = 0
        _, _, o = cs.multiply(t, 1 - t)
        cs.constrain(o)
        total = total + t
        selected = selected + t * (int(item) % CURVE_ORDER)

    cs.constrain(total - 1)
    cs.constrain(selected - x)


def score_gadget(cs, d, y, y_inv, q):
    """Assert y · y_inv = 1 and q = d · y_inv."""
    _, _, one = cs.multiply(y, y_inv)
    cs.constrain(one - 1)

    _, _, score = cs.multiply(d, y_inv)
    cs.constrain(q - score)


def proof_gadget(cs, d, k, y_inv, q, z_img, seed, constants: Sequence[int], toggle: List, pub_list: Sequence[int]):
    """
    Build the full blind-bid relation.

    d, k and y_inv are committed variables; q, z_img and seed are public
    constants; toggle holds the committed indicator variables for pub_list.
    """
    m = mimc_hash(cs, k, 0, constants)
    x = mimc_hash(cs, d, m, constants)

    one_of_many_gadget(cs, x, toggle, pub_list)

    y = mimc_hash(cs, seed, x, constants)
    z = mimc_hash(cs, seed, m, constants)
    cs.constrain(z_img - z)

    score_gadget(cs, d, y, y_inv, q)


def multiplier_count(rounds: int, list_len: int) -> int:
    """Number of gates proof_gadget allocates."""
    return 8 * rounds + list_len + 2
