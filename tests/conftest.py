"""
Shared fixtures for the blind-bid test suite.
"""

import random
import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from blindbid.gadgets import mimc, mimc_constants
from blindbid.groups import CURVE_ORDER, scalar_inv
from blindbid.proofs import Witness


# Few MiMC rounds keep full proofs fast: 8 * 4 + N + 2 gates
SMALL_ROUNDS = 4
SMALL_CAPACITY = 64


@pytest.fixture(scope="session")
def small_constants():
    return mimc_constants(SMALL_ROUNDS)


@pytest.fixture
def rng():
    return random.Random(1234)


def build_witness(list_len, toggle, constants, d=7, k=3, seed=11):
    """
    A witness satisfying the blind-bid relation, and a public list holding its bid
    identifier at position toggle.
    """
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
    public_list = [(x + i + 1) % CURVE_ORDER for i in range(list_len)]
    public_list[toggle] = x
    return witness, public_list


@pytest.fixture(scope="session")
def witness_factory():
    return build_witness
