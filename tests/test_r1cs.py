"""
Tests for the constraint-system prover, its proof encoding and the
inner-product argument.
"""

import random

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from blindbid.crs import keygen_bp_gens, keygen_pc_gens
from blindbid.errors import DecodingError, InvalidGeneratorsLengthError
from blindbid.fs_oracles import Transcript
from blindbid.groups import CURVE_ORDER, hash_to_point, random_scalar
from blindbid.inner_product import InnerProductProof, create_inner_product_proof
from blindbid.r1cs import (
    ONE,
    LinearCombination,
    Prover,
    R1CSProof,
    Variable,
    VariableKind,
    padded_length,
    proof_size,
)


@pytest.fixture(scope="module")
def pc_gens():
    return keygen_pc_gens()


@pytest.fixture(scope="module")
def bp_gens():
    return keygen_bp_gens(16)


def build_circuit(pc_gens, rng, a=3, b=4):
    """a · b = c with c committed, plus (a + b) · 1 = 7."""
    prover = Prover(pc_gens, Transcript(b"r1cs test"))
    _, a_var = prover.commit(a, random_scalar(rng))
    _, b_var = prover.commit(b, random_scalar(rng))
    _, c_var = prover.commit(a * b, random_scalar(rng))

    _, _, o = prover.multiply(a_var, b_var)
    prover.constrain(o - c_var)

    _, _, s = prover.multiply(a_var + b_var, 1)
    prover.constrain(s - 7)
    return prover


# ============================================================================
# Linear combinations
# ============================================================================

def test_linear_combination_arithmetic(pc_gens, rng):
    prover = Prover(pc_gens, Transcript(b"lc"))
    _, v = prover.commit(5, random_scalar(rng))

    assert prover.eval(v + 1) == 6
    assert prover.eval(1 - v) == (1 - 5) % CURVE_ORDER
    assert prover.eval(v * 3) == 15
    assert prover.eval(3 * v) == 15
    assert prover.eval(-v) == CURVE_ORDER - 5
    assert prover.eval(LinearCombination.of(2) + v - v) == 2
    assert prover.eval(LinearCombination.of(ONE)) == 1


def test_linear_combination_rejects_other_types():
    with pytest.raises(TypeError):
        LinearCombination.of("x")


def test_multiply_allocates_gate(pc_gens, rng):
    prover = Prover(pc_gens, Transcript(b"mul"))
    _, v = prover.commit(6, random_scalar(rng))

    l, r, o = prover.multiply(v, v + 1)
    assert l == Variable(VariableKind.MULTIPLIER_LEFT, 0)
    assert r == Variable(VariableKind.MULTIPLIER_RIGHT, 0)
    assert prover.eval(o) == 42
    assert prover.multipliers_len == 1
    # both input bindings are recorded
    assert len(prover.constraints) == 2
    assert all(prover.eval(lc) == 0 for lc in prover.constraints)


def test_satisfied_circuit_evaluates_to_zero(pc_gens, rng):
    prover = build_circuit(pc_gens, rng)
    assert all(prover.eval(lc) == 0 for lc in prover.constraints)

    broken = build_circuit(pc_gens, rng, a=2, b=4)
    assert not all(broken.eval(lc) == 0 for lc in broken.constraints)


# ============================================================================
# Proof shape
# ============================================================================

def test_padded_length():
    assert padded_length(0) == 1
    assert padded_length(1) == 1
    assert padded_length(5) == 8
    assert padded_length(1024) == 1024
    assert padded_length(1025) == 2048


def test_proof_size_formula():
    assert proof_size(1) == 1 + 11 * 32 + 2 * 32
    assert proof_size(2) == 1 + 11 * 32 + 4 * 32
    # 90 MiMC rounds over a four-entry list
    assert proof_size(8 * 90 + 4 + 2) == 1057


def test_proof_has_fixed_size(pc_gens, bp_gens, rng):
    prover = build_circuit(pc_gens, rng)
    proof = prover.prove(bp_gens, rng)
    data = proof.to_bytes()

    assert data[0] == 0
    assert len(data) == proof.serialized_size() == proof_size(2)
    assert len(proof.ipp_proof.L_vec) == 1


def test_proof_bytes_round_trip(pc_gens, bp_gens, rng):
    proof = build_circuit(pc_gens, rng).prove(bp_gens, rng)
    assert R1CSProof.from_bytes(proof.to_bytes()) == proof


def test_prove_is_deterministic_given_the_random_source(pc_gens, bp_gens):
    rng1 = random.Random(99)
    rng2 = random.Random(99)
    p1 = build_circuit(pc_gens, rng1).prove(bp_gens, rng1)
    p2 = build_circuit(pc_gens, rng2).prove(bp_gens, rng2)
    assert p1.to_bytes() == p2.to_bytes()

    rng3 = random.Random(100)
    p3 = build_circuit(pc_gens, rng3).prove(bp_gens, rng3)
    assert p3.to_bytes() != p1.to_bytes()


def test_prove_with_unsatisfied_constraints_still_returns_bytes(pc_gens, bp_gens, rng):
    proof = build_circuit(pc_gens, rng, a=2, b=4).prove(bp_gens, rng)
    assert len(proof.to_bytes()) == proof_size(2)


def test_prove_pads_to_power_of_two(pc_gens, bp_gens, rng):
    prover = Prover(pc_gens, Transcript(b"pad"))
    _, v = prover.commit(2, random_scalar(rng))
    for _ in range(5):
        prover.multiply(v, v)
    proof = prover.prove(bp_gens, rng)
    assert len(proof.ipp_proof.L_vec) == 3
    assert len(proof.to_bytes()) == proof_size(5)


def test_prove_needs_enough_generators(pc_gens, rng):
    prover = Prover(pc_gens, Transcript(b"small"))
    _, v = prover.commit(2, random_scalar(rng))
    for _ in range(3):
        prover.multiply(v, v)
    with pytest.raises(InvalidGeneratorsLengthError):
        prover.prove(keygen_bp_gens(2), rng)


# ============================================================================
# Proof decoding
# ============================================================================

def test_from_bytes_rejects_malformed(pc_gens, bp_gens, rng):
    data = build_circuit(pc_gens, rng).prove(bp_gens, rng).to_bytes()

    with pytest.raises(DecodingError):
        R1CSProof.from_bytes(b"")
    with pytest.raises(DecodingError):
        R1CSProof.from_bytes(b"\x07" + data[1:])
    with pytest.raises(DecodingError):
        R1CSProof.from_bytes(data[:-1])
    with pytest.raises(DecodingError):
        R1CSProof.from_bytes(data[:1 + 8 * 32])
    with pytest.raises(DecodingError):
        R1CSProof.from_bytes(data[:1] + b'\xff' * 32 + data[33:])


def test_from_bytes_rejects_two_phase_tag(pc_gens, bp_gens, rng):
    data = build_circuit(pc_gens, rng).prove(bp_gens, rng).to_bytes()
    # A_I1, A_O1, S1 repeated as second-phase commitments
    with pytest.raises(DecodingError):
        R1CSProof.from_bytes(b"\x01" + data[1:97] * 2 + data[97:])


# ============================================================================
# Inner-product argument
# ============================================================================

def test_inner_product_proof_shape(rng):
    n = 8
    gens = keygen_bp_gens(n)
    a = [random_scalar(rng) for _ in range(n)]
    b = [random_scalar(rng) for _ in range(n)]
    Q = hash_to_point(b"Q")

    proof = create_inner_product_proof(
        Transcript(b"ipp"), Q, [1] * n, [1] * n, gens['G_list'], gens['H_list'], a, b,
    )
    assert len(proof.L_vec) == len(proof.R_vec) == 3
    assert proof.serialized_size() == len(proof.to_bytes()) == (2 * 3 + 2) * 32
    assert InnerProductProof.from_bytes(proof.to_bytes()) == proof


def test_inner_product_length_one(rng):
    gens = keygen_bp_gens(1)
    proof = create_inner_product_proof(
        Transcript(b"ipp"), hash_to_point(b"Q"), [1], [1], gens['G_list'], gens['H_list'], [5], [6],
    )
    assert proof.L_vec == [] and (proof.a, proof.b) == (5, 6)


def test_inner_product_rejects_bad_lengths(rng):
    gens = keygen_bp_gens(4)
    with pytest.raises(ValueError):
        create_inner_product_proof(
            Transcript(b"ipp"), hash_to_point(b"Q"), [1] * 3, [1] * 3,
            gens['G_list'][:3], gens['H_list'][:3], [1] * 3, [1] * 3,
        )
    with pytest.raises(ValueError):
        create_inner_product_proof(
            Transcript(b"ipp"), hash_to_point(b"Q"), [1] * 4, [1] * 4,
            gens['G_list'], gens['H_list'], [1] * 4, [1] * 3,
        )


def test_inner_product_from_bytes_rejects_odd_length():
    with pytest.raises(DecodingError):
        InnerProductProof.from_bytes(b"\x00" * 33)
    with pytest.raises(DecodingError):
        InnerProductProof.from_bytes(b"\x00" * 96)
