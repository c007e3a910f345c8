"""
Tests that generated proofs satisfy the verifier's equations.

The challenges are recorded from the transcript while proving, and both checks
of a Bulletproofs R1CS verifier are evaluated against them:

- the polynomial check on t(x) and the T commitments
- the inner-product check on the folded generators
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from blindbid.crs import keygen_bp_gens, keygen_pc_gens
from blindbid.fs_oracles import Transcript
from blindbid.gadgets import proof_gadget
from blindbid.groups import CURVE_ORDER, multiexp, point_mul, powers, random_scalar, scalar_inv
from blindbid.proofs import prove
from blindbid.r1cs import Prover, R1CSProof, VariableKind, padded_length

SMALL_CAPACITY = 64


@pytest.fixture(scope="module")
def pc_gens():
    return keygen_pc_gens()


@pytest.fixture(scope="module")
def bp_gens():
    return keygen_bp_gens(16)


@pytest.fixture
def challenges(monkeypatch):
    """Every (label, challenge) drawn from a transcript during the test, in order."""
    recorded = []
    challenge_scalar = Transcript.challenge_scalar

    def recording(self, label):
        c = challenge_scalar(self, label)
        recorded.append((label, c))
        return c

    monkeypatch.setattr(Transcript, 'challenge_scalar', recording)
    return recorded


def build_circuit(pc_gens, rng, gates, a=3, b=4):
    """a · b = c with c committed, (a + b) · 1 = 7, then a · a = 9 up to the gate count."""
    prover = Prover(pc_gens, Transcript(b"verification test"))
    commitments = []
    V, a_var = prover.commit(a, random_scalar(rng))
    commitments.append(V)
    V, b_var = prover.commit(b, random_scalar(rng))
    commitments.append(V)
    V, c_var = prover.commit(a * b, random_scalar(rng))
    commitments.append(V)

    _, _, o = prover.multiply(a_var, b_var)
    prover.constrain(o - c_var)
    if gates >= 2:
        _, _, s = prover.multiply(a_var + b_var, 1)
        prover.constrain(s - 7)
    for _ in range(gates - 2):
        _, _, sq = prover.multiply(a_var, a_var)
        prover.constrain(sq - 9)
    return prover, commitments


def constant_weight(constraints, z):
    """wc = -∑_q z^{q+1} · (constant term of constraint q)"""
    wc = 0
    exp_z = z
    for lc in constraints:
        for var, coeff in lc.terms:
            if var.kind is VariableKind.ONE:
                wc -= exp_z * coeff
        exp_z = exp_z * z % CURVE_ORDER
    return wc % CURVE_ORDER


def check_proof(proof, prover, commitments, challenges, bp_gens):
    """
    Evaluate the two verification equations of a single-phase R1CS proof.

    Returns
    -------
    (bool, bool)
        (polynomial check, inner-product check)
    """
    n = prover.multipliers_len
    padded_n = padded_length(n)
    lg_n = padded_n.bit_length() - 1
    assert [label for label, _ in challenges] == [b"y", b"z", b"u", b"x", b"w"] + [b"u"] * lg_n

    y, z, u, x, w = [c for _, c in challenges[:5]]
    ipp_challenges = [c for _, c in challenges[5:]]

    B = prover.pc_gens['B']
    B_blinding = prover.pc_gens['B_blinding']

    wL, wR, wO, wV = prover.flattened_constraints(z)
    wc = constant_weight(prover.constraints, z)

    exp_y_inv = powers(scalar_inv(y), padded_n)
    delta = sum(exp_y_inv[i] * wR[i] * wL[i] for i in range(n)) % CURVE_ORDER
    xp = powers(x, 7)

    # t_x·B + t_x_blinding·B_blinding = x²(wc + δ)·B + ∑ x²·wV_j·V_j + ∑ x^k·T_k
    t_lhs = multiexp([proof.t_x, proof.t_x_blinding], [B, B_blinding])
    t_rhs = multiexp(
        [xp[2] * (wc + delta)] + [xp[2] * w_j for w_j in wV] + [xp[1], xp[3], xp[4], xp[5], xp[6]],
        [B] + list(commitments) + [proof.T_1, proof.T_3, proof.T_4, proof.T_5, proof.T_6],
    )

    G = list(bp_gens['G_list'][:padded_n])
    H = list(bp_gens['H_list'][:padded_n])
    g_f = [1] * n + [u] * (padded_n - n)
    h_f = [exp_y_inv[i] * g_f[i] % CURVE_ORDER for i in range(padded_n)]
    Q = point_mul(w, B)
    ipp = proof.ipp_proof

    # P = x·A_I + x²·A_O + x³·S − e_blinding·B_blinding + t_x·Q + <l, G'> and <r, H'> terms
    scalars = [xp[1], xp[2], xp[3], -proof.e_blinding, proof.t_x]
    points = [proof.A_I1, proof.A_O1, proof.S1, B_blinding, Q]
    for i in range(n):
        scalars += [x * exp_y_inv[i] * wR[i], exp_y_inv[i] * (x * wL[i] + wO[i]) - 1]
        points += [G[i], H[i]]
    # padding gates: r_i = -y^i against u · y^{-i} · H_i
    for i in range(n, padded_n):
        scalars.append(-u)
        points.append(H[i])
    for u_j, L_j, R_j in zip(ipp_challenges, ipp.L_vec, ipp.R_vec):
        u_j_inv = scalar_inv(u_j)
        scalars += [u_j * u_j, u_j_inv * u_j_inv]
        points += [L_j, R_j]

    s = []
    for i in range(padded_n):
        s_i = 1
        for j, u_j in enumerate(ipp_challenges):
            bit = (i >> (lg_n - 1 - j)) & 1
            s_i = s_i * (u_j if bit else scalar_inv(u_j)) % CURVE_ORDER
        s.append(s_i)

    ipp_lhs = multiexp(scalars, points)
    ipp_rhs = multiexp(
        [ipp.a * s[i] * g_f[i] for i in range(padded_n)]
        + [ipp.b * scalar_inv(s[i]) * h_f[i] for i in range(padded_n)]
        + [ipp.a * ipp.b],
        G + H + [Q],
    )

    return t_lhs == t_rhs, ipp_lhs == ipp_rhs


# ============================================================================
# Constraint-system proofs
# ============================================================================

@pytest.mark.parametrize("gates", [1, 2, 3, 4, 5])
def test_satisfied_circuit_verifies(pc_gens, bp_gens, rng, challenges, gates):
    prover, commitments = build_circuit(pc_gens, rng, gates)
    assert all(prover.eval(lc) == 0 for lc in prover.constraints)

    proof = prover.prove(bp_gens, rng)
    assert check_proof(proof, prover, commitments, challenges, bp_gens) == (True, True)


def test_decoded_proof_verifies(pc_gens, bp_gens, rng, challenges):
    prover, commitments = build_circuit(pc_gens, rng, 3)
    proof = R1CSProof.from_bytes(prover.prove(bp_gens, rng).to_bytes())
    assert check_proof(proof, prover, commitments, challenges, bp_gens) == (True, True)


def test_unsatisfied_circuit_fails_polynomial_check(pc_gens, bp_gens, rng, challenges):
    prover, commitments = build_circuit(pc_gens, rng, 2, a=2, b=4)
    proof = prover.prove(bp_gens, rng)

    t_ok, ipp_ok = check_proof(proof, prover, commitments, challenges, bp_gens)
    assert not t_ok
    # l and r are still consistent with the committed vectors
    assert ipp_ok


def test_altered_t_x_fails_both_checks(pc_gens, bp_gens, rng, challenges):
    prover, commitments = build_circuit(pc_gens, rng, 3)
    proof = prover.prove(bp_gens, rng)
    altered = R1CSProof(**{**proof.__dict__, 't_x': (proof.t_x + 1) % CURVE_ORDER})

    assert check_proof(altered, prover, commitments, challenges, bp_gens) == (False, False)


# ============================================================================
# Blind-bid proofs
# ============================================================================

def prove_recording(witness, public_list, toggle, constants, rng):
    """prove() that also hands back the constraint system it built."""
    systems = []

    def recording_gadget(cs, *args):
        systems.append(cs)
        return proof_gadget(cs, *args)

    proof = prove(
        witness, public_list, toggle, rng=rng,
        gadget=recording_gadget, constants=constants, capacity=SMALL_CAPACITY,
    )
    return proof, systems[0]


def test_blind_bid_proof_verifies(small_constants, witness_factory, rng, challenges):
    witness, public_list = witness_factory(3, 1, small_constants)
    proof, cs = prove_recording(witness, public_list, 1, small_constants, rng)

    # 8 · 4 + 3 + 2 = 37 gates, padded to 64
    assert cs.multipliers_len == 37
    commitments = list(proof.commitments) + list(proof.toggle_commitments)
    result = check_proof(proof.r1cs_proof(), cs, commitments, challenges, keygen_bp_gens(SMALL_CAPACITY))
    assert result == (True, True)


def test_blind_bid_proof_for_absent_bid_fails(small_constants, witness_factory, rng, challenges):
    witness, public_list = witness_factory(3, 1, small_constants)
    public_list[1] = (public_list[1] + 7) % CURVE_ORDER
    proof, cs = prove_recording(witness, public_list, 1, small_constants, rng)

    commitments = list(proof.commitments) + list(proof.toggle_commitments)
    t_ok, _ = check_proof(proof.r1cs_proof(), cs, commitments, challenges, keygen_bp_gens(SMALL_CAPACITY))
    assert not t_ok
