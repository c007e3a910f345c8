"""
Constraint-System Prover
========================

This module implements a Bulletproofs rank-1 constraint-system prover over the
Ed25519 prime-order group.

Constraint System:
------------------
- Committed variables v_j, each published as V_j = v_j · B + ṽ_j · B_blinding
- Multiplication gates a_L[i] · a_R[i] = a_O[i]
- Linear constraints ∑ (coeff · variable) + constant = 0

Only the single-phase protocol is implemented (no randomized constraints).
Verification lives outside this package.

Padding:
--------
The n gates are padded to the next power of two with zero gates. The
inner-product argument runs over G_i scaled by g_i and H_i scaled by h_i, where

    g_i = 1,              h_i = y^{-i}          for i < n
    g_i = u,              h_i = u · y^{-i}      for padding gates

and u is the challenge drawn after the T commitments. A verifier must scale the
same generators.

Proof Serialization:
--------------------
tag || A_I1 || A_O1 || S1 || T_1 || T_3 || T_4 || T_5 || T_6
    || t_x || t_x_blinding || e_blinding || inner-product proof

tag is always 0x00 (one-phase commitments). Other tags are rejected on decoding.
"""

import enum
import logging
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from .crs import pedersen_commit
from .errors import DecodingError, InvalidGeneratorsLengthError
from .fs_oracles import Transcript
from .groups import (
    CURVE_ORDER,
    IDENTITY,
    is_valid_point,
    multiexp,
    point_mul,
    powers,
    random_scalar,
    scalar_from_bytes,
    scalar_inv,
    scalar_to_bytes,
)
from .inner_product import InnerProductProof, create_inner_product_proof

logger = logging.getLogger(__name__)

ONE_PHASE_COMMITMENTS = 0


# ============================================================================
# VARIABLES AND LINEAR COMBINATIONS
# ============================================================================

class VariableKind(enum.Enum):
    COMMITTED = "committed"
    MULTIPLIER_LEFT = "multiplier_left"
    MULTIPLIER_RIGHT = "multiplier_right"
    MULTIPLIER_OUTPUT = "multiplier_output"
    ONE = "one"


@dataclass(frozen=True)
class Variable:
    """A wire of the constraint system."""
    kind: VariableKind
    index: int = 0

    def __add__(self, other):
        return LinearCombination.of(self) + other

    def __radd__(self, other):
        return LinearCombination.of(other) + self

    def __sub__(self, other):
        return LinearCombination.of(self) - other

    def __rsub__(self, other):
        return LinearCombination.of(other) - self

    def __neg__(self):
        return -LinearCombination.of(self)

    def __mul__(self, scalar: int):
        return LinearCombination.of(self) * scalar

    __rmul__ = __mul__


ONE = Variable(VariableKind.ONE)


class LinearCombination:
    """∑ coeff_i · var_i, kept as an unreduced list of terms."""

    def __init__(self, terms: List[Tuple[Variable, int]] = None):
        self.terms = list(terms) if terms else []

    @classmethod
    def of(cls, value) -> 'LinearCombination':
        if isinstance(value, LinearCombination):
            return value
        if isinstance(value, Variable):
            return cls([(value, 1)])
        if isinstance(value, int):
            return cls([(ONE, value % CURVE_ORDER)])
        raise TypeError(f"Cannot build a linear combination from {type(value).__name__}")

    def __add__(self, other):
        return LinearCombination(self.terms + LinearCombination.of(other).terms)

    def __radd__(self, other):
        return LinearCombination.of(other) + self

    def __sub__(self, other):
        return self + (-LinearCombination.of(other))

    def __rsub__(self, other):
        return LinearCombination.of(other) - self

    def __neg__(self):
        return LinearCombination([(var, (-coeff) % CURVE_ORDER) for var, coeff in self.terms])

    def __mul__(self, scalar: int):
        if not isinstance(scalar, int):
            return NotImplemented
        return LinearCombination([(var, coeff * scalar % CURVE_ORDER) for var, coeff in self.terms])

    __rmul__ = __mul__

    def __repr__(self):
        return f"LinearCombination({len(self.terms)} terms)"


# ============================================================================
# PROOF
# ============================================================================

@dataclass(frozen=True)
class R1CSProof:
    A_I1: bytes
    A_O1: bytes
    S1: bytes
    T_1: bytes
    T_3: bytes
    T_4: bytes
    T_5: bytes
    T_6: bytes
    t_x: int
    t_x_blinding: int
    e_blinding: int
    ipp_proof: InnerProductProof

    def serialized_size(self) -> int:
        return 1 + 11 * 32 + self.ipp_proof.serialized_size()

    def to_bytes(self) -> bytes:
        buf = bytearray([ONE_PHASE_COMMITMENTS])
        buf.extend(self.A_I1 + self.A_O1 + self.S1)
        buf.extend(self.T_1 + self.T_3 + self.T_4 + self.T_5 + self.T_6)
        buf.extend(scalar_to_bytes(self.t_x))
        buf.extend(scalar_to_bytes(self.t_x_blinding))
        buf.extend(scalar_to_bytes(self.e_blinding))
        buf.extend(self.ipp_proof.to_bytes())
        return bytes(buf)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'R1CSProof':
        if len(data) == 0:
            raise DecodingError("Empty R1CS proof")
        version, body = data[0], data[1:]
        if version != ONE_PHASE_COMMITMENTS:
            raise DecodingError(f"Unsupported R1CS proof version {version}")
        num_points = 8
        min_len = (num_points + 3) * 32
        if len(body) < min_len or len(body) % 32 != 0:
            raise DecodingError(f"R1CS proof body has invalid length {len(body)}")

        points = [body[i * 32:(i + 1) * 32] for i in range(num_points)]
        for i, p in enumerate(points):
            if not is_valid_point(p):
                raise DecodingError(f"R1CS proof element {i} is not a group element")
        A_I1, A_O1, S1, T_1, T_3, T_4, T_5, T_6 = points

        pos = num_points * 32
        t_x = scalar_from_bytes(body[pos:pos + 32])
        t_x_blinding = scalar_from_bytes(body[pos + 32:pos + 64])
        e_blinding = scalar_from_bytes(body[pos + 64:pos + 96])
        ipp_proof = InnerProductProof.from_bytes(body[pos + 96:])

        return cls(
            A_I1=A_I1, A_O1=A_O1, S1=S1,
            T_1=T_1, T_3=T_3, T_4=T_4, T_5=T_5, T_6=T_6,
            t_x=t_x, t_x_blinding=t_x_blinding, e_blinding=e_blinding,
            ipp_proof=ipp_proof,
        )


def padded_length(n: int) -> int:
    """Next power of two >= n (1 for an empty circuit)."""
    padded = 1
    while padded < n:
        padded <<= 1
    return padded


def proof_size(multipliers: int) -> int:
    """Byte length of a single-phase proof for a circuit with this many gates."""
    lg_n = padded_length(multipliers).bit_length() - 1
    return 1 + 11 * 32 + (2 * lg_n + 2) * 32


# ============================================================================
# PROVER
# ============================================================================

class Prover:
    """
    Bulletproofs R1CS prover.

    A Prover is built for one proving session: it owns the witness assignment and
    the constraints, and writes into the session transcript. It must not be reused
    after prove().

    Examples
    --------
    >>> prover = Prover(pc_gens, transcript)
    >>> V, v = prover.commit(value, random_scalar(rng))
    >>> _, _, out = prover.multiply(v, v)
    >>> prover.constrain(out - 9)
    >>> proof = prover.prove(bp_gens, rng)
    """

    def __init__(self, pc_gens: dict, transcript: Transcript):
        self.pc_gens = pc_gens
        self.transcript = transcript
        self.transcript.r1cs_domain_sep()

        self.v = []
        self.v_blinding = []
        self.a_L = []
        self.a_R = []
        self.a_O = []
        self.constraints = []

    @property
    def multipliers_len(self) -> int:
        return len(self.a_L)

    def commit(self, v: int, v_blinding: int) -> Tuple[bytes, Variable]:
        """
        Commit to a high-level witness value.

        Returns
        -------
        Tuple[bytes, Variable]
            (V, var) with V = v · B + v_blinding · B_blinding
        """
        i = len(self.v)
        self.v.append(v % CURVE_ORDER)
        self.v_blinding.append(v_blinding % CURVE_ORDER)

        V = pedersen_commit(v, v_blinding, self.pc_gens)
        self.transcript.append_point(b"V", V)
        return V, Variable(VariableKind.COMMITTED, i)

    def multiply(self, left, right) -> Tuple[Variable, Variable, Variable]:
        """Allocate a multiplication gate and bind its inputs to left and right."""
        left = LinearCombination.of(left)
        right = LinearCombination.of(right)
        l = self.eval(left)
        r = self.eval(right)
        o = l * r % CURVE_ORDER

        i = len(self.a_L)
        self.a_L.append(l)
        self.a_R.append(r)
        self.a_O.append(o)

        l_var = Variable(VariableKind.MULTIPLIER_LEFT, i)
        r_var = Variable(VariableKind.MULTIPLIER_RIGHT, i)
        o_var = Variable(VariableKind.MULTIPLIER_OUTPUT, i)

        self.constrain(left - l_var)
        self.constrain(right - r_var)

        return l_var, r_var, o_var

    def constrain(self, lc):
        """Record the constraint lc = 0. Satisfiability is not checked."""
        self.constraints.append(LinearCombination.of(lc))

    def eval(self, lc: LinearCombination) -> int:
        """Evaluate a linear combination on the current assignment."""
        total = 0
        for var, coeff in LinearCombination.of(lc).terms:
            if var.kind is VariableKind.COMMITTED:
                value = self.v[var.index]
            elif var.kind is VariableKind.MULTIPLIER_LEFT:
                value = self.a_L[var.index]
            elif var.kind is VariableKind.MULTIPLIER_RIGHT:
                value = self.a_R[var.index]
            elif var.kind is VariableKind.MULTIPLIER_OUTPUT:
                value = self.a_O[var.index]
            else:
                value = 1
            total += coeff * value
        return total % CURVE_ORDER

    def flattened_constraints(self, z: int):
        """
        Collapse all constraints into weight vectors using powers of z.

        The q-th constraint is weighted by z^{q+1}. Constant terms are ignored
        on the prover side.

        Returns
        -------
        (wL, wR, wO, wV) as numpy object arrays
        """
        n = len(self.a_L)
        m = len(self.v)
        wL = [0] * n
        wR = [0] * n
        wO = [0] * n
        wV = [0] * m

        exp_z = z
        for lc in self.constraints:
            for var, coeff in lc.terms:
                if var.kind is VariableKind.MULTIPLIER_LEFT:
                    wL[var.index] += exp_z * coeff
                elif var.kind is VariableKind.MULTIPLIER_RIGHT:
                    wR[var.index] += exp_z * coeff
                elif var.kind is VariableKind.MULTIPLIER_OUTPUT:
                    wO[var.index] += exp_z * coeff
                elif var.kind is VariableKind.COMMITTED:
                    wV[var.index] -= exp_z * coeff
            exp_z = exp_z * z % CURVE_ORDER

        def reduce(w):
            return np.array([x % CURVE_ORDER for x in w], dtype=object)

        return reduce(wL), reduce(wR), reduce(wO), reduce(wV)

    def prove(self, bp_gens: dict, rng) -> R1CSProof:
        """
        Produce the proof for the current constraint system.

        Parameters
        ----------
        bp_gens : dict
            Bulletproof generators from keygen_bp_gens()
        rng : random.Random
            Source of every blinding factor of this proof

        Raises
        ------
        InvalidGeneratorsLengthError
            If the padded number of gates exceeds bp_gens['capacity']
        """
        transcript = self.transcript
        B = self.pc_gens['B']
        B_blinding = self.pc_gens['B_blinding']

        transcript.append_u64(b"m", len(self.v))

        n = len(self.a_L)
        padded_n = padded_length(n)
        if bp_gens['capacity'] < padded_n:
            raise InvalidGeneratorsLengthError(
                f"Circuit needs {padded_n} generators, only {bp_gens['capacity']} available"
            )
        logger.debug("R1CS: %d multipliers padded to %d, %d constraints", n, padded_n, len(self.constraints))

        G = list(bp_gens['G_list'][:n])
        H = list(bp_gens['H_list'][:n])

        i_blinding = random_scalar(rng)
        o_blinding = random_scalar(rng)
        s_blinding = random_scalar(rng)
        s_L = [random_scalar(rng) for _ in range(n)]
        s_R = [random_scalar(rng) for _ in range(n)]

        # A_I = <a_L, G> + <a_R, H> + i_blinding · B_blinding
        A_I1 = multiexp([i_blinding] + self.a_L + self.a_R, [B_blinding] + G + H)
        # A_O = <a_O, G> + o_blinding · B_blinding
        A_O1 = multiexp([o_blinding] + self.a_O, [B_blinding] + G)
        # S = <s_L, G> + <s_R, H> + s_blinding · B_blinding
        S1 = multiexp([s_blinding] + s_L + s_R, [B_blinding] + G + H)

        transcript.append_point(b"A_I1", A_I1)
        transcript.append_point(b"A_O1", A_O1)
        transcript.append_point(b"S1", S1)

        transcript.r1cs_1phase_domain_sep()
        transcript.append_point(b"A_I2", IDENTITY)
        transcript.append_point(b"A_O2", IDENTITY)
        transcript.append_point(b"S2", IDENTITY)

        y = transcript.challenge_scalar(b"y")
        z = transcript.challenge_scalar(b"z")

        wL, wR, wO, wV = self.flattened_constraints(z)

        y_inv = scalar_inv(y)
        exp_y = np.array(powers(y, padded_n), dtype=object)
        exp_y_inv = np.array(powers(y_inv, padded_n), dtype=object)

        a_L = np.array(self.a_L, dtype=object)
        a_R = np.array(self.a_R, dtype=object)
        a_O = np.array(self.a_O, dtype=object)
        s_L = np.array(s_L, dtype=object)
        s_R = np.array(s_R, dtype=object)

        # l(X) = l1·X + l2·X^2 + l3·X^3
        l1 = (a_L + exp_y_inv[:n] * wR) % CURVE_ORDER
        l2 = a_O
        l3 = s_L
        # r(X) = r0 + r1·X + r3·X^3
        r0 = (wO - exp_y[:n]) % CURVE_ORDER
        r1 = (exp_y[:n] * a_R + wL) % CURVE_ORDER
        r3 = (exp_y[:n] * s_R) % CURVE_ORDER

        def ip(u, v):
            return int(u.dot(v)) % CURVE_ORDER if n else 0

        t_1 = ip(l1, r0)
        t_2 = (ip(l1, r1) + ip(l2, r0)) % CURVE_ORDER
        t_3 = (ip(l2, r1) + ip(l3, r0)) % CURVE_ORDER
        t_4 = (ip(l1, r3) + ip(l3, r1)) % CURVE_ORDER
        t_5 = ip(l2, r3)
        t_6 = ip(l3, r3)

        t_1_blinding = random_scalar(rng)
        t_3_blinding = random_scalar(rng)
        t_4_blinding = random_scalar(rng)
        t_5_blinding = random_scalar(rng)
        t_6_blinding = random_scalar(rng)

        T_1 = multiexp([t_1, t_1_blinding], [B, B_blinding])
        T_3 = multiexp([t_3, t_3_blinding], [B, B_blinding])
        T_4 = multiexp([t_4, t_4_blinding], [B, B_blinding])
        T_5 = multiexp([t_5, t_5_blinding], [B, B_blinding])
        T_6 = multiexp([t_6, t_6_blinding], [B, B_blinding])

        transcript.append_point(b"T_1", T_1)
        transcript.append_point(b"T_3", T_3)
        transcript.append_point(b"T_4", T_4)
        transcript.append_point(b"T_5", T_5)
        transcript.append_point(b"T_6", T_6)

        u = transcript.challenge_scalar(b"u")
        x = transcript.challenge_scalar(b"x")

        # t_2 is committed through the V_j: its blinding is <wV, v_blinding>
        t_2_blinding = int(wV.dot(np.array(self.v_blinding, dtype=object))) % CURVE_ORDER if self.v else 0

        t_poly = [0, t_1, t_2, t_3, t_4, t_5, t_6]
        t_blinding_poly = [0, t_1_blinding, t_2_blinding, t_3_blinding, t_4_blinding, t_5_blinding, t_6_blinding]
        x_powers = powers(x, 7)
        t_x = sum(c * xp for c, xp in zip(t_poly, x_powers)) % CURVE_ORDER
        t_x_blinding = sum(c * xp for c, xp in zip(t_blinding_poly, x_powers)) % CURVE_ORDER

        l_vec = (l1 * x + l2 * x_powers[2] + l3 * x_powers[3]) % CURVE_ORDER
        r_vec = (r0 + r1 * x + r3 * x_powers[3]) % CURVE_ORDER
        # padding gates have a_L = a_R = a_O = 0, so l_i = 0 and r_i = -y^i
        l_vec = np.concatenate([l_vec, np.zeros(padded_n - n, dtype=object)])
        r_vec = np.concatenate([r_vec, (-exp_y[n:]) % CURVE_ORDER])

        e_blinding = x * (i_blinding + x * (o_blinding + x * s_blinding)) % CURVE_ORDER

        transcript.append_scalar(b"t_x", t_x)
        transcript.append_scalar(b"t_x_blinding", t_x_blinding)
        transcript.append_scalar(b"e_blinding", e_blinding)

        w = transcript.challenge_scalar(b"w")
        Q = point_mul(w, B)

        G_factors = [1] * n + [u] * (padded_n - n)
        H_factors = [y_inv_i * g % CURVE_ORDER for y_inv_i, g in zip(exp_y_inv, G_factors)]

        ipp_proof = create_inner_product_proof(
            transcript,
            Q,
            G_factors,
            H_factors,
            bp_gens['G_list'][:padded_n],
            bp_gens['H_list'][:padded_n],
            list(l_vec),
            list(r_vec),
        )

        return R1CSProof(
            A_I1=A_I1, A_O1=A_O1, S1=S1,
            T_1=T_1, T_3=T_3, T_4=T_4, T_5=T_5, T_6=T_6,
            t_x=t_x, t_x_blinding=t_x_blinding, e_blinding=e_blinding,
            ipp_proof=ipp_proof,
        )
