"""
Fiat-Shamir Transcript
======================

This module implements the transcript that turns the interactive constraint-system
protocol into a non-interactive one.

Every prover message is absorbed with a label; every challenge is derived from
everything absorbed so far and then absorbed itself, so later challenges depend
on earlier ones.

Domain Separation:
------------------
- Each session starts from an application label (config.transcript_label)
- Each append is framed as u32(len(label)) || label || u32(len(msg)) || msg
- Protocol phases add explicit separators:
  - b"r1cs v1"      when a constraint-system prover is created
  - b"r1cs-1phase"  when the prover has no randomized constraints
  - b"ipp v1" || n  before an inner-product argument of size n
"""

import hashlib
import struct
from typing import Tuple

from .config import config
from .crs import keygen_bp_gens, keygen_pc_gens
from .groups import CURVE_ORDER, scalar_to_bytes

CHALLENGE_PREFIX = b"challenge"


class Transcript:
    """SHA-512 based Fiat-Shamir transcript."""

    def __init__(self, label: bytes):
        self._h = hashlib.sha512()
        self.append_message(b"dom-sep", label)

    def append_message(self, label: bytes, message: bytes):
        self._h.update(struct.pack('<I', len(label)))
        self._h.update(label)
        self._h.update(struct.pack('<I', len(message)))
        self._h.update(message)

    def append_u64(self, label: bytes, n: int):
        self.append_message(label, struct.pack('<Q', n))

    def append_point(self, label: bytes, point: bytes):
        self.append_message(label, point)

    def append_scalar(self, label: bytes, s: int):
        self.append_message(label, scalar_to_bytes(s))

    def challenge_scalar(self, label: bytes) -> int:
        """
        Derive a challenge scalar for this point of the protocol.

        The running state is copied, the copy is finalised with the challenge
        prefix and label, and the 64-byte digest is reduced mod L. The digest is
        then appended to the live state.
        """
        h = self._h.copy()
        h.update(CHALLENGE_PREFIX)
        h.update(struct.pack('<I', len(label)))
        h.update(label)
        digest = h.digest()
        self.append_message(CHALLENGE_PREFIX + label, digest)
        return int.from_bytes(digest, 'little') % CURVE_ORDER

    def r1cs_domain_sep(self):
        self.append_message(b"dom-sep", b"r1cs v1")

    def r1cs_1phase_domain_sep(self):
        self.append_message(b"dom-sep", b"r1cs-1phase")

    def innerproduct_domain_sep(self, n: int):
        self.append_message(b"dom-sep", b"ipp v1")
        self.append_u64(b"n", n)


def generate_cs_transcript(label: bytes = None, capacity: int = None) -> Tuple[dict, dict, Transcript]:
    """
    Create the public parameters and a fresh transcript for one proving session.

    Parameters
    ----------
    label : bytes, optional
        Transcript label; defaults to config.transcript_label
    capacity : int, optional
        Bulletproof generator capacity; defaults to config.gens_capacity

    Returns
    -------
    Tuple[dict, dict, Transcript]
        (pc_gens, bp_gens, transcript). The transcript is new on every call and
        must not be shared between sessions.
    """
    if label is None:
        label = config.transcript_label_bytes
    return keygen_pc_gens(), keygen_bp_gens(capacity), Transcript(label)
