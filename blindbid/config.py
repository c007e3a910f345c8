"""
Blind-bid configuration
Public parameters of the proving session, overridable through the environment.
"""

import os

# Transcript domain label shared by prover and verifier
DEFAULT_TRANSCRIPT_LABEL = os.getenv('BLINDBID_TRANSCRIPT_LABEL', 'BlindBidProofGadget')

# Bulletproof generators per vector (upper bound on padded multiplication gates)
DEFAULT_GENS_CAPACITY = int(os.getenv('BLINDBID_GENS_CAPACITY', 2048))

# MiMC rounds used by the relation gadget
DEFAULT_MIMC_ROUNDS = int(os.getenv('BLINDBID_MIMC_ROUNDS', 90))


class Config:
    """Configuration."""

    def __init__(self):
        self.transcript_label = DEFAULT_TRANSCRIPT_LABEL
        self.gens_capacity = DEFAULT_GENS_CAPACITY
        self.mimc_rounds = DEFAULT_MIMC_ROUNDS

        if self.gens_capacity <= 0 or self.gens_capacity & (self.gens_capacity - 1):
            raise ValueError(f"BLINDBID_GENS_CAPACITY must be a power of two, got {self.gens_capacity}")
        if self.mimc_rounds <= 0:
            raise ValueError(f"BLINDBID_MIMC_ROUNDS must be positive, got {self.mimc_rounds}")

    @property
    def transcript_label_bytes(self) -> bytes:
        return self.transcript_label.encode('utf-8')


# Global configuration instance
config = Config()
