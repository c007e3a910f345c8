"""
Error Types
===========

Every failure of the proving pipeline and of the wire codec is one of:

- CodecError / UnexpectedEOFError: the stream ended before a required record
- CodecError / DecodingError: a record's bytes do not parse as the expected type
- CodecError / EncodingError: a value cannot be written in the wire format
- ProvingError: commitment, gadget construction or the R1CS prover failed

All of them derive from BlindBidError so callers can catch the whole family.
"""


class BlindBidError(Exception):
    """Base blind-bid error."""
    pass


class CodecError(BlindBidError):
    """Wire format error."""
    pass


class UnexpectedEOFError(CodecError):
    """Stream truncated before a required record."""
    pass


class DecodingError(CodecError):
    """Record body does not decode as the expected type."""
    pass


class EncodingError(CodecError):
    """Value does not fit the wire format."""
    pass


class ProvingError(BlindBidError):
    """Proof generation failed."""
    pass


class InvalidGeneratorsLengthError(ProvingError):
    """Not enough Bulletproof generators for the circuit size."""
    pass


class InvalidToggleError(ProvingError):
    """Toggle index outside the public list."""
    pass


class GadgetError(ProvingError):
    """Relation gadget received inconsistent inputs."""
    pass


class GroupError(BlindBidError):
    """libsodium rejected a group operation."""
    pass
