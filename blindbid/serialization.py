"""
Blind-bid wire serialization
Length-prefixed records for proofs and witness bundles.

Record:       u64le(length) || body
List record:  u64le(length) || u64le(count) || record_1 || ... || record_count
Scalar:       32-byte canonical little-endian scalar
Point:        32-byte compressed group element
Integer:      record with an 8-byte u64le body

Proof stream:    record(proof_bytes) || list(commitment x4) || list(toggle commitment x N)
Witness bundle:  record(scalar) x7 || list(scalar x N) || record(u64 toggle)
"""

import io
import struct
from typing import List, Sequence, Tuple

from .errors import DecodingError, EncodingError, UnexpectedEOFError
from .groups import POINT_SIZE, is_valid_point, scalar_from_bytes, scalar_to_bytes

LENGTH_PREFIX = struct.Struct('<Q')
U64 = struct.Struct('<Q')

# Upper bound on a single record body, keeps a corrupt prefix from driving allocation
MAX_RECORD_LENGTH = 1 << 32

WITNESS_SCALARS = 7


def as_stream(data):
    """Wrap bytes-like input in a stream; pass streams through."""
    if isinstance(data, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(data))
    return data


class TlvWriter:
    """Writes length-prefixed records into an in-memory buffer."""

    def __init__(self):
        self._stream = io.BytesIO()

    def write(self, data: bytes):
        self._stream.write(LENGTH_PREFIX.pack(len(data)))
        self._stream.write(data)

    def write_list(self, items: Sequence[bytes]):
        body = TlvWriter()
        for item in items:
            body.write(item)
        self.write(U64.pack(len(items)) + body.into_inner())

    def write_usize(self, n: int):
        if n < 0 or n >= 1 << 64:
            raise EncodingError(f"Integer {n} does not fit in u64")
        self.write(U64.pack(n))

    def into_inner(self) -> bytes:
        return self._stream.getvalue()


class TlvReader:
    """Reads length-prefixed records from a binary stream."""

    def __init__(self, stream):
        self._stream = as_stream(stream)

    def _read_exact(self, n: int, what: str) -> bytes:
        # raw streams may return short reads before EOF
        chunks = []
        remaining = n
        while remaining > 0:
            chunk = self._stream.read(remaining)
            if not chunk:
                raise UnexpectedEOFError(f"Unexpected end of input while reading {what}")
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def read(self) -> bytes:
        (length,) = LENGTH_PREFIX.unpack(self._read_exact(LENGTH_PREFIX.size, "record length"))
        if length > MAX_RECORD_LENGTH:
            raise DecodingError(f"Record length {length} exceeds {MAX_RECORD_LENGTH}")
        return self._read_exact(length, "record body")

    def read_list(self) -> List[bytes]:
        body = self.read()
        if len(body) < U64.size:
            raise DecodingError("List record too short for its element count")
        (count,) = U64.unpack_from(body)

        inner = TlvReader(body[U64.size:])
        items = []
        try:
            for _ in range(count):
                items.append(inner.read())
        except UnexpectedEOFError as e:
            raise DecodingError(f"List record holds fewer than {count} elements") from e
        if inner._stream.read(1):
            raise DecodingError("Trailing bytes inside list record")
        return items

    def read_usize(self) -> int:
        body = self.read()
        if len(body) != U64.size:
            raise DecodingError(f"Integer record must be {U64.size} bytes, got {len(body)}")
        return U64.unpack(body)[0]

    def read_scalar(self) -> int:
        return scalar_from_bytes(self.read())

    def read_scalar_list(self) -> List[int]:
        return [scalar_from_bytes(b) for b in self.read_list()]

    def read_point_list(self) -> List[bytes]:
        return [decode_point(b) for b in self.read_list()]


def decode_point(data: bytes) -> bytes:
    """Validate a 32-byte group element encoding."""
    if len(data) != POINT_SIZE:
        raise DecodingError(f"Group element must be {POINT_SIZE} bytes, got {len(data)}")
    if not is_valid_point(data):
        raise DecodingError("Bytes do not encode a group element")
    return data


def encode_proof_records(proof_bytes: bytes, commitments: Sequence[bytes], toggle_commitments: Sequence[bytes]) -> bytes:
    """Write the three proof records."""
    for c in list(commitments) + list(toggle_commitments):
        if len(c) != POINT_SIZE:
            raise EncodingError(f"Commitment must be {POINT_SIZE} bytes, got {len(c)}")

    writer = TlvWriter()
    writer.write(proof_bytes)
    writer.write_list(list(commitments))
    writer.write_list(list(toggle_commitments))
    return writer.into_inner()


def decode_proof_records(stream) -> Tuple[bytes, List[bytes], List[bytes]]:
    """Read the three proof records: (proof_bytes, commitments, toggle_commitments)."""
    reader = TlvReader(stream)
    proof_bytes = reader.read()
    commitments = reader.read_point_list()
    toggle_commitments = reader.read_point_list()
    return proof_bytes, commitments, toggle_commitments


def encode_witness_bundle(scalars: Sequence[int], public_list: Sequence[int], toggle: int) -> bytes:
    """
    Serialize a witness bundle.

    Parameters
    ----------
    scalars : Sequence[int]
        d, k, y, y_inv, q, z_img, seed in that order
    public_list : Sequence[int]
        The public list
    toggle : int
        Selected index, written as u64
    """
    if len(scalars) != WITNESS_SCALARS:
        raise EncodingError(f"Witness bundle needs {WITNESS_SCALARS} scalars, got {len(scalars)}")

    writer = TlvWriter()
    for s in scalars:
        writer.write(scalar_to_bytes(s))
    writer.write_list([scalar_to_bytes(s) for s in public_list])
    writer.write_usize(toggle)
    return writer.into_inner()


def decode_witness_bundle(stream) -> Tuple[List[int], List[int], int]:
    """
    Deserialize a witness bundle: (scalars, public_list, toggle).

    Raises
    ------
    UnexpectedEOFError
        If any of the nine records is missing or cut short
    DecodingError
        If a scalar is not canonical or the toggle record is not a u64
    """
    reader = TlvReader(stream)
    scalars = [reader.read_scalar() for _ in range(WITNESS_SCALARS)]
    public_list = reader.read_scalar_list()
    toggle = reader.read_usize()
    return scalars, public_list, toggle
