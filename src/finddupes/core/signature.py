"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

signature.py
Computes file signatures at the three refinement levels using pluggable hash algorithms.

Every signature folds in the file size first, so a short file can never collide
with the prefix of a longer one:
    SIZE    : hash(size)
    PARTIAL : hash(size + first PARTIAL_SIGNATURE_SIZE bytes)
    FULL    : hash(size + entire content), streamed in CHUNK_SIZE pieces
"""

import struct
import logging
import xxhash

from finddupes.core.models import FileRecord, RefinementLevel
from finddupes.core.interfaces import SignatureComputer, HashAlgorithm, HashState
from finddupes.core.errors import SignatureError

logger = logging.getLogger(__name__)

PARTIAL_SIGNATURE_SIZE = 4096
CHUNK_SIZE = 8192

_SIZE_STRUCT = struct.Struct("<Q")


# Use the same way to implement and use any other hashing algorithm
class XXHash128AlgorithmImpl(HashAlgorithm):
    @staticmethod
    def new() -> HashState:
        return xxhash.xxh3_128()


class SignatureComputerImpl(SignatureComputer):
    """
    A signature computer that supports any algorithm via the HashAlgorithm interface.
    Signatures are lowercase hex strings; nothing is cached on the record.
    """

    def __init__(self, algorithm: HashAlgorithm = None):
        self.algorithm = algorithm or XXHash128AlgorithmImpl()

    def compute(self, record: FileRecord, level: RefinementLevel) -> str:
        state = self.algorithm.new()
        state.update(_SIZE_STRUCT.pack(record.size))

        if level == RefinementLevel.SIZE:
            return state.hexdigest()
        if level == RefinementLevel.PARTIAL:
            to_read = min(record.size, PARTIAL_SIGNATURE_SIZE)
        elif level == RefinementLevel.FULL:
            to_read = record.size
        else:
            raise ValueError(f"Unknown refinement level: {level!r}")

        self._feed(state, record.path, to_read)
        return state.hexdigest()

    @staticmethod
    def _feed(state: HashState, path: str, to_read: int) -> None:
        """Streams exactly `to_read` bytes of the file into the hash state."""
        try:
            with open(path, 'rb') as f:
                while to_read > 0:
                    chunk = f.read(min(CHUNK_SIZE, to_read))
                    if not chunk:
                        raise SignatureError(path, f"unexpected end of file, {to_read} bytes missing")
                    state.update(chunk)
                    to_read -= len(chunk)
        except OSError as e:
            raise SignatureError(path, f"read failed: {e}") from e


_default_computer = SignatureComputerImpl()


def compute_signature(record: FileRecord, level: RefinementLevel) -> str:
    """Computes a signature with the default XXH3-128 algorithm."""
    return _default_computer.compute(record, level)
