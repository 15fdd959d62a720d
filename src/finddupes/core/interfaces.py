"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the duplicate detection system.
These protocols enforce structural typing using Python's `typing.Protocol` so that
hash algorithms, scanners and stages can be swapped independently.

Key Components:
---------------
- HashAlgorithm: Factory for incremental hash states (e.g., XXH3-128, MD5).
- SignatureComputer: Computes a record's signature at a given refinement level.
- FileScanner: Walks the user paths and yields FileRecords.
- RefinementStage: One refinement pass over the candidate index.
- DuplicateFinder: The orchestrator coordinating all stages.
"""

from typing import Protocol, List, Iterable, Tuple, Optional, Callable, Iterator

from finddupes.core.models import (
    FileRecord,
    FinderParams,
    DuplicateGroup,
    DeduplicationStats,
    RefinementLevel,
)


# ===== Interfaces =====

class HashState(Protocol):
    """Incremental hash object as returned by hashlib/xxhash constructors."""
    def update(self, data: bytes) -> None: ...
    def hexdigest(self) -> str: ...


class HashAlgorithm(Protocol):
    """
    Interface for generic hash algorithms.

    Allows plugging in different hashing functions like MD5 or xxHash
    without affecting the rest of the refinement logic.
    """

    @staticmethod
    def new() -> HashState:
        """Returns a fresh incremental hash state."""
        ...


class SignatureComputer(Protocol):
    """Interface for computing fingerprints at a refinement level."""
    def compute(self, record: FileRecord, level: RefinementLevel) -> str:
        """
        Raises:
            SignatureError: if the file cannot be read at the requested level.
        """
        ...


class FileScanner(Protocol):
    """
    Interface for traversing user paths and collecting candidate files.
    """
    def iter_records(
        self,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> Iterator[FileRecord]:
        """Yield one FileRecord per regular file (and followed symlink)."""
        ...

    def scan(
        self,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[FileRecord]:
        """Scan every path and return all records found."""
        ...


# =============================
# Stage Interfaces
# =============================

class RefinementStage(Protocol):
    """
    Interface for one refinement pass.

    Each implementation recomputes signatures of every multi-member bucket
    at its level, discards resolved singletons and merges the survivors back.
    """
    level: RefinementLevel

    def get_stage_name(self) -> str:
        """Return the name of this stage (used in logging and stats)."""
        ...

    def process(
        self,
        index,
        resolved: List[FileRecord],
        dropped: List[FileRecord],
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> None:
        """
        Refine the index in place.

        Args:
            index: CandidateIndex holding the survivors of the previous stage.
            resolved: List to append records proven unique to.
            dropped: List to append unreadable or inconsistent records to.
            progress_callback: Optional callback (stage, current, total).
        """
        ...


class DuplicateFinder(Protocol):
    """
    Interface for the main duplicate detection engine.
    """
    def find_duplicates(
        self,
        records: Iterable[FileRecord],
        params: FinderParams,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> Tuple[List[DuplicateGroup], DeduplicationStats]:
        """
        Run the full pipeline: size → partial → full → hardlink filter.

        Returns:
            A tuple of the emitted groups and the collected statistics.
        """
        ...
