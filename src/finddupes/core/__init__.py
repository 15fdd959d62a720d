"""
Core duplicate detection engine — scanner, signatures, candidate index, stages and orchestrator.

This package contains the performance-critical foundation of finddupes:
- FileScannerImpl: traversal of user paths with recursion and symlink policies
- SignatureComputerImpl + XXHash128AlgorithmImpl: size/partial/full XXH3-128 signatures
- CandidateIndex: insertion-ordered map from signature to bucket of records
- RefinementPipeline: partial and full refinement stages
- HardlinkFilter: collapses entries sharing one inode
- DuplicateFinderImpl: the whole pipeline (size → partial → full → hardlinks)
- Models: FileRecord, DuplicateGroup, and configuration objects

All components are pure Python with no UI dependencies.
"""

from .scanner import FileScannerImpl
from .signature import SignatureComputerImpl, XXHash128AlgorithmImpl, compute_signature
from .index import CandidateIndex, SignatureBucket
from .stages import (
    SizeStageImpl, PartialSignatureStage, FullSignatureStage, RefinementPipeline)
from .hardlinks import HardlinkFilter
from .deduplicator import DuplicateFinderImpl
from .errors import FinddupesError, SignatureError, IndexInsertionError, SignatureCollisionError
from .models import (
    FileRecord, FileKind, RecordState, RefinementLevel, DuplicateGroup,
    DeduplicationStats, FinderParams, ReportOptions)

__all__ = [
    "FileScannerImpl",
    "SignatureComputerImpl",
    "XXHash128AlgorithmImpl",
    "compute_signature",
    "CandidateIndex",
    "SignatureBucket",
    "SizeStageImpl",
    "PartialSignatureStage",
    "FullSignatureStage",
    "RefinementPipeline",
    "HardlinkFilter",
    "DuplicateFinderImpl",
    "FinddupesError",
    "SignatureError",
    "IndexInsertionError",
    "SignatureCollisionError",
    "FileRecord",
    "FileKind",
    "RecordState",
    "RefinementLevel",
    "DuplicateGroup",
    "DeduplicationStats",
    "FinderParams",
    "ReportOptions",
]
