"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models and domain logic for file discovery and duplicate detection.
"""

from dataclasses import dataclass
from typing import List, Dict, Optional, Union, Tuple
import logging
from enum import Enum

logger = logging.getLogger(__name__)


# =============================
# Enums
# =============================

class RefinementLevel(Enum):
    """
    Signature refinement levels, in the order they are applied.
    """
    SIZE = "size"
    PARTIAL = "partial"
    FULL = "full"

    @property
    def display_name(self) -> str:
        """Human-readable name for progress output."""
        mapping = {
            RefinementLevel.SIZE: "Size grouping",
            RefinementLevel.PARTIAL: "Partial Hash",
            RefinementLevel.FULL: "Full Hash",
        }
        return mapping.get(self, self.value)

    @classmethod
    def get_all(cls):
        return [cls.SIZE, cls.PARTIAL, cls.FULL]

    def __repr__(self) -> str:
        return self.value


class FileKind(Enum):
    REGULAR = "regular"
    SYMLINK = "symlink"


class RecordState(Enum):
    """Lifecycle of a FileRecord through the pipeline."""
    DISCOVERED = "discovered"
    SIZED = "sized"
    PARTIALLY_HASHED = "partially-hashed"
    FULLY_HASHED = "fully-hashed"
    RESOLVED = "resolved"    # proven unique, emitted only in unique mode
    DROPPED = "dropped"
    EMITTED = "emitted"


# Level reached -> state of a record that survived it
LEVEL_STATES = {
    RefinementLevel.SIZE: RecordState.SIZED,
    RefinementLevel.PARTIAL: RecordState.PARTIALLY_HASHED,
    RefinementLevel.FULL: RecordState.FULLY_HASHED,
}


# ======================
#  Core Data Models
# ======================

@dataclass(eq=False)
class FileRecord:
    """
    A single candidate file found during traversal.
    Records are compared by identity: one record exists per path.
    """
    path: str
    size: int  # in bytes
    inode: int = 0
    device: int = 0
    kind: FileKind = FileKind.REGULAR
    signature: Optional[str] = None
    sequence: int = -1  # discovery order, set when the record enters the index
    state: RecordState = RecordState.DISCOVERED

    def __post_init__(self):
        if self.size < 0:
            raise ValueError(f"File size cannot be negative: {self.path}")

    @property
    def is_symlink(self) -> bool:
        return self.kind == FileKind.SYMLINK

    @property
    def inode_key(self) -> Tuple[int, int]:
        return self.inode, self.device

    def __repr__(self):
        return f"<FileRecord path={self.path}, size={self.size}, kind={self.kind.value}>"


@dataclass
class DuplicateGroup:
    """
    A group of files with identical content, or a single file in unique mode.
    Files are kept in discovery order: files[0] was found first.
    """
    size: int
    files: List[FileRecord]
    signature: Optional[str] = None
    is_unique: bool = False

    @property
    def duplicate_count(self) -> int:
        """How many files are in this group."""
        return len(self.files)

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.files]

    def is_duplicate(self) -> bool:
        """True if this group contains at least two files."""
        return self.duplicate_count >= 2

    def __repr__(self):
        return f"<DuplicateGroup size={self.size}, count={len(self.files)}, unique={self.is_unique}>"


class DeduplicationStats:
    """
    Statistics collected during the duplicate search.
    """
    def __init__(self):
        self.total_time: float = 0.0
        self.files_discovered: int = 0
        self.files_dropped: int = 0
        self.stage_stats: Dict[str, Dict[str, Union[int, float]]] = {}

    def update_stage(
            self,
            stage_name: str,
            groups_found: int,
            files_processed: int,
            duration: float
    ) -> None:
        if stage_name not in self.stage_stats:
            self.stage_stats[stage_name] = {
                "groups": 0,
                "files": 0,
                "time": 0.0
            }
        self.stage_stats[stage_name]["groups"] += groups_found
        self.stage_stats[stage_name]["files"] += files_processed
        self.stage_stats[stage_name]["time"] += duration

    def print_summary(self) -> str:
        labels = {
            "size": "Size Groups",
            "partial": "Partial Hash Groups",
            "full": "Full Hash Groups",
            "hardlinks": "After Hardlink Filter",
        }

        lines = [
            "Duplicate Search Statistics:",
            f"Total Execution Time: {self.total_time:.3f}s",
            f"Files discovered: {self.files_discovered}, dropped: {self.files_dropped}\n",
            "Stage: GROUPS / FILES / TIME"
        ]

        for stage, data in self.stage_stats.items():
            label = labels.get(stage.lower(), stage.title())
            lines.append(f"{label}: {data['groups']} / {data['files']} / {data['time']:.3f}s")

        return "\n".join(lines)


"""
DTOs for search and report parameters with built-in validation.
Interface-agnostic — used by the CLI and by library callers.
"""

@dataclass
class FinderParams:
    """Parameters for a duplicate search with validation."""
    paths: List[str]
    recurse: bool = False
    follow_symlinks: bool = False
    consider_hardlinks: bool = False
    exclude_empty: bool = False
    unique: bool = False
    workers: int = 1

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.paths:
            raise ValueError("At least one path must be specified")

        if any(not p for p in self.paths):
            raise ValueError("Paths cannot be empty strings")

        if self.workers < 1:
            raise ValueError("Number of workers must be at least 1")


@dataclass
class ReportOptions:
    """Layout options for printing duplicate groups."""
    omit_first: bool = False
    same_line: bool = False
    show_size: bool = False
    summarize: bool = False
    unique: bool = False  # groups come from unique mode
    separator: Optional[str] = None
    set_separator: Optional[str] = None

    def resolved_separators(self) -> Tuple[str, str]:
        """
        Returns (file separator, set separator).
        Explicit separators always win; otherwise same_line switches the defaults.
        """
        if self.same_line:
            default_sep, default_setsep = " ", "\n"
        else:
            default_sep, default_setsep = "\n", "\n\n"
        sep = self.separator if self.separator is not None else default_sep
        setsep = self.set_separator if self.set_separator is not None else default_setsep
        return sep, setsep
