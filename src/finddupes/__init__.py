"""
finddupes — fast duplicate file finder.

Core features:
- Progressive refinement: size → first 4096 bytes → full content (XXH3-128 signatures)
- A file told apart by size is never opened; one told apart by its prefix is never fully read
- Hardlinks collapse to one entry unless asked otherwise; followed symlinks are always listed
- Unique mode lists files that have no duplicate
- Safe, non-interactive deletion to system trash (via send2trash)
"""

# Get version
try:
    from importlib.metadata import version as _version
    __version__ = _version("finddupes")
except Exception:
    try:
        import tomllib  # Python 3.11+
    except ImportError:
        import tomli as tomllib  # Python < 3.11: pip install tomli

    from pathlib import Path as _Path
    with open(_Path(__file__).resolve().parents[2] / "pyproject.toml", "rb") as f:
        __version__ = tomllib.load(f)["project"]["version"]

# Public API — only what users should import directly
from finddupes.commands import DeduplicationCommand
from finddupes.core import (
    FinderParams, ReportOptions, FileRecord, FileKind, DuplicateGroup, DuplicateFinderImpl,
    RefinementLevel, compute_signature)
from finddupes.utils.convert_utils import ConvertUtils
from finddupes.services import DuplicateService, ReportService
from finddupes.services.file_service import FileService

__all__ = [
    "DeduplicationCommand",
    "FinderParams",
    "ReportOptions",
    "FileRecord",
    "FileKind",
    "DuplicateGroup",
    "DuplicateFinderImpl",
    "RefinementLevel",
    "compute_signature",
    "ConvertUtils",
    "DuplicateService",
    "ReportService",
    "FileService",
    "__version__",
]
