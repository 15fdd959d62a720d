"""
Unified command orchestrator for duplicate search.
This is the SINGLE source of truth for the workflow — used by the CLI and by library callers.
"""
import logging
from typing import List, Optional, Callable, Tuple

from finddupes.core.models import DuplicateGroup, DeduplicationStats, FinderParams
from finddupes.core.scanner import FileScannerImpl
from finddupes.core.deduplicator import DuplicateFinderImpl
from finddupes.core.interfaces import SignatureComputer

logger = logging.getLogger(__name__)


class DeduplicationCommand:
    """
    Orchestrates the entire workflow:
    1. Traverse the given paths
    2. Stream the discovered records into the duplicate finder

    Usage:
        params = FinderParams(paths=["~/Downloads"], recurse=True)
        groups, stats = DeduplicationCommand().execute(
            params,
            progress_callback=cli_progress_printer,
        )
    """

    def __init__(self, computer: Optional[SignatureComputer] = None):
        self._finder = DuplicateFinderImpl(computer)

    def execute(
            self,
            params: FinderParams,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ) -> Tuple[List[DuplicateGroup], DeduplicationStats]:
        """
        Execute a duplicate search with the given parameters.

        Args:
            params: Validated search parameters
            progress_callback: (stage: str, current: int, total: Optional[int]) -> None

        Returns:
            Tuple of (groups, statistics)
        """
        scanner = FileScannerImpl(
            paths=params.paths,
            recurse=params.recurse,
            follow_symlinks=params.follow_symlinks,
            exclude_empty=params.exclude_empty,
        )

        groups, stats = self._finder.find_duplicates(
            scanner.iter_records(progress_callback=progress_callback),
            params,
            progress_callback=progress_callback
        )

        logger.debug(f"Search finished: {len(groups)} group(s) in {stats.total_time:.3f}s")
        return groups, stats
