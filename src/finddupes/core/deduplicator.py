"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

deduplicator.py
Pipeline-based duplicate detection over FileRecords:
    size → partial hash (first 4096 bytes) → full hash → hardlink filter → groups
"""
import time
from typing import List, Tuple, Optional, Callable, Iterable
import logging

from finddupes.core.models import (
    FileRecord, DuplicateGroup, DeduplicationStats, FinderParams, RecordState)
from finddupes.core.index import CandidateIndex
from finddupes.core.interfaces import DuplicateFinder, SignatureComputer
from finddupes.core.signature import SignatureComputerImpl
from finddupes.core.stages import SizeStageImpl, RefinementPipeline, SignatureStageBase
from finddupes.core.hardlinks import HardlinkFilter

logger = logging.getLogger(__name__)


# =============================
# Main Finder Class
# =============================
class DuplicateFinderImpl(DuplicateFinder):
    """
    Implements multi-stage duplicate detection using a pipeline architecture.
    Owns nothing between runs: each call builds and discards its own index.
    """
    def __init__(self, computer: SignatureComputer = None):
        self.computer = computer or SignatureComputerImpl()

    def find_duplicates(
        self,
        records: Iterable[FileRecord],
        params: FinderParams,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> Tuple[List[DuplicateGroup], DeduplicationStats]:
        """
        Main pipeline.
        Args:
            records: FileRecords in discovery order (typically a scanner generator)
            params: Search parameters (hardlink/symlink policy, unique mode, workers)
            progress_callback (Optional[Callable[[str, int, int], None]]): Reports progress per stage.
        Returns:
            Tuple[List[DuplicateGroup], DeduplicationStats]
        """
        stats = DeduplicationStats()
        total_start_time = time.time()
        resolved: List[FileRecord] = []
        dropped: List[FileRecord] = []

        # Initial stage: group by size
        size_stage = SizeStageImpl(self.computer)
        start_time = time.time()
        index = size_stage.process(records, resolved, dropped, progress_callback=progress_callback)
        stats.files_discovered = index.record_count() + len(resolved) + len(dropped)
        DuplicateFinderImpl._update_stats(stats, "size", time.time() - start_time, index)

        def on_stage_done(stage: SignatureStageBase, duration: float) -> None:
            DuplicateFinderImpl._update_stats(stats, stage.level.value, duration, index)

        pipeline = RefinementPipeline(self.computer, workers=params.workers)
        pipeline.run(index, resolved, dropped,
                     progress_callback=progress_callback, on_stage_done=on_stage_done)

        if not params.consider_hardlinks:
            start_time = time.time()
            HardlinkFilter(follow_symlinks=params.follow_symlinks).apply(index, resolved, dropped)
            DuplicateFinderImpl._update_stats(stats, "hardlinks", time.time() - start_time, index)

        if params.unique:
            groups = self._unique_groups(resolved)
        else:
            groups = self._duplicate_groups(index)

        for group in groups:
            for record in group.files:
                record.state = RecordState.EMITTED

        stats.files_dropped = len(dropped)
        stats.total_time = time.time() - total_start_time
        return groups, stats

    @staticmethod
    def _duplicate_groups(index: CandidateIndex) -> List[DuplicateGroup]:
        """Turn surviving buckets into groups, ordered by first discovery."""
        buckets = sorted(index.buckets(), key=lambda b: b.first.sequence)
        return [
            DuplicateGroup(size=bucket.first.size, files=list(bucket.records), signature=bucket.signature)
            for bucket in buckets
        ]

    @staticmethod
    def _unique_groups(resolved: List[FileRecord]) -> List[DuplicateGroup]:
        """One singleton group per file proven unique, in discovery order."""
        return [
            DuplicateGroup(size=record.size, files=[record], signature=record.signature, is_unique=True)
            for record in sorted(resolved, key=lambda r: r.sequence)
        ]

    @staticmethod
    def _update_stats(
        stats: DeduplicationStats,
        stage: str,
        duration: float,
        index: CandidateIndex
    ):
        """
        Helper to update DeduplicationStats with the candidates left after a stage.
        """
        stats.update_stage(
            stage_name=stage,
            groups_found=len(index),
            files_processed=index.record_count(),
            duration=duration
        )
