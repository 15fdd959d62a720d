"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/stages.py
Refinement pipeline stages for progressive duplicate detection.

CLASS HIERARCHY
---------------
SizeStageImpl          : Builds the initial index from traversal output (SIZE level)
SignatureStageBase     : Shared split/merge logic for content-reading stages
PartialSignatureStage  : Refines by size + first 4096 bytes
FullSignatureStage     : Refines by size + entire content
RefinementPipeline     : Runs the stages in fixed order over one CandidateIndex

STAGE CONTRACTS
---------------
Every content stage implements `process(index, resolved, dropped, progress_callback)`:
  • Takes every multi-member bucket out of the index
  • Recomputes each member's signature at the stage's level
  • Sub-buckets with one member are resolved (appended to `resolved`)
  • Sub-buckets with 2+ members are staged in a refined index, then merged back
  • Unreadable files are appended to `dropped`, and so is any sub-bucket whose new key
    another source bucket already produced in the same pass (signature collision)
  • Buckets with fewer than two members are pruned before returning

OPTIMIZATIONS
-----------------
• A stage only sees survivors of the previous stage: a file separated by size is never
  opened, one separated by its prefix is never read in full
• Optional thread pool: signatures of one stage are computed concurrently, results are
  consumed in submission order and merging stays single-threaded
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import nullcontext
from itertools import islice
from typing import List, Dict, Optional, Callable, Iterable, Tuple

from finddupes.core.models import FileRecord, RefinementLevel, RecordState, LEVEL_STATES
from finddupes.core.index import CandidateIndex, SignatureBucket
from finddupes.core.interfaces import RefinementStage, SignatureComputer
from finddupes.core.signature import SignatureComputerImpl
from finddupes.core.errors import SignatureError, IndexInsertionError, SignatureCollisionError

logger = logging.getLogger(__name__)


def _resolve(bucket: Iterable[FileRecord], resolved: List[FileRecord]) -> None:
    for record in bucket:
        record.state = RecordState.RESOLVED
        resolved.append(record)


def _drop(records: Iterable[FileRecord], dropped: List[FileRecord]) -> None:
    for record in records:
        record.state = RecordState.DROPPED
        dropped.append(record)


# =============================
# Size stage
# =============================
class SizeStageImpl:
    """
    Seeds the candidate index from traversal output.
    SIZE signatures need no I/O, so every record gets one.
    """
    level = RefinementLevel.SIZE

    def __init__(self, computer: SignatureComputer = None):
        self.computer = computer or SignatureComputerImpl()

    def get_stage_name(self) -> str:
        return self.level.display_name

    def process(
            self,
            records: Iterable[FileRecord],
            resolved: List[FileRecord],
            dropped: List[FileRecord],
            progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> CandidateIndex:
        """
        Insert every record at SIZE level and prune resolved singletons.
        Records are numbered in the order they arrive.
        """
        index = CandidateIndex()
        sequence = 0

        for record in records:
            record.sequence = sequence
            sequence += 1
            try:
                signature = self.computer.compute(record, self.level)
                index.insert(record, signature)
            except (SignatureError, IndexInsertionError) as e:
                logger.warning(f"Dropping {record.path}: {e}")
                _drop([record], dropped)
                continue
            record.state = LEVEL_STATES[self.level]

        for bucket in index.prune():
            _resolve(bucket, resolved)

        if progress_callback:
            progress_callback(self.get_stage_name(), sequence, sequence)

        logger.debug(f"Size stage: {sequence} files, {len(index)} candidate groups")
        return index


# =============================
# Content stages
# =============================
class SignatureStageBase(RefinementStage):
    """
    Base class for stages that read file content.
    Subclasses only pick the refinement level.
    """
    level: RefinementLevel = None

    def __init__(self, computer: SignatureComputer = None, workers: int = 1):
        self.computer = computer or SignatureComputerImpl()
        self.workers = workers

    def get_stage_name(self) -> str:
        return self.level.display_name

    def _safe_compute(self, record: FileRecord) -> Optional[str]:
        try:
            return self.computer.compute(record, self.level)
        except SignatureError as e:
            logger.warning(f"Dropping {record.path}: {e}")
            return None

    def _executor(self):
        if self.workers > 1:
            return ThreadPoolExecutor(max_workers=self.workers)
        return nullcontext()

    def split_bucket(
            self,
            bucket: SignatureBucket,
            signatures: Optional[List[Optional[str]]] = None
    ) -> Tuple[Dict[str, List[FileRecord]], List[FileRecord]]:
        """
        Partition a bucket by the members' signatures at this stage's level.

        Args:
            bucket: Bucket taken out of the index.
            signatures: Precomputed signatures aligned with the bucket members; computed
                        here when omitted. None marks an unreadable file.

        Returns:
            (partitions in first-seen order, records that could not be read)
        """
        if signatures is None:
            signatures = [self._safe_compute(record) for record in bucket]

        partitions: Dict[str, List[FileRecord]] = {}
        failed = []
        for record, signature in zip(bucket.records, signatures):
            if signature is None:
                failed.append(record)
                continue
            partitions.setdefault(signature, []).append(record)
        return partitions, failed

    @staticmethod
    def _claim(owners: Dict[str, int], signature: str, source: int) -> None:
        """
        Register `signature` as produced by source bucket `source`.

        Raises:
            SignatureCollisionError: if another source bucket produced it in this pass.
        """
        owner = owners.setdefault(signature, source)
        if owner != source:
            raise SignatureCollisionError(signature)

    def process(
            self,
            index: CandidateIndex,
            resolved: List[FileRecord],
            dropped: List[FileRecord],
            progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> None:
        buckets = [index.take(sig) for sig in index.multi_member_signatures()]
        total_files = sum(len(bucket) for bucket in buckets)
        processed_files = 0
        refined = CandidateIndex()
        owners: Dict[str, int] = {}

        with self._executor() as pool:
            members = [record for bucket in buckets for record in bucket]
            mapper = pool.map if pool is not None else map
            results = mapper(self._safe_compute, members)

            for source, bucket in enumerate(buckets):
                signatures = list(islice(results, len(bucket)))
                partitions, failed = self.split_bucket(bucket, signatures)
                _drop(failed, dropped)

                for signature, records in partitions.items():
                    try:
                        self._claim(owners, signature, source)
                    except SignatureCollisionError as e:
                        logger.error(
                            f"{e}: files from unrelated groups share it, "
                            f"dropping {len(records)} file(s): {', '.join(r.path for r in records)}"
                        )
                        _drop(records, dropped)
                        continue

                    if len(records) == 1:
                        records[0].signature = signature
                        _resolve(records, resolved)
                        continue
                    for record in records:
                        refined.insert(record, signature)
                        record.state = LEVEL_STATES[self.level]

                processed_files += len(bucket)
                if progress_callback:
                    progress_callback(self.get_stage_name(), processed_files, total_files)

        for bucket in index.merge(refined):
            logger.error(
                f"Internal inconsistency: signature {bucket.signature} already indexed, "
                f"dropping {len(bucket)} file(s): {', '.join(r.path for r in bucket)}"
            )
            _drop(bucket, dropped)

        for bucket in index.prune():
            _resolve(bucket, resolved)

        logger.debug(f"{self.get_stage_name()}: {total_files} files in, {len(index)} candidate groups out")


class PartialSignatureStage(SignatureStageBase):
    level = RefinementLevel.PARTIAL


class FullSignatureStage(SignatureStageBase):
    level = RefinementLevel.FULL


# =============================
# Pipeline
# =============================
class RefinementPipeline:
    """
    Runs the content stages in fixed order (PARTIAL → FULL) over one index.
    The index is passed in and refined in place; the pipeline keeps no state between runs.
    """

    def __init__(self, computer: SignatureComputer = None, workers: int = 1):
        self.computer = computer or SignatureComputerImpl()
        self.stages: List[SignatureStageBase] = [
            PartialSignatureStage(self.computer, workers),
            FullSignatureStage(self.computer, workers),
        ]

    def run(
            self,
            index: CandidateIndex,
            resolved: List[FileRecord],
            dropped: List[FileRecord],
            progress_callback: Optional[Callable[[str, int, object], None]] = None,
            on_stage_done: Optional[Callable[[SignatureStageBase, float], None]] = None
    ) -> CandidateIndex:
        for stage in self.stages:
            start_time = time.time()
            stage.process(index, resolved, dropped, progress_callback=progress_callback)
            if on_stage_done:
                on_stage_done(stage, time.time() - start_time)
        return index
