"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/hardlinks.py
Collapses directory entries that share one (inode, device) pair.

Hardlinked regular files are the same data, so only the first one found is kept.
Symlinks are different: with symlink following enabled, a symlink is always kept,
even when its target inode has already been seen in the same bucket.
"""

import logging
from typing import List, Set, Tuple

from finddupes.core.models import FileRecord, RecordState
from finddupes.core.index import CandidateIndex

logger = logging.getLogger(__name__)


class HardlinkFilter:
    """
    Post-refinement pass over a CandidateIndex.
    Only used when hardlinks are NOT to be considered duplicates.
    """

    def __init__(self, follow_symlinks: bool = False):
        self.follow_symlinks = follow_symlinks

    def filter_bucket(self, records: List[FileRecord]) -> Tuple[List[FileRecord], List[FileRecord]]:
        """
        Walk the records in order and split them into (retained, removed).
        """
        seen: Set[Tuple[int, int]] = set()
        retained = []
        removed = []

        for record in records:
            key = record.inode_key
            if key not in seen:
                seen.add(key)
                retained.append(record)
            elif self.follow_symlinks and record.is_symlink:
                retained.append(record)
            else:
                logger.debug(f"Inode {record.inode} already seen, removing {record.path}")
                removed.append(record)

        return retained, removed

    def apply(self, index: CandidateIndex, resolved: List[FileRecord], dropped: List[FileRecord]) -> None:
        """
        Filter every multi-member bucket in place, then prune buckets left with
        fewer than two members. Removed links are dropped; the file left in a
        pruned bucket is resolved.
        """
        for signature in index.multi_member_signatures():
            retained, _ = self.filter_bucket(index.get(signature).records)
            for record in index.retain(signature, retained):
                record.state = RecordState.DROPPED
                dropped.append(record)

        for bucket in index.prune():
            for record in bucket:
                record.state = RecordState.RESOLVED
                resolved.append(record)
