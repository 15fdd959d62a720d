"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/index.py
Candidate index: an insertion-ordered multimap from signature to bucket of FileRecords.

Records are moved between indexes, never copied: `take()` hands a bucket over and
forgets it, `merge()` adopts buckets from a refined index and empties that index.
"""

import os
import logging
from typing import Dict, Iterator, List, Set

from finddupes.core.models import FileRecord
from finddupes.core.errors import IndexInsertionError

logger = logging.getLogger(__name__)


class SignatureBucket:
    """Ordered sequence of records sharing one signature."""

    __slots__ = ("signature", "records")

    def __init__(self, signature: str):
        self.signature = signature
        self.records: List[FileRecord] = []

    def append(self, record: FileRecord) -> None:
        self.records.append(record)

    @property
    def first(self) -> FileRecord:
        return self.records[0]

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(self.records)

    def __repr__(self):
        return f"<SignatureBucket {self.signature[:8]}… count={len(self.records)}>"


class CandidateIndex:
    """
    Map signature → SignatureBucket with unique keys.
    Iteration follows key insertion order, and each bucket keeps member insertion order.
    """

    def __init__(self):
        self._buckets: Dict[str, SignatureBucket] = {}
        self._paths: Set[str] = set()

    @staticmethod
    def _path_key(record: FileRecord) -> str:
        return os.path.abspath(record.path)

    def insert(self, record: FileRecord, signature: str) -> SignatureBucket:
        """
        Append the record to the bucket for `signature`, creating a singleton bucket if needed.

        Raises:
            IndexInsertionError: if a record with the same path is already indexed.
        """
        path_key = self._path_key(record)
        if path_key in self._paths:
            raise IndexInsertionError(f"Path already indexed: {record.path}")

        bucket = self._buckets.get(signature)
        if bucket is None:
            bucket = SignatureBucket(signature)
            self._buckets[signature] = bucket

        record.signature = signature
        bucket.append(record)
        self._paths.add(path_key)
        return bucket

    def take(self, signature: str) -> SignatureBucket:
        """Remove a bucket from the index and return it; the index keeps no reference."""
        bucket = self._buckets.pop(signature)
        for record in bucket:
            self._paths.discard(self._path_key(record))
        return bucket

    def retain(self, signature: str, records: List[FileRecord]) -> List[FileRecord]:
        """Keep only `records` (in their given order) in the bucket; return the removed ones."""
        bucket = self._buckets[signature]
        kept = set(map(id, records))
        removed = [record for record in bucket if id(record) not in kept]
        for record in removed:
            self._paths.discard(self._path_key(record))
        bucket.records = list(records)
        return removed

    def _adopt(self, bucket: SignatureBucket) -> None:
        self._buckets[bucket.signature] = bucket
        for record in bucket:
            self._paths.add(self._path_key(record))

    def merge(self, refined: "CandidateIndex") -> List[SignatureBucket]:
        """
        Move every bucket of `refined` into this index.

        A refined key that already exists here belongs to an unrelated bucket; such buckets
        are not merged and are returned to the caller instead. `refined` is empty afterwards.
        """
        collisions = []
        for signature in list(refined._buckets):
            bucket = refined.take(signature)
            if signature in self._buckets:
                collisions.append(bucket)
                continue
            self._adopt(bucket)
        return collisions

    def prune(self) -> List[SignatureBucket]:
        """Remove and return every bucket with fewer than two members."""
        small = [sig for sig, bucket in self._buckets.items() if len(bucket) < 2]
        return [self.take(sig) for sig in small]

    def multi_member_signatures(self) -> List[str]:
        """Snapshot of keys whose buckets hold at least two records."""
        return [sig for sig, bucket in self._buckets.items() if len(bucket) >= 2]

    def buckets(self) -> List[SignatureBucket]:
        return list(self._buckets.values())

    def get(self, signature: str) -> SignatureBucket:
        return self._buckets[signature]

    def record_count(self) -> int:
        return len(self._paths)

    def __contains__(self, signature: str) -> bool:
        return signature in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)

    def __iter__(self) -> Iterator[SignatureBucket]:
        return iter(list(self._buckets.values()))
