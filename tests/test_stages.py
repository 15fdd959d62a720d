"""
Unit tests for refinement pipeline stages.
Verifies size seeding, partial/full splitting, resolved singletons, dropped records,
and that each stage only reads files the previous stage could not separate.
"""
import pytest

from finddupes.core.stages import (
    SizeStageImpl,
    PartialSignatureStage,
    FullSignatureStage,
    RefinementPipeline,
)
from finddupes.core.index import CandidateIndex
from finddupes.core.models import FileRecord, RecordState, RefinementLevel
from finddupes.core.signature import PARTIAL_SIGNATURE_SIZE, SignatureComputerImpl


class PathCollidingComputer(SignatureComputerImpl):
    """Gives the listed paths one shared signature at every content level."""

    def __init__(self, paths):
        super().__init__()
        self.paths = set(paths)

    def compute(self, record, level):
        if level != RefinementLevel.SIZE and record.path in self.paths:
            return "f" * 32
        return super().compute(record, level)


def write(tmp_path, name, content):
    path = tmp_path / name
    path.write_bytes(content)
    return path


class TestSizeStageImpl:

    def test_groups_by_size_and_resolves_singletons(self, tmp_path, record_factory):
        records = [
            record_factory(write(tmp_path, "a", b"abcd")),
            record_factory(write(tmp_path, "b", b"wxyz")),
            record_factory(write(tmp_path, "c", b"abcde")),
        ]
        resolved, dropped = [], []
        index = SizeStageImpl().process(records, resolved, dropped)

        assert len(index) == 1
        bucket = index.buckets()[0]
        assert [r.path for r in bucket] == [records[0].path, records[1].path]
        assert [r.path for r in resolved] == [records[2].path]
        assert resolved[0].state == RecordState.RESOLVED
        assert all(r.state == RecordState.SIZED for r in bucket)
        assert dropped == []

    def test_assigns_discovery_sequence(self, tmp_path, record_factory):
        records = [record_factory(write(tmp_path, n, b"x")) for n in ("c", "a", "b")]
        SizeStageImpl().process(records, [], [])
        assert [r.sequence for r in records] == [0, 1, 2]

    def test_duplicate_path_is_dropped(self, tmp_path, record_factory):
        path = write(tmp_path, "a", b"abcd")
        first, again = record_factory(path), record_factory(path)
        resolved, dropped = [], []

        SizeStageImpl().process([first, again], resolved, dropped)

        assert dropped == [again]
        assert again.state == RecordState.DROPPED
        assert resolved == [first]

    def test_progress_callback_invoked(self):
        records = [FileRecord(path=f"/file{i}", size=1) for i in range(5)]
        calls = []
        SizeStageImpl().process(records, [], [], progress_callback=lambda *a: calls.append(a))
        assert calls == [("Size grouping", 5, 5)]


class TestPartialSignatureStage:

    def _index(self, records):
        index = CandidateIndex()
        for r in records:
            index.insert(r, f"size-{r.size}")
        return index

    def test_splits_files_differing_in_prefix(self, tmp_path, record_factory):
        a = record_factory(write(tmp_path, "a", b"A" * 5000))
        b = record_factory(write(tmp_path, "b", b"A" * 5000))
        c = record_factory(write(tmp_path, "c", b"C" + b"A" * 4999))
        index = self._index([a, b, c])
        resolved, dropped = [], []

        PartialSignatureStage().process(index, resolved, dropped)

        assert len(index) == 1
        assert index.buckets()[0].records == [a, b]
        assert a.state == RecordState.PARTIALLY_HASHED
        assert resolved == [c]
        assert c.state == RecordState.RESOLVED

    def test_unreadable_member_is_dropped_entirely(self, tmp_path, record_factory):
        a = record_factory(write(tmp_path, "a", b"same"))
        b = record_factory(write(tmp_path, "b", b"same"))
        gone = FileRecord(path=str(tmp_path / "gone"), size=4)
        index = self._index([a, gone, b])
        resolved, dropped = [], []

        PartialSignatureStage().process(index, resolved, dropped)

        assert dropped == [gone]
        assert gone.state == RecordState.DROPPED
        assert index.buckets()[0].records == [a, b]
        assert index.record_count() == 2

    def test_split_bucket_preserves_member_order(self, tmp_path, record_factory):
        recs = [record_factory(write(tmp_path, f"f{i}", b"X" if i % 2 else b"Y")) for i in range(6)]
        index = self._index(recs)
        bucket = index.take(index.multi_member_signatures()[0])

        partitions, failed = PartialSignatureStage().split_bucket(bucket)

        assert failed == []
        groups = list(partitions.values())
        assert [r.path for r in groups[0]] == [recs[0].path, recs[2].path, recs[4].path]
        assert [r.path for r in groups[1]] == [recs[1].path, recs[3].path, recs[5].path]

    def test_singleton_buckets_are_left_untouched(self, spy_computer):
        index = CandidateIndex()
        index.insert(FileRecord(path="/nowhere/a", size=3), "only")
        resolved = []

        PartialSignatureStage(spy_computer).process(index, resolved, [])

        assert spy_computer.calls == []
        assert len(index) == 0
        assert [r.path for r in resolved] == ["/nowhere/a"]


class TestFullSignatureStage:

    def test_separates_files_differing_after_prefix(self, tmp_path, record_factory):
        prefix = b"P" * PARTIAL_SIGNATURE_SIZE
        a = record_factory(write(tmp_path, "a", prefix + b"1"))
        b = record_factory(write(tmp_path, "b", prefix + b"2"))
        index = CandidateIndex()
        index.insert(a, "partial")
        index.insert(b, "partial")
        resolved = []

        FullSignatureStage().process(index, resolved, [])

        assert len(index) == 0
        assert resolved == [a, b]


class TestRefinementPipeline:

    def test_stages_run_in_fixed_order(self):
        pipeline = RefinementPipeline()
        assert [s.level for s in pipeline.stages] == [RefinementLevel.PARTIAL, RefinementLevel.FULL]

    def test_prefix_separated_files_are_never_fully_read(self, tmp_path, record_factory, spy_computer):
        a = record_factory(write(tmp_path, "a", b"A" * 6000))
        b = record_factory(write(tmp_path, "b", b"B" * 6000))
        index = CandidateIndex()
        index.insert(a, "s")
        index.insert(b, "s")

        RefinementPipeline(spy_computer).run(index, [], [])

        assert sorted(spy_computer.paths_at(RefinementLevel.PARTIAL)) == sorted([a.path, b.path])
        assert spy_computer.paths_at(RefinementLevel.FULL) == []

    @pytest.mark.parametrize("workers", [1, 4])
    def test_worker_pool_matches_sequential(self, tmp_path, record_factory, workers):
        recs = []
        for i in range(12):
            recs.append(record_factory(write(tmp_path, f"f{i:02d}", bytes([i % 3]) * 5000)))
        index = CandidateIndex()
        for r in recs:
            index.insert(r, "s")
        resolved = []

        RefinementPipeline(workers=workers).run(index, resolved, [])

        groups = [[r.path for r in bucket] for bucket in index]
        assert groups == [
            [recs[i].path for i in range(0, 12, 3)],
            [recs[i].path for i in range(1, 12, 3)],
            [recs[i].path for i in range(2, 12, 3)],
        ]
        assert resolved == []

    def test_on_stage_done_reports_each_stage(self, tmp_path, record_factory):
        a = record_factory(write(tmp_path, "a", b"same"))
        b = record_factory(write(tmp_path, "b", b"same"))
        index = CandidateIndex()
        index.insert(a, "s")
        index.insert(b, "s")
        seen = []

        RefinementPipeline().run(index, [], [], on_stage_done=lambda stage, t: seen.append(stage.level))

        assert seen == [RefinementLevel.PARTIAL, RefinementLevel.FULL]
        assert index.buckets()[0].records == [a, b]
        assert a.state == RecordState.FULLY_HASHED


class TestSignatureCollisions:

    def test_later_bucket_sharing_a_key_is_dropped(self, tmp_path, record_factory, colliding_computer, caplog):
        a = record_factory(write(tmp_path, "a", b"abcd"))
        b = record_factory(write(tmp_path, "b", b"abcd"))
        c = record_factory(write(tmp_path, "c", b"abcde"))
        d = record_factory(write(tmp_path, "d", b"abcde"))
        index = CandidateIndex()
        for r in (a, b):
            index.insert(r, "size-4")
        for r in (c, d):
            index.insert(r, "size-5")
        resolved, dropped = [], []

        FullSignatureStage(colliding_computer).process(index, resolved, dropped)

        assert [bucket.records for bucket in index] == [[a, b]]
        assert dropped == [c, d]
        assert all(r.state == RecordState.DROPPED for r in (c, d))
        assert resolved == []
        assert "Signature collision" in caplog.text

    def test_singleton_sharing_a_key_is_not_resolved(self, tmp_path, record_factory):
        """A one-member sub-bucket colliding with another source bucket is dropped, not unique."""
        a = record_factory(write(tmp_path, "a", b"abcd"))
        b = record_factory(write(tmp_path, "b", b"abcd"))
        e = record_factory(write(tmp_path, "e", b"wxyz"))
        c = record_factory(write(tmp_path, "c", b"abcde"))
        d = record_factory(write(tmp_path, "d", b"vwxyz"))
        computer = PathCollidingComputer({e.path, c.path})
        index = CandidateIndex()
        for r in (a, b, e):
            index.insert(r, "size-4")
        for r in (c, d):
            index.insert(r, "size-5")
        resolved, dropped = [], []

        PartialSignatureStage(computer).process(index, resolved, dropped)

        assert [bucket.records for bucket in index] == [[a, b]]
        assert resolved == [e, d]
        assert dropped == [c]

    def test_key_held_by_leftover_singleton_is_refused_on_merge(self, tmp_path, record_factory,
                                                              colliding_computer, caplog):
        leftover = FileRecord(path=str(tmp_path / "leftover"), size=4)
        a = record_factory(write(tmp_path, "a", b"abcd"))
        b = record_factory(write(tmp_path, "b", b"abcd"))
        index = CandidateIndex()
        index.insert(leftover, colliding_computer.SIGNATURE)
        index.insert(a, "size-4")
        index.insert(b, "size-4")
        resolved, dropped = [], []

        FullSignatureStage(colliding_computer).process(index, resolved, dropped)

        assert len(index) == 0
        assert dropped == [a, b]
        assert resolved == [leftover]
        assert "already indexed" in caplog.text
