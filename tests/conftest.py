"""
Shared fixtures for duplicate detection tests.
Creates isolated temporary directories with controlled test files.
"""
import pytest
import tempfile
from pathlib import Path
from typing import Dict, List, Tuple

from finddupes.core.models import FileRecord, RefinementLevel
from finddupes.core.signature import SignatureComputerImpl


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files for duplicate scenarios:
    - 2 identical files + 1 copy in a subdirectory (1KB of 'A')
    - 2 identical files (2KB of 'B')
    - 2 unique files (different sizes)
    - 2 empty files (duplicates of each other unless --noempty)
    """
    files = {}

    content_a = b"A" * 1024
    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    content_b = b"B" * 2048
    files["dup2_a"] = temp_dir / "dup2_a.txt"
    files["dup2_b"] = temp_dir / "dup2_b.txt"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    files["unique1"] = temp_dir / "unique1.txt"
    files["unique1"].write_bytes(b"C" * 1500)
    files["unique2"] = temp_dir / "unique2.txt"
    files["unique2"].write_bytes(b"D" * 2500)

    files["empty1"] = temp_dir / "empty1.txt"
    files["empty1"].write_bytes(b"")
    files["empty2"] = temp_dir / "empty2.txt"
    files["empty2"].write_bytes(b"")

    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)

    return files


def make_record(path: Path) -> FileRecord:
    """Build a FileRecord the way the scanner would for a regular file."""
    info = path.stat()
    return FileRecord(path=str(path), size=info.st_size, inode=info.st_ino, device=info.st_dev)


@pytest.fixture
def record_factory():
    return make_record


class SpyComputer(SignatureComputerImpl):
    """Signature computer that records every (path, level) it was asked for."""

    def __init__(self):
        super().__init__()
        self.calls: List[Tuple[str, RefinementLevel]] = []

    def compute(self, record, level):
        self.calls.append((record.path, level))
        return super().compute(record, level)

    def paths_at(self, level: RefinementLevel) -> List[str]:
        return [path for path, lvl in self.calls if lvl == level]


@pytest.fixture
def spy_computer():
    return SpyComputer()


class CollidingComputer(SignatureComputerImpl):
    """Real signatures, except that every file gets the same one at `level`."""

    SIGNATURE = "f" * 32

    def __init__(self, level: RefinementLevel = RefinementLevel.FULL):
        super().__init__()
        self.level = level

    def compute(self, record, level):
        if level == self.level:
            return self.SIGNATURE
        return super().compute(record, level)


@pytest.fixture
def colliding_computer():
    return CollidingComputer()
