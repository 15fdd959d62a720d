"""
Tests for duplicate service logic — validates which file survives a deletion.
The first regular file of a group is preserved; groups arrive in discovery order.
"""
from finddupes.core.models import FileRecord, FileKind, DuplicateGroup
from finddupes.services.duplicate_service import DuplicateService


def rec(path, size=100, kind=FileKind.REGULAR):
    return FileRecord(path=path, size=size, kind=kind)


class TestKeepOnlyOneFilePerGroup:
    """Test that the service marks everything but the preserved file for deletion."""

    def test_first_file_preserved(self):
        group = DuplicateGroup(size=100, files=[rec("/keep"), rec("/del1"), rec("/del2")])

        files_to_delete, kept = DuplicateService.keep_only_one_file_per_group([group])

        assert files_to_delete == ["/del1", "/del2"]
        assert [g.paths for g in kept] == [["/keep"]]

    def test_groups_processed_independently(self):
        g1 = DuplicateGroup(size=100, files=[rec("/g1/keep"), rec("/g1/del")])
        g2 = DuplicateGroup(size=200, files=[rec("/g2/keep", 200), rec("/g2/del", 200)])

        files_to_delete, kept = DuplicateService.keep_only_one_file_per_group([g1, g2])

        assert files_to_delete == ["/g1/del", "/g2/del"]
        assert [g.size for g in kept] == [100, 200]

    def test_single_file_groups_are_skipped(self):
        group = DuplicateGroup(size=100, files=[rec("/alone")], is_unique=True)
        files_to_delete, kept = DuplicateService.keep_only_one_file_per_group([group])
        assert files_to_delete == []
        assert kept == []

    def test_symlink_is_not_preserved_over_regular_file(self):
        """
        CRITICAL: keeping a symlink while trashing its target would leave a dangling link.
        """
        link = rec("/link", kind=FileKind.SYMLINK)
        group = DuplicateGroup(size=100, files=[link, rec("/target")])

        files_to_delete, _ = DuplicateService.keep_only_one_file_per_group([group])

        assert files_to_delete == ["/link"]

    def test_group_of_symlinks_keeps_first(self):
        links = [rec("/l1", kind=FileKind.SYMLINK), rec("/l2", kind=FileKind.SYMLINK)]
        group = DuplicateGroup(size=100, files=links)
        assert DuplicateService.preserved_file(group) is links[0]


class TestSummarize:

    def test_counts_redundant_copies(self):
        groups = [
            DuplicateGroup(size=10, files=[rec("/a", 10), rec("/b", 10), rec("/c", 10)]),
            DuplicateGroup(size=5, files=[rec("/d", 5), rec("/e", 5)]),
        ]
        assert DuplicateService.summarize(groups) == (3, 2, 25)

    def test_unique_groups_count_each_file(self):
        groups = [
            DuplicateGroup(size=7, files=[rec("/a", 7)], is_unique=True),
            DuplicateGroup(size=3, files=[rec("/b", 3)], is_unique=True),
        ]
        assert DuplicateService.summarize(groups) == (2, 0, 10)

    def test_nothing_found(self):
        assert DuplicateService.summarize([]) == (0, 0, 0)
