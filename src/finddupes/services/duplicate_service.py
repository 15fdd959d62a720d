from typing import List, Tuple
from finddupes.core.models import DuplicateGroup, FileRecord


class DuplicateService:
    @staticmethod
    def preserved_file(group: DuplicateGroup) -> FileRecord:
        """
        The file kept when a group is reduced to one member.

        The first regular file wins; symlinks are only kept when the group has nothing else,
        so that deleting the rest never leaves a link pointing at a removed target.
        """
        for file in group.files:
            if not file.is_symlink:
                return file
        return group.files[0]

    @staticmethod
    def keep_only_one_file_per_group(groups: List[DuplicateGroup]) -> Tuple[List[str], List[DuplicateGroup]]:
        """
        Keeps one file per group and marks the rest for deletion.
        Returns:
            - List of file paths to be deleted
            - Updated list of groups, each holding only its preserved file
        """
        files_to_delete = []
        updated_groups = []

        for group in groups:
            if not group.is_duplicate():
                continue
            keep = DuplicateService.preserved_file(group)
            for file in group.files:
                if file is not keep:
                    files_to_delete.append(file.path)
            updated_groups.append(DuplicateGroup(size=group.size, files=[keep], signature=group.signature))

        return files_to_delete, updated_groups

    @staticmethod
    def summarize(groups: List[DuplicateGroup]) -> Tuple[int, int, int]:
        """
        Count redundant copies.
        Returns:
            (redundant files, number of sets, bytes occupied by the redundant files)
            For unique groups every file counts once.
        """
        files = 0
        sets = 0
        total_bytes = 0
        for group in groups:
            if group.is_unique:
                files += 1
                total_bytes += group.size
                continue
            if not group.is_duplicate():
                continue
            redundant = group.duplicate_count - 1
            files += redundant
            sets += 1
            total_bytes += redundant * group.size
        return files, sets, total_bytes
