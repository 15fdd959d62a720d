"""
Text layout of search results.
Kept apart from the CLI so the same output can be produced by library callers.
"""
from typing import List

from finddupes.core.models import DuplicateGroup, ReportOptions
from finddupes.services.duplicate_service import DuplicateService
from finddupes.utils.convert_utils import ConvertUtils


class ReportService:
    @staticmethod
    def size_header(size: int) -> str:
        unit = "byte" if size == 1 else "bytes"
        return f"{size} {unit} each:\n"

    @staticmethod
    def summary(groups: List[DuplicateGroup], unique: bool = False) -> str:
        files, sets, total_bytes = DuplicateService.summarize(groups)
        occupying = ConvertUtils.bytes_to_human(total_bytes)
        if unique:
            return f"{files} unique files, occupying {occupying}.\n"
        return f"{files} duplicate files (in {sets} sets), occupying {occupying}.\n"

    @staticmethod
    def render(groups: List[DuplicateGroup], options: ReportOptions) -> str:
        """
        Render groups as text.

        Duplicate groups: members joined by the file separator, each group followed by
        the set separator. Unique groups: each path followed by the file separator.
        """
        if options.summarize:
            return ReportService.summary(groups, unique=options.unique)

        sep, setsep = options.resolved_separators()
        parts = []

        for group in groups:
            if group.is_unique:
                parts.append(group.files[0].path + sep)
                continue

            files = group.files[1:] if options.omit_first else group.files
            if options.show_size:
                parts.append(ReportService.size_header(group.size))
            parts.append(sep.join(f.path for f in files))
            parts.append(setsep)

        return "".join(parts)
