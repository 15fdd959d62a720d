"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Implements the traversal that feeds FileRecords into the duplicate finder.
Features:
- Accepts any mix of files and directories given by the user
- Optionally recurses into subdirectories
- Optionally follows symbolic links (to files and to directories)
- Never revisits a directory already walked (symlink loops)
- Yields records lazily, in sorted order within each directory
"""

import os
import stat
import time
import logging
from typing import List, Optional, Callable, Iterator, Set, Tuple

from finddupes.core.models import FileRecord, FileKind
from finddupes.core.interfaces import FileScanner

logger = logging.getLogger(__name__)


class FileScannerImpl(FileScanner):
    """
    Walks user-specified paths and emits one FileRecord per regular file,
    plus one per symlink to a regular file when symlink following is enabled.
    Directories and special files are never emitted.

    Attributes:
        paths: Files and/or directories given by the user
        recurse: Descend into subdirectories of the given directories
        follow_symlinks: Emit symlinked files and descend into symlinked directories
        exclude_empty: Skip zero-length files
    """

    PROGRESS_INTERVAL = 1000  # report every N entries

    def __init__(
        self,
        paths: List[str],
        recurse: bool = False,
        follow_symlinks: bool = False,
        exclude_empty: bool = False,
    ):
        self.paths = list(paths)
        self.recurse = recurse
        self.follow_symlinks = follow_symlinks
        self.exclude_empty = exclude_empty

    def scan(self,
             progress_callback: Optional[Callable[[str, int, object], None]] = None) -> List[FileRecord]:
        """Collect every record into a list."""
        return list(self.iter_records(progress_callback=progress_callback))

    def iter_records(self,
                     progress_callback: Optional[Callable[[str, int, object], None]] = None
                     ) -> Iterator[FileRecord]:
        """
        Single-pass traversal yielding records as they are found.
        Inaccessible paths are logged and skipped; traversal always continues.
        """
        logger.debug(f"Starting scan of {len(self.paths)} path(s)")
        logger.debug(f"Options: recurse={self.recurse}, follow_symlinks={self.follow_symlinks}, "
                     f"exclude_empty={self.exclude_empty}")

        start_time = time.time()
        visited_dirs: Set[Tuple[int, int]] = set()
        processed = 0
        found = 0

        for path in self.paths:
            try:
                info = os.stat(path)
            except OSError as e:
                logger.warning(f"stat failed: {path}: {e.strerror or e}")
                continue

            if stat.S_ISDIR(info.st_mode):
                entries = self._walk_dir(self._normalize_dir(path), visited_dirs)
            else:
                entries = iter([path])

            for entry in entries:
                record = self._process_file(entry)
                processed += 1
                if record is not None:
                    found += 1
                    yield record

                if progress_callback and processed % self.PROGRESS_INTERVAL == 0:
                    progress_callback('scanning', processed, None)

        if progress_callback:
            progress_callback('scanning', processed, None)

        logger.debug(f"Scan completed in {time.time() - start_time:.2f}s. "
                     f"Found {found} candidate files out of {processed} entries.")

    @staticmethod
    def _normalize_dir(path: str) -> str:
        # strip a trailing separator so lstat() sees a symlinked dir as a link
        stripped = path.rstrip(os.sep)
        return stripped or path

    def _walk_dir(self, top: str, visited_dirs: Set[Tuple[int, int]]) -> Iterator[str]:
        """
        Yield paths of every non-directory entry under `top`.
        Directory symlinks are only entered when following symlinks.
        """
        try:
            if os.path.islink(top) and not self.follow_symlinks:
                logger.debug(f"Skipping symlinked directory: {top}")
                return
            top_info = os.stat(top)
        except OSError as e:
            logger.warning(f"stat failed: {top}: {e.strerror or e}")
            return

        dir_key = (top_info.st_dev, top_info.st_ino)
        if dir_key in visited_dirs:
            logger.debug(f"Directory already visited, skipping: {top}")
            return
        visited_dirs.add(dir_key)

        try:
            with os.scandir(top) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.warning(f"could not open directory {top}: {e.strerror or e}")
            return

        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=True)
            except OSError as e:
                logger.warning(f"stat failed: {entry.path}: {e.strerror or e}")
                continue

            if is_dir:
                if self.recurse:
                    yield from self._walk_dir(entry.path, visited_dirs)
                continue

            yield entry.path

    def _process_file(self, path: str) -> Optional[FileRecord]:
        """
        Build a FileRecord for a non-directory path, or None if it is not a candidate.
        """
        try:
            link_info = os.lstat(path)
        except OSError as e:
            logger.warning(f"lstat failed: {path}: {e.strerror or e}")
            return None

        if stat.S_ISLNK(link_info.st_mode):
            if not self.follow_symlinks:
                logger.debug(f"Skipping symbolic link: {path}")
                return None
            try:
                info = os.stat(path)
            except OSError as e:
                logger.warning(f"stat failed: {path}: {e.strerror or e}")
                return None
            if not stat.S_ISREG(info.st_mode):
                logger.debug(f"Skipping symlink to non-regular file: {path}")
                return None
            kind = FileKind.SYMLINK
        elif stat.S_ISREG(link_info.st_mode):
            info = link_info
            kind = FileKind.REGULAR
        else:
            logger.debug(f"Skipping special file: {path}")
            return None

        if info.st_size == 0 and self.exclude_empty:
            logger.debug(f"Skipping zero-byte file: {path}")
            return None

        return FileRecord(
            path=path,
            size=info.st_size,
            inode=info.st_ino,
            device=info.st_dev,
            kind=kind,
        )
