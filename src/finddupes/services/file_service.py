# src/finddupes/services/file_service.py
import logging
from typing import List, Tuple
from send2trash import send2trash

logger = logging.getLogger(__name__)


class FileService:
    @staticmethod
    def move_to_trash(file_path: str):
        """Move file to system trash (safe deletion). Requires send2trash."""
        try:
            send2trash(file_path)
        except Exception as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e

    @classmethod
    def move_multiple_to_trash(cls, file_paths: List[str]) -> Tuple[int, List[Tuple[str, str]]]:
        """
        Move multiple files to trash, continuing past individual failures.
        Returns:
            (number of files moved, list of (path, error) for the failures)
        """
        moved = 0
        errors = []
        for path in file_paths:
            try:
                cls.move_to_trash(path)
                moved += 1
                logger.debug(f"Moved to trash: {path}")
            except Exception as e:
                logger.warning(f"Failed to delete {path}: {e}")
                errors.append((path, str(e)))
        return moved, errors
