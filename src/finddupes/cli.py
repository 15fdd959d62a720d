#!/usr/bin/env python3
"""
finddupes CLI — Command line interface for duplicate file detection.
Lists sets of identical files; can optionally keep one file per set and move the rest to trash.
Deletion never erases permanently and never prompts: it requires --noprompt.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import sys
import os
import time
from typing import List, Optional, NoReturn
import logging

LOG_FORMAT = "%(levelname)-8s | %(name)-25s | %(message)s"

# === EARLY DEPENDENCY VALIDATION ===
_MISSING_DEPS = []
try:
    from send2trash import send2trash
except ImportError:
    _MISSING_DEPS.append("send2trash")

try:
    import xxhash
except ImportError:
    _MISSING_DEPS.append("xxhash")

if _MISSING_DEPS:
    print("❌ Missing required dependencies:", file=sys.stderr)
    print(f"   pip install {' '.join(_MISSING_DEPS)}", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from finddupes import __version__
from finddupes.core.models import FinderParams, ReportOptions, DuplicateGroup
from finddupes.commands import DeduplicationCommand
from finddupes.utils.convert_utils import ConvertUtils
from finddupes.utils.escapes import unescape
from finddupes.services.file_service import FileService
from finddupes.services.duplicate_service import DuplicateService
from finddupes.services.report_service import ReportService

logger = logging.getLogger("finddupes.cli")

EPILOG_TEXT = """
Examples:
  List duplicates in two directory trees
  %(prog)s -r ~/Photos /mnt/backup/Photos

  One set per line, with sizes, ignoring empty files
  %(prog)s -r -1 -S -n ~/Downloads

  Files that have no duplicate anywhere under the tree
  %(prog)s -r -u ~/Documents

  Keep the first file of every set, move the others to trash (for scripts)
  %(prog)s -r -d -N ~/Downloads > ~/Downloads/report.txt
"""


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self._progress_shown: bool = False

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="finddupes",
            description="finddupes — find duplicate files",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "paths",
            nargs="+",
            metavar="PATH",
            help="Files and directories to examine"
        )

        # Traversal options
        parser.add_argument(
            "--recurse", "--recursive", "-r",
            action="store_true",
            help="For every directory given, follow subdirectories encountered within"
        )
        parser.add_argument(
            "--symlinks", "-s",
            action="store_true",
            dest="symlinks",
            help="Follow symlinks"
        )
        parser.add_argument(
            "--hardlinks", "-H",
            action="store_true",
            dest="hardlinks",
            help="Normally, when two or more files point to the same disk area\n"
                 "they are treated as non-duplicates; this option changes that"
        )
        parser.add_argument(
            "--noempty", "-n",
            action="store_true",
            help="Exclude zero-length files from consideration"
        )

        # Output options
        parser.add_argument(
            "--omitfirst", "-f",
            action="store_true",
            help="Omit the first file in each set of matches"
        )
        parser.add_argument(
            "--sameline", "-1",
            action="store_true",
            help="List each set of matches on a single line"
        )
        parser.add_argument(
            "--size", "-S",
            action="store_true",
            dest="show_size",
            help="Show also size of duplicate files"
        )
        parser.add_argument(
            "--unique", "-u",
            action="store_true",
            help="List only files that don't have duplicates"
        )
        parser.add_argument(
            "--summarize", "--summary", "-m",
            action="store_true",
            help="Summarize duplicate information"
        )
        parser.add_argument(
            "--separator", "-p",
            metavar="SEP",
            default=None,
            help="Separate files with SEP instead of '\\n' (C escapes allowed)"
        )
        parser.add_argument(
            "--setseparator", "-P",
            metavar="SEP",
            default=None,
            help="Separate sets with SEP instead of '\\n\\n' (C escapes allowed)"
        )

        # Actions
        parser.add_argument(
            "--delete", "-d",
            action="store_true",
            help="Keep the first file of each set and move the rest to trash;\n"
                 "requires --noprompt"
        )
        parser.add_argument(
            "--noprompt", "-N",
            action="store_true",
            help="Together with --delete, act without asking for confirmation"
        )

        # Execution options
        parser.add_argument(
            "--workers", "-j",
            type=int,
            default=1,
            metavar="N",
            help="Hash files with N threads (default: 1)"
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Hide progress indicator"
        )
        parser.add_argument(
            "--verbose",
            action="store_true",
            help="Show detailed statistics and debug logging"
        )
        parser.add_argument(
            "--version", "-v",
            action="version",
            version=f"%(prog)s {__version__}"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.noprompt and not args.delete:
            self.error_exit("--noprompt can only be used with --delete")

        if args.delete and not args.noprompt:
            self.error_exit(
                "Interactive deletion is not supported.\n"
                "Use --delete --noprompt to keep the first file of each set and trash the rest."
            )

        if args.delete and args.unique:
            self.error_exit("--delete cannot be combined with --unique")

        if args.delete and args.symlinks:
            self.warning("Deleting with --symlinks: symlinked copies are removed, their targets are kept")

        if args.workers < 1:
            self.error_exit("--workers must be at least 1")

        if not any(os.path.lexists(p) for p in args.paths):
            self.error_exit("None of the given paths exist")

        for path in args.paths:
            if not os.path.lexists(path):
                self.warning(f"Path not found: {path}")

    def create_params(self, args: argparse.Namespace) -> FinderParams:
        """Create FinderParams from CLI arguments."""
        try:
            return FinderParams(
                paths=list(args.paths),
                recurse=args.recurse,
                follow_symlinks=args.symlinks,
                consider_hardlinks=args.hardlinks,
                exclude_empty=args.noempty,
                unique=args.unique,
                workers=args.workers,
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def create_report_options(self, args: argparse.Namespace) -> ReportOptions:
        """Create ReportOptions, decoding escapes in the separators."""
        separator = set_separator = None
        try:
            if args.separator is not None:
                separator = unescape(args.separator)
        except ValueError:
            self.error_exit("invalid format in separator string")
        try:
            if args.setseparator is not None:
                set_separator = unescape(args.setseparator)
        except ValueError:
            self.error_exit("invalid format in setseparator string")

        return ReportOptions(
            omit_first=args.omitfirst,
            same_line=args.sameline,
            show_size=args.show_size,
            summarize=args.summarize,
            unique=args.unique,
            separator=separator,
            set_separator=set_separator,
        )

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress in console."""
        if self.quiet:
            return

        if total and total > 0:
            percent = (current / total) * 100
            sys.stderr.write(f"\r  [{stage}] {current}/{total} ({percent:.1f}%)   ")
        else:
            sys.stderr.write(f"\r  [{stage}] {current} files processed...   ")
        sys.stderr.flush()
        self._progress_shown = True

    def clear_progress(self) -> None:
        if self._progress_shown:
            sys.stderr.write(f"\r{' ' * 60}\r")
            sys.stderr.flush()
            self._progress_shown = False

    def run_search(self, params: FinderParams) -> List[DuplicateGroup]:
        """Execute the search workflow."""
        command = DeduplicationCommand()
        try:
            groups, stats = command.execute(
                params,
                progress_callback=None if self.quiet else self.progress_callback,
            )
        except Exception as e:
            self.clear_progress()
            self.error_exit(f"Search failed: {e}")

        self.clear_progress()
        if self.verbose:
            print(stats.print_summary(), file=sys.stderr)
        return groups

    def output_results(self, groups: List[DuplicateGroup], options: ReportOptions) -> None:
        """Write groups to stdout in the requested layout."""
        sys.stdout.write(ReportService.render(groups, options))
        sys.stdout.flush()

    def execute_delete(self, groups: List[DuplicateGroup]) -> int:
        """Keep one file per group, move the rest to trash. Returns the number of failures."""
        groups = [g for g in groups if g.is_duplicate()]
        files_to_delete, kept_groups = DuplicateService.keep_only_one_file_per_group(groups)

        if not files_to_delete:
            return 0

        space_saved = sum(g.size * (g.duplicate_count - 1) for g in groups)

        for group, kept_group in zip(groups, kept_groups):
            keep = kept_group.files[0]
            print(f"   [+] {keep.path}")
            for file in group.files:
                if file is not keep:
                    print(f"   [-] {file.path}")
            print()

        moved, failed_files = FileService.move_multiple_to_trash(files_to_delete)

        if failed_files:
            print(f"⚠️  Partial success: {moved}/{len(files_to_delete)} files moved to trash.")
            for path, error in failed_files[:5]:
                print(f"  • {os.path.basename(path)}: {error.split(':')[-1].strip()}")
            if len(failed_files) > 5:
                print(f"  ...and {len(failed_files) - 5} more files")
        else:
            print(f"✅ Moved {moved} files to trash, {ConvertUtils.bytes_to_human(space_saved)} freed.")

        return len(failed_files)

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    @staticmethod
    def configure_logging(verbose: bool, quiet: bool) -> None:
        if verbose:
            level = logging.DEBUG
        elif quiet:
            level = logging.ERROR
        else:
            level = logging.WARNING
        logging.basicConfig(level=level, format=LOG_FORMAT, force=True)

    def run(self, argv=None) -> int:
        """Main entry point. Returns the process exit code."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        self.configure_logging(self.verbose, self.quiet)

        self.validate_args(args)
        params = self.create_params(args)
        options = self.create_report_options(args)

        groups = self.run_search(params)

        if args.delete:
            failures = self.execute_delete(groups)
            exit_code = 1 if failures else 0
        else:
            self.output_results(groups, options)
            exit_code = 0

        if self.verbose:
            elapsed = time.time() - self.start_time
            print(f"Completed in {elapsed:.2f} seconds", file=sys.stderr)
        return exit_code


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        sys.exit(app.run())
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
