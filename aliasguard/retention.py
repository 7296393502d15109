"""Snapshot retention: keep recent backups raw, compress older ones, delete the rest"""

import logging
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from aliasguard.errors import IOFailure, NotFoundError, Outcome

logger = logging.getLogger(__name__)

SNAPSHOT_MARKER = ".bak"
COMPRESSED_SUFFIX = ".xz"
DEFAULT_BACKUP_DIRNAME = ".shellbackup"

# Takes a path, returns True on success
Codec = Callable[[Path], bool]


def _run_xz(args: List[str]) -> bool:
    try:
        result = subprocess.run(args, capture_output=True, text=True)
    except OSError as e:
        logger.warning("Could not run %s: %s", args[0], e)
        return False
    if result.returncode != 0:
        logger.warning("%s exited with %d: %s", " ".join(args), result.returncode, result.stderr.strip())
    return result.returncode == 0


def xz_compress(path: Path) -> bool:
    """Replace `path` with `path.xz` using maximum compression"""
    return _run_xz(["xz", "-9e", str(path)])


def xz_decompress(path: Path) -> bool:
    """Write the decompressed sibling of `path`, keeping the archive"""
    return _run_xz(["xz", "-d", "-k", "-f", str(path)])


@dataclass(frozen=True)
class RetentionPolicy:
    """How many snapshots stay raw and how many are kept at all"""
    recent_count: int = 10
    max_total: int = 20

    def __post_init__(self):
        if self.recent_count < 0 or self.max_total <= 0:
            raise ValueError("Retention counts must be positive")
        if self.recent_count > self.max_total:
            raise ValueError(
                f"recent_count ({self.recent_count}) cannot exceed max_total ({self.max_total})"
            )


@dataclass
class RotationReport:
    """What a rotation pass did to each snapshot"""
    kept: List[Path] = field(default_factory=list)
    compressed: List[Path] = field(default_factory=list)
    deleted: List[Path] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def deleted_count(self) -> int:
        return len(self.deleted)

    @property
    def ok(self) -> bool:
        return not self.errors


def is_compressed(path: Path) -> bool:
    return path.name.endswith(COMPRESSED_SUFFIX)


class RetentionEngine:
    """Classify and maintain the snapshots of one tracked file.

    Nothing is cached: every query lists the backup directory again.
    """

    def __init__(
        self,
        tracked_path: Path,
        backup_root: Optional[Path] = None,
        policy: Optional[RetentionPolicy] = None,
        compress: Codec = xz_compress,
        decompress: Codec = xz_decompress,
    ):
        self.tracked_path = Path(tracked_path)
        self.backup_root = Path(backup_root) if backup_root else None
        self.policy = policy or RetentionPolicy()
        self.compress = compress
        self.decompress = decompress

    @property
    def snapshot_prefix(self) -> str:
        """e.g. '.bashrc.bak' for ~/.bashrc"""
        return f"{self.tracked_path.name}{SNAPSHOT_MARKER}"

    def backup_directory(self) -> Path:
        """Backup root, created owner-only on first use.

        Falls back to the tracked file's parent directory when the root
        cannot be created.
        """
        try:
            root = self.backup_root or Path.home() / DEFAULT_BACKUP_DIRNAME
            if not root.exists():
                root.mkdir(parents=True)
                root.chmod(0o700)
            return root
        except (OSError, RuntimeError) as e:
            fallback = self.tracked_path.parent
            logger.warning("Failed to create backup directory (%s), using %s", e, fallback)
            return fallback

    def list_snapshots(self) -> List[Path]:
        """All snapshot files for the tracked file, in directory order"""
        snapshots, _ = self._scan()
        return snapshots

    def _scan(self) -> Tuple[List[Path], Optional[str]]:
        directory = self.backup_directory()
        prefix = self.snapshot_prefix
        try:
            snapshots = [
                entry for entry in directory.iterdir()
                if prefix in entry.name and entry.is_file()
            ]
        except OSError as e:
            message = f"Failed to list backups: {e}"
            logger.warning(message)
            return [], message
        return snapshots, None

    def ordered_snapshots(self) -> List[Tuple[Path, int]]:
        """Snapshots with their mtime (ns), newest first.

        Entries whose mtime cannot be read are dropped. Equal mtimes are
        ordered by name, newest timestamp first.
        """
        snapshots, _ = self._scan()
        return self._order(snapshots)

    @staticmethod
    def _order(snapshots: List[Path]) -> List[Tuple[Path, int]]:
        timed = []
        for path in snapshots:
            try:
                timed.append((path, path.stat().st_mtime_ns))
            except OSError:
                logger.debug("Skipping %s: cannot read modification time", path)
                continue
        return sorted(timed, key=lambda item: (item[1], item[0].name), reverse=True)

    def rotate(self, max_total: Optional[int] = None) -> RotationReport:
        """Run one retention pass over the backup directory.

        Ranks below ``recent_count`` stay as they are, ranks up to
        ``max_total`` get compressed, anything older is deleted. A failed
        compression is recorded and the pass carries on.
        """
        if max_total is None or max_total <= 0:
            max_total = self.policy.max_total
        recent_count = self.policy.recent_count

        report = RotationReport()
        snapshots, scan_error = self._scan()
        if scan_error:
            report.errors.append(scan_error)

        for rank, (path, _) in enumerate(self._order(snapshots)):
            if rank >= max_total:
                try:
                    path.unlink()
                except OSError as e:
                    logger.warning("Could not delete old backup %s: %s", path, e)
                    continue
                logger.debug("Deleted backup %s (rank %d)", path, rank)
                report.deleted.append(path)
            elif rank >= recent_count and not is_compressed(path):
                archive = _compressed_sibling(path)
                if archive.exists():
                    # leftover raw copy of an archive, e.g. from an interrupted restore
                    logger.debug("Dropping %s, %s already exists", path, archive)
                    _discard(path)
                elif self.compress(path):
                    logger.debug("Compressed backup %s (rank %d)", path, rank)
                    report.compressed.append(archive)
                else:
                    report.errors.append(f"Failed to compress backup: {path}")
            else:
                report.kept.append(path)

        return report

    def most_recent(self) -> Optional[Path]:
        """Newest snapshot, or None if there are none"""
        ordered = self.ordered_snapshots()
        return ordered[0][0] if ordered else None

    def restore(self, snapshot_path: Path) -> Outcome[Path]:
        """Copy a snapshot over the tracked file, decompressing it first if needed"""
        snapshot_path = Path(snapshot_path)
        if not is_compressed(snapshot_path):
            return self._copy_over_tracked(snapshot_path)

        source = _raw_sibling(snapshot_path)
        if not self.decompress(snapshot_path):
            return Outcome.failure(IOFailure(f"Failed to decompress backup: {snapshot_path}"))
        try:
            restored = self._copy_over_tracked(source)
        finally:
            # the archive is kept; a raw copy beside it would take a retention slot
            _discard(source)
        if not restored.ok:
            return restored
        return Outcome.success(snapshot_path)

    def _copy_over_tracked(self, source: Path) -> Outcome[Path]:
        if not source.is_file():
            return Outcome.failure(NotFoundError(f"Backup file does not exist: {source}"))
        try:
            shutil.copyfile(source, self.tracked_path)
        except OSError as e:
            return Outcome.failure(IOFailure(f"Failed to restore from backup: {e}"))
        logger.debug("Restored %s from %s", self.tracked_path, source)
        return Outcome.success(source)


def _raw_sibling(archive: Path) -> Path:
    return archive.with_name(archive.name[: -len(COMPRESSED_SUFFIX)])


def _compressed_sibling(path: Path) -> Path:
    return path.with_name(path.name + COMPRESSED_SUFFIX)


def _discard(path: Path) -> bool:
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning("Could not remove %s: %s", path, e)
        return False
    return True
