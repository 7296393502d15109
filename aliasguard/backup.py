"""Take a snapshot of the tracked file before it is modified"""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from aliasguard.errors import IOFailure, NotFoundError, Outcome
from aliasguard.retention import SNAPSHOT_MARKER, RetentionEngine, RetentionPolicy

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


class BackupOrchestrator:
    """Create timestamped snapshots and hand rotation to the retention engine"""

    def __init__(
        self,
        tracked_path: Path,
        engine: Optional[RetentionEngine] = None,
        backup_root: Optional[Path] = None,
        policy: Optional[RetentionPolicy] = None,
    ):
        self.tracked_path = Path(tracked_path)
        self.engine = engine or RetentionEngine(self.tracked_path, backup_root=backup_root, policy=policy)

    def snapshot_path(self, when: Optional[datetime] = None) -> Path:
        """Where a snapshot taken at `when` is written"""
        timestamp = (when or datetime.now()).strftime(TIMESTAMP_FORMAT)
        filename = f"{self.tracked_path.name}{SNAPSHOT_MARKER}{timestamp}"
        return self.engine.backup_directory() / filename

    def snapshot(self) -> Outcome[Path]:
        """Copy the tracked file into the backup directory and rotate.

        Compression problems during rotation come back as warnings on a
        successful outcome.
        """
        if not self.tracked_path.exists():
            return Outcome.failure(NotFoundError(f"Original file does not exist: {self.tracked_path}"))

        backup_path = self.snapshot_path()
        try:
            # not copy2: the snapshot's mtime must be the time it was taken
            shutil.copy(self.tracked_path, backup_path)
        except OSError as e:
            return Outcome.failure(IOFailure(f"Failed to create backup: {e}"))

        report = self.engine.rotate(self.engine.policy.max_total)
        for error in report.errors:
            logger.warning(error)
        if report.deleted:
            logger.info("Removed %d old backup(s) of %s", report.deleted_count, self.tracked_path.name)

        return Outcome.success(backup_path, warnings=report.errors)

    def list_snapshots(self) -> List[Tuple[Path, datetime]]:
        """Snapshots with their modification time, newest first"""
        return [
            (path, datetime.fromtimestamp(mtime_ns / 1e9))
            for path, mtime_ns in self.engine.ordered_snapshots()
        ]

    def most_recent(self) -> Optional[Path]:
        return self.engine.most_recent()

    def restore(self, snapshot_path: Path) -> Outcome[Path]:
        return self.engine.restore(snapshot_path)

    def restore_latest(self) -> Outcome[Path]:
        """Restore from the newest snapshot"""
        latest = self.most_recent()
        if latest is None:
            return Outcome.failure(NotFoundError("No backup found"))
        return self.restore(latest)
