import lzma
import os
from pathlib import Path
from typing import List

import pytest

from aliasguard.models import AliasDefinition
from aliasguard.retention import RetentionEngine, RetentionPolicy


def fake_compress(path: Path) -> bool:
    """Behaves like `xz FILE`: writes FILE.xz and removes FILE, refusing to overwrite"""
    target = path.with_name(path.name + ".xz")
    if target.exists():
        return False
    target.write_bytes(lzma.compress(path.read_bytes()))
    os.utime(target, ns=(path.stat().st_atime_ns, path.stat().st_mtime_ns))
    path.unlink()
    return True


def fake_decompress(path: Path) -> bool:
    """Behaves like `xz -d -k -f FILE.xz`"""
    if not path.exists():
        return False
    target = path.with_name(path.name[:-3])
    target.write_bytes(lzma.decompress(path.read_bytes()))
    os.utime(target, ns=(path.stat().st_atime_ns, path.stat().st_mtime_ns))
    return True


def failing_codec(path: Path) -> bool:
    return False


@pytest.fixture
def alias() -> AliasDefinition:
    return AliasDefinition(name="ll", command="ls -la", description="long listing")


@pytest.fixture
def tracked_file(tmp_path) -> Path:
    path = tmp_path / "home" / ".bashrc"
    path.parent.mkdir()
    path.write_text("export PATH=$HOME/bin:$PATH\nalias ll='ls -la'\n")
    return path


@pytest.fixture
def backup_dir(tmp_path) -> Path:
    return tmp_path / "backups"


@pytest.fixture
def engine(tracked_file, backup_dir) -> RetentionEngine:
    return RetentionEngine(
        tracked_file,
        backup_root=backup_dir,
        policy=RetentionPolicy(recent_count=10, max_total=20),
        compress=fake_compress,
        decompress=fake_decompress,
    )


@pytest.fixture
def make_snapshots(tracked_file, backup_dir):
    """Create `count` snapshots, one minute apart, oldest first"""

    def _make(count: int) -> List[Path]:
        backup_dir.mkdir(exist_ok=True)
        base = 1_700_000_000
        paths = []
        for i in range(count):
            path = backup_dir / f"{tracked_file.name}.bak20231114_{i:06d}"
            path.write_text(f"snapshot {i}\n")
            mtime = base + i * 60
            os.utime(path, (mtime, mtime))
            paths.append(path)
        return paths

    return _make
