"""
Manifest file persistence — atomic write and read for BackupManifest.

One file per calendar day: ``backup-YYYYMMDD.json``. A same-day rerun
overwrites the earlier file. Writes are atomic (write to temp file,
then rename) so an interrupted run never leaves half a manifest behind.
"""

from __future__ import annotations

import json
import logging
import re
import tempfile
from datetime import date
from pathlib import Path

from dotbackup.core.models.manifest import BackupManifest

logger = logging.getLogger(__name__)

_MANIFEST_RE = re.compile(r"^backup-(\d{8})\.json$")


def manifest_filename(day: date) -> str:
    """File name of the manifest for a given day."""
    return f"backup-{day.strftime('%Y%m%d')}.json"


def save_manifest(manifest: BackupManifest, path: Path) -> None:
    """Save a manifest as pretty-printed JSON (atomic write).

    Args:
        manifest: The manifest to save.
        path: Target path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    data = manifest.model_dump(mode="json")
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    try:
        _fd, tmp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=".manifest_",
            suffix=".tmp",
        )
        tmp = Path(tmp_path)
        try:
            with open(_fd, "w", encoding="utf-8") as f:
                f.write(content)
            tmp.replace(path)
            logger.debug("Manifest saved to %s", path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
    except Exception as e:
        logger.error("Failed to save manifest to %s: %s", path, e)
        raise


def load_manifest(path: Path) -> BackupManifest | None:
    """Load a manifest, or None when missing or unreadable."""
    if not path.is_file():
        logger.info("No manifest at %s", path)
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return BackupManifest.model_validate(data)
    except json.JSONDecodeError as e:
        logger.warning("Corrupt manifest %s: %s", path, e)
        return None
    except Exception as e:
        logger.warning("Cannot load manifest %s: %s", path, e)
        return None


def list_manifests(directory: Path) -> list[Path]:
    """Manifest files in *directory*, oldest first."""
    if not directory.is_dir():
        return []
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and _MANIFEST_RE.match(p.name)
    )


def manifest_date(path: Path) -> str | None:
    """The ``YYYYMMDD`` stamp encoded in a manifest file name."""
    m = _MANIFEST_RE.match(path.name)
    return m.group(1) if m else None
