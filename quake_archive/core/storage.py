"""
JSON snapshots of an archive.

The snapshot is a list of record dumps. Loading goes through
ArchivedRecord.restore so every record is rebound to live enrichment
services; persisted region and peak_intensity values are kept.
"""

import json
from pathlib import Path

from quake_archive.core.archive import Archive
from quake_archive.core.enrichment.services import EnrichmentServices
from quake_archive.observability.logger import get_logger, log_operation

logger = get_logger(__name__)


def save_archive(archive: Archive, path: str | Path) -> int:
    """
    Write every record of the archive to a JSON file.

    Args:
        archive: Archive to snapshot
        path: Destination file (parent directories are created)

    Returns:
        Number of records written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    records = archive.records()
    with log_operation("Saving archive snapshot", logger=logger, path=str(path), records=len(records)):
        payload = [record.model_dump(mode="json") for record in records]
        with open(path, "w") as f:
            json.dump(payload, f, indent=2)

    return len(records)


def load_archive(path: str | Path, services: EnrichmentServices, name: str = "default") -> Archive:
    """
    Rebuild an archive from a JSON snapshot.

    Args:
        path: Snapshot file written by save_archive
        services: Live enrichment helpers to bind every record to
        name: Name of the new archive

    Returns:
        Archive holding the restored records

    Raises:
        FileNotFoundError: If the snapshot does not exist
        ValueError: If the file is not a JSON list
        pydantic.ValidationError: If an entry is not a valid record
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Archive snapshot not found: {path}")

    with open(path) as f:
        payload = json.load(f)

    if not isinstance(payload, list):
        raise ValueError(f"Archive snapshot must be a JSON list, got {type(payload).__name__}")

    archive = Archive(services, name=name)
    with log_operation("Loading archive snapshot", logger=logger, path=str(path), records=len(payload)):
        for entry in payload:
            archive.restore(entry)

    return archive
