import logging
import os

import aiofiles

from training_app.core.config import settings
from training_app.core.exceptions import ValidationError
from training_app.services.state_store import StateStore, snapshot_filename

logger = logging.getLogger(__name__)


async def archive_snapshot(store: StateStore, directory: str = None) -> str:
    """
    Write the current export blob into the backup directory and return its file name.
    """
    directory = directory or settings.BACKUP_DIRECTORY
    os.makedirs(directory, exist_ok=True)

    filename = snapshot_filename()
    file_path = os.path.join(directory, filename)
    async with aiofiles.open(file_path, "wb") as out_file:
        await out_file.write(store.export_snapshot())

    logger.info("Archived snapshot to %s", file_path)
    return filename


def get_archive_path(filename: str, directory: str = None) -> str:
    """Resolve an archived snapshot for download; rejects path tricks and unknown files."""
    directory = directory or settings.BACKUP_DIRECTORY
    if ".." in filename or "/" in filename or "\\" in filename:
        raise ValidationError("Invalid backup file name.")

    file_path = os.path.join(directory, filename)
    if not os.path.isfile(file_path):
        raise FileNotFoundError(filename)
    return file_path
