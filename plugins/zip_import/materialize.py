"""Directory materialization.

ASCII-only.
"""

from __future__ import annotations

from vaultimport.core.errors import AlreadyExistsError, DirectoryError, StorageError
from vaultimport.core.interfaces import IStorage
from vaultimport.core.logging import get_logger

from .models import DestinationPath
from .paths import join_path

log = get_logger(__name__)


async def ensure_dir(storage: IStorage, path: str) -> bool:
    """Make sure a folder exists.

    The backend creates missing ancestors. A folder that already exists is
    success.

    Returns:
        True if the folder was created by this call, False if it already
        existed or path is the vault root.

    Raises:
        DirectoryError: The backend refused for any other reason.
    """
    key = join_path(path)
    if not key:
        return False

    try:
        await storage.create_folder(key)
    except AlreadyExistsError:
        log.debug(f"zip_import.ensure_dir status=exists path={key!r}")
        return False
    except StorageError as e:
        raise DirectoryError(key, e.message) from e

    log.debug(f"zip_import.ensure_dir status=created path={key!r}")
    return True


async def ensure_parent(storage: IStorage, destination: DestinationPath) -> bool:
    return await ensure_dir(storage, destination.parent)
