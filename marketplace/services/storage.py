"""
Local filesystem blob store for uploaded property images.
Files are written under the upload directory and served by URL through the static mount.
"""

from pathlib import Path
from typing import Optional
import logging
import os
import uuid

import aiofiles

from marketplace.utils.file_utils import sanitize_filename

logger = logging.getLogger(__name__)


class LocalBlobStore:
    """
    Save and delete files by URL.

    A file saved as ``properties/<uuid>_<name>`` under ``root_dir`` is
    addressed as ``<url_prefix>/properties/<uuid>_<name>``.
    """

    def __init__(self, root_dir: str, url_prefix: str = "/uploads", folder: str = "properties"):
        self.root_dir = Path(root_dir).resolve()
        self.url_prefix = "/" + url_prefix.strip("/")
        self.folder = folder

    async def save(self, content: bytes, suggested_name: str) -> str:
        """
        Store ``content`` under a unique name.

        Args:
            content: File bytes
            suggested_name: Original filename, kept as a suffix

        Returns:
            Public URL of the stored file
        """
        name = f"{uuid.uuid4()}_{sanitize_filename(suggested_name)}"
        directory = self.root_dir / self.folder
        directory.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(directory / name, "wb") as f:
            await f.write(content)

        url = f"{self.url_prefix}/{self.folder}/{name}"
        logger.debug(f"Stored {len(content)} bytes at {url}")
        return url

    def path_for(self, url: str) -> Optional[Path]:
        """
        Map a URL back to a path inside the store.

        Returns:
            Path, or None if the URL does not point inside the store
        """
        if not url or not url.startswith(self.url_prefix + "/"):
            return None

        relative = url[len(self.url_prefix) + 1:]
        path = (self.root_dir / relative).resolve()
        if self.root_dir not in path.parents:
            return None
        return path

    def delete(self, url: str) -> bool:
        """
        Best-effort removal of the file behind ``url``.

        A missing file is not an error. Failures are logged and never raised.

        Returns:
            True if a file was removed
        """
        path = self.path_for(url)
        if path is None:
            logger.warning(f"Refusing to delete file outside the upload store: {url}")
            return False

        try:
            os.remove(path)
            logger.debug(f"Deleted file {path}")
            return True
        except FileNotFoundError:
            logger.debug(f"File already gone: {path}")
            return False
        except OSError as e:
            logger.warning(f"Failed to delete file {path}: {e}")
            return False
