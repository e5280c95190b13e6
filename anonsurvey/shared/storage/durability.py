"""Filesystem durability helpers shared by both stores."""
import os
from pathlib import Path
from typing import Union


def fsync_directory(directory: Union[str, Path]) -> None:
    """Flush a directory's entries to disk.

    A rename or a newly created file is only durable once its parent
    directory has been fsynced.

    Raises:
        OSError: If the directory cannot be opened or flushed
    """
    fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)
