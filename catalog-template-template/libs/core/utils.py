"""
Core Utilities

Common utility functions used across the catalog template generator.
"""

import logging
import os
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Union

from .exceptions import FileOperationError


def setup_logging(debug: bool = False) -> None:
    """
    Set up logging configuration for the application.
    Separates WARNING/INFO to stdout and ERROR to stderr.

    Args:
        debug: Enable debug logging level
    """
    level = logging.DEBUG if debug else logging.INFO

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # stdout gets everything below ERROR
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(level)
    stdout_handler.setFormatter(formatter)
    stdout_handler.addFilter(lambda record: record.levelno < logging.ERROR)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)
    stderr_handler.setFormatter(formatter)

    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(stderr_handler)

    if debug:
        logger = logging.getLogger(__name__)
        logger.debug("Debug mode enabled")


def write_file_atomic(path: Path, content: Union[str, bytes]) -> Path:
    """
    Write content to path via a temporary sibling file and an atomic rename.

    A reader never observes a partially written file under the final name.

    Args:
        path: Destination file path
        content: Text (written as UTF-8) or raw bytes

    Returns:
        Path: The destination path

    Raises:
        FileOperationError: If the directory cannot be created or the write fails
    """
    path = Path(path)
    data = content.encode('utf-8') if isinstance(content, str) else content

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileOperationError(f"could not create output directory {path.parent}: {e}") from e

    temp_name = None
    try:
        fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        # mkstemp creates files 0600
        os.chmod(temp_name, 0o644)
        os.replace(temp_name, path)
    except OSError as e:
        if temp_name is not None:
            try:
                os.unlink(temp_name)
            except FileNotFoundError:
                pass
        raise FileOperationError(f"could not write output file {path}: {e}") from e

    return path


def clear_directory(path: Path) -> None:
    """
    Remove a directory tree if it exists

    Raises:
        FileOperationError: If the tree cannot be removed
    """
    path = Path(path)
    if not path.exists():
        return
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FileOperationError(f"could not clear output directory {path}: {e}") from e


def read_text_file(path: Path) -> str:
    """Read a UTF-8 text file, mapping OS errors to FileOperationError"""
    try:
        return Path(path).read_text(encoding='utf-8')
    except OSError as e:
        raise FileOperationError(f"could not read {path}: {e}") from e
