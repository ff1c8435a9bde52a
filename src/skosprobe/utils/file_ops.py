"""Async file operations for the curation workflow.

Curation reads endpoint input configs and writes analysis snapshots; these
helpers keep that I/O off the event loop using aiofiles and asyncio.to_thread.
"""

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Any

import aiofiles
import orjson


async def read_json(file_path: str | Path) -> Any:
    """Asynchronously reads and parses a JSON file.

    Args:
        file_path: The path to the JSON file.

    Returns:
        The parsed JSON content.

    Raises:
        FileNotFoundError: If the file does not exist.
        orjson.JSONDecodeError: If the file content is not valid JSON.
    """
    async with aiofiles.open(file_path, mode="rb") as f:
        content = await f.read()
    return orjson.loads(content)


async def write_json(file_path: str | Path, data: Any, *, atomic: bool = True) -> None:
    """Asynchronously writes data as indented JSON.

    Args:
        file_path: The destination path.
        data: A JSON-serializable value.
        atomic: If True (default), writes through a temporary file and renames it.
    """
    content = orjson.dumps(data, option=orjson.OPT_INDENT_2)
    if atomic:
        await atomic_write_bytes(file_path, content)
    else:
        async with aiofiles.open(file_path, mode="wb") as f:
            await f.write(content)


async def atomic_write_bytes(file_path: str | Path, content: bytes) -> None:
    """Asynchronously writes bytes to a file atomically.

    The content goes to a temporary file in the target directory, which is then
    renamed over the destination, so readers never observe a partial file.

    Args:
        file_path: The destination path.
        content: The bytes to write.

    Raises:
        OSError: If writing or renaming fails.
    """
    file_path = Path(file_path)
    directory = file_path.parent
    await mkdir(directory)

    fd, temp_path = await asyncio.to_thread(tempfile.mkstemp, dir=directory)
    try:
        await asyncio.to_thread(os.close, fd)
        async with aiofiles.open(temp_path, mode="wb") as f:
            await f.write(content)
            await f.flush()
            await asyncio.to_thread(os.fsync, f.fileno())
        await asyncio.to_thread(os.replace, temp_path, file_path)
    except Exception:
        if await file_exists(temp_path):
            await asyncio.to_thread(os.unlink, temp_path)
        raise


async def file_exists(file_path: str | Path) -> bool:
    """Asynchronously checks if a regular file exists."""
    return await asyncio.to_thread(os.path.isfile, file_path)


async def dir_exists(dir_path: str | Path) -> bool:
    """Asynchronously checks if a directory exists."""
    return await asyncio.to_thread(os.path.isdir, dir_path)


async def mkdir(path: str | Path) -> None:
    """Asynchronously creates a directory and its parents if missing."""
    await asyncio.to_thread(os.makedirs, path, exist_ok=True)


async def list_subdirs(root: str | Path) -> list[Path]:
    """Asynchronously lists the immediate subdirectories of a directory.

    Args:
        root: The directory to scan.

    Returns:
        Subdirectory paths sorted by name.
    """
    root = Path(root)

    def _scan() -> list[Path]:
        return sorted(p for p in root.iterdir() if p.is_dir())

    return await asyncio.to_thread(_scan)
