# ycb/core/clipboard.py
"""Copying entry images to the system clipboard."""

import asyncio
import logging
import os
import shutil
import sys
import tempfile
from pathlib import Path
from typing import List, Optional

import httpx

from .errors import ClipboardError

logger = logging.getLogger(__name__)

_EXTENSIONS = [
    ("png", ".png"),
    ("gif", ".gif"),
    ("webp", ".webp"),
]
_MIME_TYPES = {
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".jpg": "image/jpeg",
}


def extension_for(content_type: Optional[str]) -> str:
    content_type = (content_type or "").lower()
    for marker, extension in _EXTENSIONS:
        if marker in content_type:
            return extension
    return ".jpg"


async def download_image(http: httpx.AsyncClient, url: str) -> Path:
    """Fetch the image into a fresh temp directory and return the file path."""
    try:
        response = await http.get(url, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise ClipboardError(f"Image download failed: {e}") from e

    extension = extension_for(response.headers.get("content-type"))
    temp_dir = Path(tempfile.mkdtemp(prefix="ycb-"))
    path = temp_dir / f"image{extension}"
    try:
        path.write_bytes(response.content)
    except OSError as e:
        raise ClipboardError(f"Could not write image: {e}") from e
    return path


def clipboard_command(path: Path, platform: str = sys.platform) -> List[str]:
    """Command that puts the image file on the clipboard for this platform."""
    mime = _MIME_TYPES.get(path.suffix, "image/jpeg")

    if platform == "darwin":
        return ["osascript", "-e", f'set the clipboard to (POSIX file "{path}")']

    if platform.startswith("linux"):
        if os.environ.get("WAYLAND_DISPLAY") and shutil.which("wl-copy"):
            return ["wl-copy", "--type", mime]
        if shutil.which("xclip"):
            return ["xclip", "-selection", "clipboard", "-t", mime, "-i", str(path)]

    raise ClipboardError(f"No image clipboard support on {platform}")


async def copy_image_file(path: Path) -> None:
    command = clipboard_command(path)
    try:
        stdin = path.read_bytes() if command[0] == "wl-copy" else None
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await process.communicate(stdin)
    except OSError as e:
        raise ClipboardError(f"{command[0]} failed: {e}") from e

    if process.returncode != 0:
        raise ClipboardError(
            f"{command[0]} exited with {process.returncode}: {stderr.decode(errors='replace').strip()}"
        )


async def copy_image(http: httpx.AsyncClient, url: str) -> Path:
    """Download `url` and place it on the clipboard as an image."""
    path = await download_image(http, url)
    await copy_image_file(path)
    logger.info("Copied image to clipboard from %s", path)
    return path
