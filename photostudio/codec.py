from __future__ import annotations

import asyncio
import base64
import binascii
import io
import mimetypes
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

from .errors import ReadError

ImageSource = Union[bytes, bytearray, str, Path]


async def read_image(path: Union[str, Path]) -> bytes:
    try:
        return await asyncio.to_thread(Path(path).read_bytes)
    except OSError as e:
        raise ReadError(f"Could not read image file {path}: {e}. Please select the file again.") from e


async def encode_image(source: ImageSource) -> str:
    """Return the bare base64 payload of an image.

    ``source`` may be raw bytes, a path, or a ``data:...;base64,`` URI. The result
    never carries a data-URI header.
    """
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    elif isinstance(source, str) and source.startswith("data:"):
        return _strip_data_uri(source)
    else:
        data = await read_image(source)
    return base64.b64encode(data).decode("ascii")


def _strip_data_uri(uri: str) -> str:
    header, sep, payload = uri.partition(",")
    if not sep or ";base64" not in header:
        raise ReadError("Image data URI is not base64 encoded")
    return payload


def to_data_uri(b64: str, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{b64}"


def decode_data_uri(uri: str) -> Tuple[str, bytes]:
    header, sep, payload = uri.partition(",")
    if not header.startswith("data:") or not sep:
        raise ValueError("not a data URI")
    mime = header[len("data:"):].split(";", 1)[0] or "application/octet-stream"
    try:
        return mime, base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 payload: {e}") from e


def guess_mime_type(data: bytes, filename: Optional[str] = None) -> Optional[str]:
    try:
        with Image.open(io.BytesIO(data)) as img:
            mime = Image.MIME.get(img.format or "")
        if mime:
            return mime
    except (UnidentifiedImageError, OSError):
        pass
    if filename:
        return mimetypes.guess_type(filename)[0]
    return None


def is_image_mime(mime: Optional[str]) -> bool:
    return bool(mime) and str(mime).lower().startswith("image/")
