"""
Pending asset uploads

Reading a selected file into memory (and into a data-URL preview) is an
explicit asynchronous step so the form controller can treat it as a
suspension point of its own.
"""
import asyncio
import base64
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from clinic_admin.core import config
from clinic_admin.core.errors import FormValidationError

AssetSource = Union[str, Path, bytes]


@dataclass
class AssetUpload:
    """
    A file chosen by the user, bound to one draft field until submitted

    `reference` is filled in once the upload succeeds, so a retried submit
    does not upload the same file twice.
    """
    content: bytes
    filename: str
    content_type: str
    kind: str
    reference: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def preview(self) -> str:
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


def guess_content_type(filename: str) -> str:
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or "application/octet-stream"


async def read_asset(
    source: AssetSource,
    kind: str,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
    max_bytes: Optional[int] = None,
) -> AssetUpload:
    """
    Load a file (path or raw bytes) into an AssetUpload

    Args:
        source: Path to the file, or its bytes
        kind: Upload kind sent to the server (e.g. 'perfil')
        filename: Name to upload under (defaults to the path's name)
        content_type: MIME type (guessed from the filename when omitted)
        max_bytes: Size limit (defaults to the configured upload limit)

    Raises:
        FormValidationError: If the file is larger than the limit
    """
    if isinstance(source, bytes):
        content = source
        name = filename or "upload"
    else:
        path = Path(source)
        content = await asyncio.to_thread(path.read_bytes)
        name = filename or path.name

    limit = config.MAX_UPLOAD_BYTES if max_bytes is None else max_bytes
    if len(content) > limit:
        raise FormValidationError(
            f"El archivo supera el tamaño máximo de {limit // (1024 * 1024)}MB"
        )

    return AssetUpload(
        content=content,
        filename=name,
        content_type=content_type or guess_content_type(name),
        kind=kind,
    )
