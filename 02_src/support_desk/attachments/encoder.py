"""Attachment encoding: raw file bytes to a transport-safe base64 payload."""

import base64
import binascii
import mimetypes
import re
from pathlib import Path

from ..config import ACCEPTED_MIME_TYPES
from ..models import Attachment

DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^;,]*)*?);base64,(?P<data>.*)$", re.DOTALL)


class AttachmentReadError(Exception):
    """A selected file could not be turned into an Attachment."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def is_accepted(mime_type: str, accepted: tuple[str, ...] = ACCEPTED_MIME_TYPES) -> bool:
    """Match a MIME type against an accept list that may contain ``type/*`` wildcards."""
    mime_type = mime_type.lower()
    for pattern in accepted:
        if pattern.endswith("/*"):
            if mime_type.startswith(pattern[:-1]):
                return True
        elif mime_type == pattern:
            return True
    return False


def encode_attachment(name: str, mime_type: str, data: bytes) -> Attachment:
    """Encode raw bytes into an Attachment."""
    if not data:
        raise AttachmentReadError(f"File {name!r} is empty")
    if not mime_type or not is_accepted(mime_type):
        raise AttachmentReadError(f"Unsupported file type {mime_type or 'unknown'!r} for {name!r}")

    return Attachment(
        name=name,
        mime_type=mime_type.lower(),
        data=base64.b64encode(data).decode("ascii"),
    )


def encode_data_url(name: str, data_url: str) -> Attachment:
    """Build an Attachment from a ``data:<mime>;base64,<payload>`` URL.

    The metadata prefix is stripped; only the base64 payload is kept.
    """
    match = DATA_URL_RE.match(data_url.strip())
    if not match:
        raise AttachmentReadError(f"File {name!r} is not a base64 data URL")

    try:
        raw = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise AttachmentReadError(f"File {name!r} has a corrupt payload") from e

    mime_type = match.group("mime") or mimetypes.guess_type(name)[0] or ""
    return encode_attachment(name, mime_type, raw)


def encode_file(path: str | Path, mime_type: str | None = None) -> Attachment:
    """Read a file from disk and encode it."""
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise AttachmentReadError(f"Could not read {path.name!r}: {e.strerror or e}") from e

    if mime_type is None:
        mime_type = mimetypes.guess_type(path.name)[0] or ""
    return encode_attachment(path.name, mime_type, raw)
