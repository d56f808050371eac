"""Attachments module."""

from .encoder import (
    AttachmentReadError,
    encode_attachment,
    encode_data_url,
    encode_file,
    is_accepted,
)

__all__ = [
    "AttachmentReadError",
    "encode_attachment",
    "encode_data_url",
    "encode_file",
    "is_accepted",
]
