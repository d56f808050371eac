"""Transcript module."""

from .store import TranscriptStore

__all__ = ["TranscriptStore"]
