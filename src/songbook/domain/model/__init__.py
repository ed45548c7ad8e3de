"""Domain model for school music events."""

from __future__ import annotations

from .enums import ApprovalStatus, AudioFileStatus, AudioFileType, ContainerKind, EventStatus
from .records import AudioFile, AudioStatus, Booking, Container, Event, Registration, Song

__all__ = [
    "ApprovalStatus",
    "AudioFile",
    "AudioFileStatus",
    "AudioFileType",
    "AudioStatus",
    "Booking",
    "Container",
    "ContainerKind",
    "Event",
    "EventStatus",
    "Registration",
    "Song",
]
