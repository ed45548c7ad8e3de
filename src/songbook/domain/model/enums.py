"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ContainerKind(StrEnum):
    """What a song container represents.

    ``REGULAR`` is a single class, ``GROUP`` several classes singing together,
    ``CHOIR`` and ``TEACHER_SONG`` are collections visible to every parent.
    """

    REGULAR = "regular"
    GROUP = "group"
    CHOIR = "choir"
    TEACHER_SONG = "teacher_song"

    @property
    def is_collection(self) -> bool:
        return self in (ContainerKind.CHOIR, ContainerKind.TEACHER_SONG)


class AudioFileType(StrEnum):
    RAW = "raw"
    PREVIEW = "preview"
    FINAL = "final"


class AudioFileStatus(StrEnum):
    PENDING = "pending"
    READY = "ready"


class ApprovalStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class EventStatus(StrEnum):
    CONFIRMED = "confirmed"
    ON_HOLD = "on_hold"
    CANCELLED = "cancelled"
