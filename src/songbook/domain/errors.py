"""Domain error taxonomy surfaced to the UI/API layer."""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    NOT_FOUND = "NOT_FOUND"
    VALIDATION = "VALIDATION_ERROR"
    FORBIDDEN = "FORBIDDEN"
    DATA_ATTACHED = "DATA_ATTACHED"
    OWNERSHIP = "OWNERSHIP"


class SongbookError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(SongbookError):
    """Raised when an event, container or song cannot be resolved."""

    code = ErrorCode.NOT_FOUND


class ValidationError(SongbookError):
    code = ErrorCode.VALIDATION


class ForbiddenError(SongbookError):
    code = ErrorCode.FORBIDDEN


class OwnershipError(SongbookError):
    """Raised when the caller has no access to the event."""

    code = ErrorCode.OWNERSHIP


class DataAttachedError(SongbookError):
    """Deletion blocked until the caller confirms moving the attached data.

    This is a recoverable signal: present the counts to a human and retry with
    confirmation.
    """

    code = ErrorCode.DATA_ATTACHED

    def __init__(
        self,
        *,
        song_count: int,
        registration_count: int,
        audio_file_count: int = 0,
    ) -> None:
        super().__init__(
            f"Container has data attached (songs={song_count}, "
            f"registrations={registration_count}, audio_files={audio_file_count})"
        )
        self.song_count = song_count
        self.registration_count = registration_count
        self.audio_file_count = audio_file_count

    def counts(self) -> dict[str, int]:
        return {
            "song_count": self.song_count,
            "registration_count": self.registration_count,
            "audio_file_count": self.audio_file_count,
        }
