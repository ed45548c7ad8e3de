"""Pydantic models for JSON payloads accepted from the UI/API layer."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from songbook.domain.album import AlbumTrackUpdate


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class SongbookBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AlbumTrackPayload(SongbookBaseModel):
    song_id: str = Field(alias="songId", min_length=1)
    album_order: int = Field(alias="albumOrder", ge=1)
    song_title: str | None = Field(default=None, alias="songTitle")
    container_id: str | None = Field(default=None, alias="classId")
    container_name: str | None = Field(default=None, alias="className")

    _normalize_title = field_validator("song_title", mode="before")(_blank_to_none)
    _normalize_container_id = field_validator("container_id", mode="before")(_blank_to_none)
    _normalize_container_name = field_validator("container_name", mode="before")(_blank_to_none)

    def to_update(self) -> AlbumTrackUpdate:
        return AlbumTrackUpdate(
            song_id=self.song_id,
            album_order=self.album_order,
            title=self.song_title,
            container_id=self.container_id,
            container_name=self.container_name,
        )


class AlbumOrderPayload(SongbookBaseModel):
    tracks: list[AlbumTrackPayload]

    def to_updates(self) -> list[AlbumTrackUpdate]:
        return [track.to_update() for track in self.tracks]
