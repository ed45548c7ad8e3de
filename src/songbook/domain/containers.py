"""Container hierarchy services: classes, groups and collections of an event."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from songbook.domain.errors import NotFoundError, ValidationError
from songbook.domain.identifiers import derive_class_id, derive_collection_id, new_group_id
from songbook.domain.model import AudioStatus, Container, ContainerKind
from songbook.domain.ports.notifications import Notification

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from songbook.domain.model import AudioFile, Event, Song
    from songbook.domain.ports.notifications import Notifier
    from songbook.domain.ports.persistence import RecordStore
    from songbook.domain.ports.unit_of_work import SongbookUnitOfWork

log = logging.getLogger(__name__)

DEFAULT_CONTAINER_NAME: Final[str] = "All Children"
# events created by the first intake generation named their catch-all differently
LEGACY_DEFAULT_NAMES: Final[frozenset[str]] = frozenset({DEFAULT_CONTAINER_NAME, "Alle Kinder"})
MIN_GROUP_MEMBERS: Final[int] = 2


@dataclass(slots=True)
class ContainerSummary:
    """Container plus the display data shown on dashboards."""

    container: Container
    song_count: int = 0
    registration_count: int = 0
    audio_status: AudioStatus = field(default_factory=AudioStatus)


@dataclass(slots=True)
class ContainerContents:
    container: Container
    songs: list[Song]
    audio_files: list[AudioFile]
    audio_status: AudioStatus


def find_default_container(uow: SongbookUnitOfWork, event: Event) -> Container | None:
    """Return the event's catch-all container if it exists.

    The flagged container wins. A class carrying a legacy default name only
    counts when the event has no flagged container.
    """

    records = uow.repositories.records
    default = records.find_default_container(event)
    if default is not None:
        return default
    for container in records.list_containers(event):
        if container.kind is ContainerKind.REGULAR and container.name in LEGACY_DEFAULT_NAMES:
            return container
    return None


def ensure_default_container(uow: SongbookUnitOfWork, event: Event) -> Container:
    """Return the event's catch-all container, creating it when it does not exist yet.

    The lookup always goes to the store; nothing is remembered between calls.
    """

    default = find_default_container(uow, event)
    if default is not None:
        return default

    records = uow.repositories.records
    container_id = _container_id_for(records, event, DEFAULT_CONTAINER_NAME, derive_class_id)
    existing = records.get_container(container_id)
    if existing is not None:
        return existing

    default = Container(
        container_id=container_id,
        name=DEFAULT_CONTAINER_NAME,
        kind=ContainerKind.REGULAR,
        event_id=event.event_id,
        is_default=True,
    )
    records.add_container(default, event)
    uow.commit()
    log.info("Created default container %s for event %s", container_id, event.event_id)
    return default


def create_class(
    uow: SongbookUnitOfWork,
    event: Event,
    *,
    name: str,
    num_children: int | None = None,
    created_by: str | None = None,
    notifier: Notifier | None = None,
) -> Container:
    """Create a class container; re-creating an existing class returns it unchanged."""

    clean_name = _require_name(name)
    _validate_num_children(num_children)
    container_id = _container_id_for(uow.repositories.records, event, clean_name, derive_class_id)
    return _create_derived(
        uow,
        event,
        Container(
            container_id=container_id,
            name=clean_name,
            kind=ContainerKind.REGULAR,
            event_id=event.event_id,
            num_children=num_children,
            created_by=created_by,
        ),
        notifier=notifier,
    )


def create_collection(
    uow: SongbookUnitOfWork,
    event: Event,
    *,
    name: str,
    kind: ContainerKind,
    created_by: str | None = None,
    notifier: Notifier | None = None,
) -> Container:
    """Create a choir or teacher-song collection visible to every parent of the event."""

    if not kind.is_collection:
        raise ValidationError(f"{kind} is not a collection kind")
    clean_name = _require_name(name)
    container_id = _container_id_for(
        uow.repositories.records, event, clean_name, derive_collection_id
    )
    return _create_derived(
        uow,
        event,
        Container(
            container_id=container_id,
            name=clean_name,
            kind=kind,
            event_id=event.event_id,
            created_by=created_by,
        ),
        notifier=notifier,
    )


def create_group(
    uow: SongbookUnitOfWork,
    event: Event,
    *,
    name: str,
    member_ids: Iterable[str],
    created_by: str | None = None,
    notifier: Notifier | None = None,
) -> Container:
    """Create a group of at least two classes sharing songs."""

    clean_name = _require_name(name)
    records = uow.repositories.records
    members = _validate_members(records, event.event_id, member_ids)

    group = Container(
        container_id=new_group_id(event.event_id),
        name=clean_name,
        kind=ContainerKind.GROUP,
        event_id=event.event_id,
        member_ids=members,
        created_by=created_by,
    )
    records.add_container(group, event)
    uow.commit()
    log.info(
        "Created group %s with %d members for event %s",
        group.container_id,
        len(members),
        event.event_id,
    )
    _notify_created(notifier, group)
    return group


def get_container(uow: SongbookUnitOfWork, container_id: str) -> Container:
    container = uow.repositories.records.get_container(container_id)
    if container is None:
        raise NotFoundError(f"Container not found: {container_id}")
    return container


def update_container(
    uow: SongbookUnitOfWork,
    container_id: str,
    *,
    name: str | None = None,
    num_children: int | None = None,
) -> Container:
    """Rename a container and/or change its child count.

    Kind, owning event and the container identifier never change.
    """

    container = get_container(uow, container_id)
    if name is not None:
        container.name = _require_name(name)
    if num_children is not None:
        if container.kind is not ContainerKind.REGULAR:
            raise ValidationError("Only classes carry a child count")
        _validate_num_children(num_children)
        container.num_children = num_children
    uow.repositories.records.update_container(container)
    uow.commit()
    return container


def update_group(
    uow: SongbookUnitOfWork,
    group_id: str,
    *,
    name: str | None = None,
    member_ids: Iterable[str] | None = None,
) -> Container:
    group = get_container(uow, group_id)
    if not group.is_group:
        raise ValidationError(f"Container {group_id} is not a group")
    if name is not None:
        group.name = _require_name(name)
    if member_ids is not None:
        group.member_ids = _validate_members(uow.repositories.records, group.event_id, member_ids)
    uow.repositories.records.update_container(group)
    uow.commit()
    return group


def list_containers_for_event(uow: SongbookUnitOfWork, event: Event) -> list[ContainerSummary]:
    """Return every container of the event with song counts and display extras.

    Registration counts and audio status are best effort: a failing read is
    logged and shown as zero.
    """

    records = uow.repositories.records
    summaries: list[ContainerSummary] = []
    for container in records.list_containers(event):
        summaries.append(
            ContainerSummary(
                container=container,
                song_count=len(records.list_songs_for_container(container.container_id)),
                registration_count=_registration_count(records, container),
                audio_status=_audio_status(records, container),
            )
        )
    return summaries


def list_collections_for_event(
    uow: SongbookUnitOfWork,
    event: Event,
    kind: ContainerKind | None = None,
) -> list[Container]:
    if kind is not None and not kind.is_collection:
        raise ValidationError(f"{kind} is not a collection kind")
    return [
        container
        for container in uow.repositories.records.list_containers(event)
        if container.kind.is_collection and (kind is None or container.kind is kind)
    ]


def list_groups_for_container(uow: SongbookUnitOfWork, container_id: str) -> list[Container]:
    container = get_container(uow, container_id)
    return uow.repositories.records.list_groups_containing(container)


def get_songs_and_audio_for_container(
    uow: SongbookUnitOfWork, container_id: str
) -> ContainerContents:
    container = get_container(uow, container_id)
    records = uow.repositories.records
    audio_files = records.list_audio_files_for_container(container)
    return ContainerContents(
        container=container,
        songs=records.list_songs_for_container(container.container_id),
        audio_files=audio_files,
        audio_status=AudioStatus.from_files(audio_files),
    )


def _create_derived(
    uow: SongbookUnitOfWork,
    event: Event,
    container: Container,
    *,
    notifier: Notifier | None,
) -> Container:
    records = uow.repositories.records
    default = ensure_default_container(uow, event)
    if default.container_id == container.container_id:
        raise ValidationError(f"{container.name!r} is reserved for the default container")

    existing = records.get_container(container.container_id)
    if existing is not None:
        if existing.event_id != event.event_id:
            raise ValidationError(f"Container {container.container_id} belongs to another event")
        log.info("Container %s already exists, nothing to create", container.container_id)
        return existing

    records.add_container(container, event)
    uow.commit()
    log.info(
        "Created %s container %s for event %s",
        container.kind,
        container.container_id,
        event.event_id,
    )
    _notify_created(notifier, container)
    return container


def _container_id_for(
    records: RecordStore,
    event: Event,
    name: str,
    derive: Callable[..., str],
) -> str:
    # events at the same school on the same day would otherwise share ids
    container_id = derive(event.school_name, event.event_date or "", name)
    existing = records.get_container(container_id)
    if existing is None or existing.event_id == event.event_id:
        return container_id
    log.info(
        "Container id %s is owned by event %s, scoping it to %s",
        container_id,
        existing.event_id,
        event.event_id,
    )
    return derive(event.school_name, event.event_date or "", name, scope=event.event_id)


def _validate_members(records: RecordStore, event_id: str, member_ids: Iterable[str]) -> list[str]:
    members = list(dict.fromkeys(member_id.strip() for member_id in member_ids if member_id.strip()))
    if len(members) < MIN_GROUP_MEMBERS:
        raise ValidationError(f"A group needs at least {MIN_GROUP_MEMBERS} member classes")
    for member_id in members:
        member = records.get_container(member_id)
        if member is None:
            raise ValidationError(f"Unknown member class: {member_id}")
        if member.event_id != event_id:
            raise ValidationError(f"Class {member_id} belongs to another event")
        if member.kind is not ContainerKind.REGULAR:
            raise ValidationError(f"Only classes can join a group, got {member.kind}")
    return members


def _registration_count(records: RecordStore, container: Container) -> int:
    try:
        return records.count_registrations(container.container_id)
    except Exception:  # noqa: BLE001
        log.warning(
            "Could not count registrations for %s, showing 0", container.container_id, exc_info=True
        )
        return 0


def _audio_status(records: RecordStore, container: Container) -> AudioStatus:
    try:
        return AudioStatus.from_files(records.list_audio_files_for_container(container))
    except Exception:  # noqa: BLE001
        log.warning(
            "Could not read audio status for %s", container.container_id, exc_info=True
        )
        return AudioStatus()


def _notify_created(notifier: Notifier | None, container: Container) -> None:
    if notifier is None:
        return
    notifier(
        Notification(
            kind="container_created",
            event_id=container.event_id,
            payload={
                "container_id": container.container_id,
                "name": container.name,
                "kind": str(container.kind),
            },
        )
    )


def _require_name(name: str) -> str:
    clean = name.strip()
    if not clean:
        raise ValidationError("Container name must not be empty")
    return clean


def _validate_num_children(num_children: int | None) -> None:
    if num_children is not None and num_children < 0:
        raise ValidationError("Child count must not be negative")
