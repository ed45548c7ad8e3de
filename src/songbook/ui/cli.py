from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from songbook.app import (
    create_class,
    create_group,
    delete_container,
    get_album_tracks,
    list_containers,
    resolve_event,
    update_album_order,
)
from songbook.config import configure_logging
from songbook.domain.errors import DataAttachedError, SongbookError
from songbook.ui.schema import AlbumOrderPayload

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from songbook.domain.album import AlbumTrackUpdate

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage school music events")
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve", help="Resolve an event identifier")
    resolve.add_argument("event", help="Event id, record handle, booking id or access code")
    resolve.add_argument(
        "--teacher-email",
        type=str,
        help="Also require this teacher to own the event",
    )

    containers = subparsers.add_parser("containers", help="List the containers of an event")
    containers.add_argument("event", help="Any event identifier")

    create_class_cmd = subparsers.add_parser("create-class", help="Create a class")
    create_class_cmd.add_argument("event", help="Any event identifier")
    create_class_cmd.add_argument("--name", type=str, required=True, help="Class name")
    create_class_cmd.add_argument(
        "--num-children",
        type=int,
        help="Number of children in the class",
    )
    create_class_cmd.add_argument("--teacher-email", type=str, help="Creating teacher")

    create_group_cmd = subparsers.add_parser(
        "create-group",
        help="Create a group of classes singing together",
    )
    create_group_cmd.add_argument("event", help="Any event identifier")
    create_group_cmd.add_argument("--name", type=str, required=True, help="Group name")
    create_group_cmd.add_argument(
        "--member",
        dest="members",
        action="append",
        default=[],
        help="Member class id (repeat for every class, at least two)",
    )
    create_group_cmd.add_argument("--teacher-email", type=str, help="Creating teacher")

    delete = subparsers.add_parser("delete-container", help="Delete a container")
    delete.add_argument("event", help="Any event identifier")
    delete.add_argument("container", help="Container id")
    delete.add_argument(
        "--confirm-move",
        action="store_true",
        help="Move attached songs and registrations to the default container",
    )

    album = subparsers.add_parser("album", help="Show the album order of an event")
    album.add_argument("event", help="Any event identifier")

    album_order = subparsers.add_parser("album-order", help="Store a new album order")
    album_order.add_argument("event", help="Any event identifier")
    album_order.add_argument(
        "--file",
        type=Path,
        required=True,
        help='JSON file of the form {"tracks": [{"songId": ..., "albumOrder": 1}, ...]}',
    )

    return parser.parse_args(list(argv))


def _load_album_updates(path: Path) -> list[AlbumTrackUpdate]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read {path}: {exc}") from exc
    return AlbumOrderPayload.model_validate_json(raw).to_updates()


def _run(args: argparse.Namespace, album_updates: list[AlbumTrackUpdate] | None) -> None:
    if args.command == "resolve":
        resolved = resolve_event(args.event, teacher_email=args.teacher_email)
        log.info(
            "%s -> %s (record %s, via %s)",
            args.event,
            resolved.event_id,
            resolved.record_id,
            resolved.resolved_via,
        )
    elif args.command == "containers":
        for summary in list_containers(args.event):
            container = summary.container
            log.info(
                "%s %-12s %s songs=%d registrations=%d%s",
                container.container_id,
                container.kind,
                container.name,
                summary.song_count,
                summary.registration_count,
                " (default)" if container.is_default else "",
            )
    elif args.command == "create-class":
        container = create_class(
            args.event,
            name=args.name,
            num_children=args.num_children,
            teacher_email=args.teacher_email,
        )
        log.info("Class ready: %s", container.container_id)
    elif args.command == "create-group":
        group = create_group(
            args.event,
            name=args.name,
            member_ids=args.members,
            teacher_email=args.teacher_email,
        )
        log.info("Created group %s", group.container_id)
    elif args.command == "delete-container":
        result = delete_container(args.event, args.container, confirm_move=args.confirm_move)
        log.info(
            "Deleted %s (%s, songs moved=%d, registrations moved=%d)",
            result.container_id,
            result.outcome,
            result.songs_moved,
            result.registrations_moved,
        )
    elif args.command == "album":
        for track in get_album_tracks(args.event):
            log.info("%3d. %s [%s]", track.album_order, track.title, track.container_name)
    elif args.command == "album-order":
        tracks = update_album_order(args.event, album_updates or [])
        log.info("Stored album order with %d tracks", len(tracks))
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    album_updates: list[AlbumTrackUpdate] | None = None
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "album-order":
            album_updates = _load_album_updates(parsed_args.file)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        _run(parsed_args, album_updates)
    except DataAttachedError as exc:
        log.error(  # noqa: TRY400
            "Container has data attached: %s. Re-run with --confirm-move to move it.",
            exc.counts(),
        )
        sys.exit(1)
    except SongbookError as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(1)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
