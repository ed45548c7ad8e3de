"""Port for outbound, fire-and-forget notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(slots=True, frozen=True)
class Notification:
    kind: str
    event_id: str
    payload: dict[str, object] = field(default_factory=dict[str, object])


@runtime_checkable
class Notifier(Protocol):
    """Deliver a notification; implementations must not raise on delivery failure."""

    def __call__(self, notification: Notification) -> None: ...
