from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from hoursdash.clockify.durations import Duration, SecondsDuration, duration_from_interval

# Clockify placeholders that mean "not set"
_EMPTY_IDS = {"", "NO_PROJECT", "NO_CLIENT", "NO_TASK"}


def _clean_id(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return None if value in _EMPTY_IDS else value


def _clean_name(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value if value.strip() else None


def _extract_tag_ids(payload: dict) -> Tuple[str, ...]:
    ids: list[str] = []
    for tag_id in payload.get("tagIds") or []:
        if isinstance(tag_id, str) and tag_id and tag_id not in ids:
            ids.append(tag_id)
    for tag in payload.get("tags") or []:
        if isinstance(tag, dict):
            tag_id = tag.get("id")
            if tag_id and str(tag_id) not in ids:
                ids.append(str(tag_id))
    return tuple(ids)


@dataclass(frozen=True)
class TimeEntry:
    id: Optional[str]
    billable: bool
    duration: Duration = SecondsDuration(0.0)
    project_id: Optional[str] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    tag_ids: Tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, payload: dict) -> "TimeEntry":
        # hydrated entries carry the project object instead of flat fields
        project = payload.get("project") if isinstance(payload.get("project"), dict) else {}
        return cls(
            id=_clean_id(payload.get("id") or payload.get("_id")),
            billable=payload.get("billable") is True,
            duration=duration_from_interval(payload.get("timeInterval")),
            project_id=_clean_id(payload.get("projectId") or project.get("id")),
            client_id=_clean_id(payload.get("clientId")),
            client_name=_clean_name(payload.get("clientName")),
            tag_ids=_extract_tag_ids(payload),
        )


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    client_id: Optional[str] = None
    client_name: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict) -> "Project":
        return cls(
            id=str(payload.get("id")),
            name=payload.get("name") or "Unnamed Project",
            client_id=_clean_id(payload.get("clientId")),
            client_name=_clean_name(payload.get("clientName")),
        )


@dataclass(frozen=True)
class ClockifyClientRecord:
    """A billing client as listed under ``/workspaces/{id}/clients``."""

    id: str
    name: str

    @classmethod
    def from_payload(cls, payload: dict) -> "ClockifyClientRecord":
        return cls(id=str(payload.get("id")), name=payload.get("name") or "")
