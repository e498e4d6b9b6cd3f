from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from hoursdash.clockify.models import ClockifyClientRecord, Project, TimeEntry


@dataclass(frozen=True)
class ClientRef:
    client_id: Optional[str]
    client_name: str


class ClientResolver:
    """Maps a time entry to the billing client it should be charged to.

    The entry's own client fields win; otherwise the client of its project is
    used. ``resolve`` returns ``None`` when neither is available.
    """

    def __init__(
        self,
        projects: Iterable[Project],
        clients: Iterable[ClockifyClientRecord] = (),
    ) -> None:
        self.client_names: Dict[str, str] = {c.id: c.name for c in clients if c.id and c.name}
        self.project_clients: Dict[str, ClientRef] = {}
        for project in projects:
            ref = self._make_ref(project.client_id, project.client_name)
            if ref is not None:
                self.project_clients[project.id] = ref

    def _make_ref(self, client_id: Optional[str], client_name: Optional[str]) -> Optional[ClientRef]:
        if client_name:
            return ClientRef(client_id=client_id, client_name=client_name)
        if client_id:
            # id-only reference: name it from the directory, else by the id itself
            return ClientRef(client_id=client_id, client_name=self.client_names.get(client_id, client_id))
        return None

    def resolve(self, entry: TimeEntry) -> Optional[ClientRef]:
        direct = self._make_ref(entry.client_id, entry.client_name)
        if direct is not None:
            return direct
        if entry.project_id:
            return self.project_clients.get(entry.project_id)
        return None
