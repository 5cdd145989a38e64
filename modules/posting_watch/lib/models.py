from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Division(str, Enum):
    """Coarse business-category label attached to every extracted job."""

    TECHNOLOGY = "Technology"
    FINANCE = "Finance"
    GENERAL_STAFFING = "General Staffing"
    UNCATEGORIZED = "Uncategorized"


# Display order used by the digest and previews.
DIVISION_ORDER: tuple[Division, ...] = (
    Division.TECHNOLOGY,
    Division.FINANCE,
    Division.GENERAL_STAFFING,
    Division.UNCATEGORIZED,
)


@dataclass(frozen=True)
class ClientConfig:
    """One career site to monitor. `name` keys the seen-state file."""

    name: str
    url: str


@dataclass(frozen=True)
class JobRecord:
    """
    A candidate posting as returned by a site adapter (pre-classification).
    `url` is the identity key; `title` is display-only and may be empty.
    """

    title: str
    url: str


@dataclass(frozen=True)
class ClassifiedJob:
    title: str
    url: str
    division: Division = Division.UNCATEGORIZED


@dataclass
class ClientResult:
    """
    Outcome of one client's extract+classify step.
    - jobs: every classified job found this run (NOT filtered for 'new').
    - error: set when extraction failed; jobs is then empty.
    """

    client: ClientConfig
    jobs: list[ClassifiedJob] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class Alert:
    """New jobs for one client in this run."""

    client_name: str
    client_url: str
    jobs: list[ClassifiedJob] = field(default_factory=list)


@dataclass
class RunReport:
    """Everything a caller (CLI, scheduler, tests) needs to know about one run."""

    dry_run: bool = False
    ingest_only: bool = False
    results: list[ClientResult] = field(default_factory=list)
    alerts: list[Alert] = field(default_factory=list)
    previews: list[str] = field(default_factory=list)
    html: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)
    message_id: str | None = None

    @property
    def new_total(self) -> int:
        return sum(len(a.jobs) for a in self.alerts)

    @property
    def failed_clients(self) -> list[str]:
        return [r.client.name for r in self.results if not r.ok]
