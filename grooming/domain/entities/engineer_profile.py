"""EngineerProfile entity — a candidate assignee and their track record."""

from dataclasses import dataclass

from grooming.domain.entities.work_record import WorkRecord


@dataclass(frozen=True)
class EngineerProfile:
    name: str
    recent_tickets: tuple[WorkRecord, ...] = ()
    current_workload: int = 0
    specializations: tuple[str, ...] = ()
