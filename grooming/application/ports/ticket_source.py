"""Port interface for looking up tickets pending grooming."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from grooming.domain.entities.work_record import WorkRecord


@dataclass
class TicketLookup:
    found: list[WorkRecord] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)


class TicketSource(ABC):
    @abstractmethod
    async def fetch_by_keys(self, keys: list[str]) -> TicketLookup:
        """Resolve ticket keys; keys that cannot be resolved go to ``not_found``."""
        ...
