"""Port interface for engineers' historical work."""

from abc import ABC, abstractmethod

from grooming.domain.entities.work_record import WorkRecord


class WorkHistorySource(ABC):
    @abstractmethod
    async def fetch_engineer_history(
        self,
        assignees: list[str] | None = None,
        lookback_days: int | None = None,
    ) -> dict[str, list[WorkRecord]]:
        """Return engineer display name → records, most recent first."""
        ...
