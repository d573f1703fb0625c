"""Port interface for the recommendation oracle (a text-generation model)."""

from abc import ABC, abstractmethod


class OracleError(RuntimeError):
    """The oracle could not produce a response."""


class RecommendationOracle(ABC):
    @abstractmethod
    async def complete(self, prompt: str, temperature: float) -> str:
        """Send a prompt and return the raw response text.

        Implementations are free to raise on transport or availability
        problems; callers treat any exception as a failed call.
        """
        ...
