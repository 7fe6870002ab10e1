from abc import ABC, abstractmethod

from schemas.results import Critique, CritiqueRequest


class CritiqueProvider(ABC):
    """Anything that can turn a finished player's record into a Critique."""

    @abstractmethod
    async def critique(self, request: CritiqueRequest) -> Critique:
        ...
