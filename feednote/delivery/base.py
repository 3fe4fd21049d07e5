"""
Delivery Port
=============

Base class for note sinks.
"""

from abc import ABC, abstractmethod

from ..database.models import Note


class NoteSender(ABC):
    """Posts one note to a downstream sink.

    Implementations raise ``DeliveryError`` on failure and never retry;
    the next scheduled pass retries anything left undelivered.
    """

    #: Sink name used in logs and error context
    name: str = "sink"

    @abstractmethod
    async def post(self, note: Note) -> None:
        """Deliver a single note.

        Raises:
            DeliveryError: If the sink rejects the note or is unreachable
        """

    async def close(self) -> None:
        """Release network resources held by the sender."""
