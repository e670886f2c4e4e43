from src.models.base import Base, BaseModel, TimeStamp
from .event import Event
from .guest import Guest

__all__ = [
    "Base",
    "BaseModel",
    "TimeStamp",
    "Event",
    "Guest",
]
