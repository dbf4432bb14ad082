"""Models package initialization"""
from app.models.instrument import InstrumentRecord
from app.models.snapshot import UserSnapshot

__all__ = [
    "InstrumentRecord",
    "UserSnapshot",
]
