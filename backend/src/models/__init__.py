"""SQLAlchemy Models for the exam share store"""

from .base import Base
from .shared_exam import SharedExam

__all__ = [
    "Base",
    "SharedExam",
]
