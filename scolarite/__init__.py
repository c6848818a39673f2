"""
Client-side data access for the academic records REST API
(Etudiant, Parcours, Ue, Note).
"""

from scolarite.client import ApiClient
from scolarite.config import Settings
from scolarite.errors import AccessError, ApiFailure, ReconciliationError, UpdateState, error_message
from scolarite.model import CourseUnit, Grade, Student, Track
from scolarite.registry import AccessorRegistry

__all__ = [
    "AccessError",
    "AccessorRegistry",
    "ApiClient",
    "ApiFailure",
    "CourseUnit",
    "Grade",
    "ReconciliationError",
    "Settings",
    "Student",
    "Track",
    "UpdateState",
    "error_message",
]
