"""
Entity definitions shared by the accessors, the mock backend and the CLI.

Each entity knows its backend wire format:
- to_json() builds the body sent to the backend (French field names)
- from_json() reads a payload returned by the backend

Relationships are always written as identifiers, never as nested objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional


def _as_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class Track:
    """
    A study track (Parcours).
    """

    id: Optional[int]
    name: Optional[str]
    year: Optional[int]

    def to_json(self) -> dict[str, Any]:
        return {"Id": self.id, "NomParcours": self.name, "AnneeFormation": self.year}

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Track":
        return cls(
            id=_as_int(data.get("Id", data.get("id"))),
            name=data.get("NomParcours"),
            year=_as_int(data.get("AnneeFormation")),
        )


def _track_ref(value: Any) -> Optional[Track]:
    """
    Read a track reference that the backend may send either as an id
    or as an embedded Parcours object.
    """
    if isinstance(value, dict):
        return Track.from_json(value)
    track_id = _as_int(value)
    if track_id is None:
        return None
    return Track(id=track_id, name=None, year=None)


@dataclass
class Student:
    """
    A student (Etudiant). Follows at most one track.
    """

    id: Optional[int]
    last_name: Optional[str]
    first_name: Optional[str]
    student_number: Optional[str]
    email: Optional[str]
    track: Optional[Track] = None

    @property
    def track_id(self) -> Optional[int]:
        return self.track.id if self.track is not None else None

    def to_json(self) -> dict[str, Any]:
        return {
            "Id": self.id,
            "Nom": self.last_name,
            "Prenom": self.first_name,
            "NumEtud": self.student_number,
            "Email": self.email,
            "ParcoursSuivi": self.track_id,
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Student":
        return cls(
            id=_as_int(data.get("Id", data.get("id"))),
            last_name=data.get("Nom"),
            first_name=data.get("Prenom"),
            student_number=data.get("NumEtud"),
            email=data.get("Email"),
            track=_track_ref(data.get("ParcoursSuivi")),
        )


@dataclass
class CourseUnit:
    """
    A course unit (Ue), taught in zero or more tracks.
    """

    id: Optional[int]
    code: Optional[str]
    title: Optional[str]
    tracks: List[Track] = field(default_factory=list)

    @property
    def track_ids(self) -> List[int]:
        return [t.id for t in self.tracks if t.id is not None]

    def to_json(self) -> dict[str, Any]:
        return {
            "Id": self.id,
            "NumeroUe": self.code,
            "Intitule": self.title,
            "EnseigneeDans": self.track_ids,
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "CourseUnit":
        # Older payloads spell the identifier "ID"
        raw_id = data.get("Id", data.get("ID", data.get("id")))
        raw_tracks = data.get("EnseigneeDans") or []
        tracks = [t for t in (_track_ref(x) for x in raw_tracks) if t is not None]
        return cls(id=_as_int(raw_id), code=data.get("NumeroUe"), title=data.get("Intitule"), tracks=tracks)


@dataclass
class Grade:
    """
    A grade (Note) of one student in one course unit.

    Addressed either by its own id or by (student_id, course_unit_id).
    """

    id: Optional[int]
    value: Optional[float]
    student_id: Optional[int]
    course_unit_id: Optional[int]

    @property
    def key(self) -> tuple[Optional[int], Optional[int]]:
        return (self.student_id, self.course_unit_id)

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "valeur": self.value,
            "etudiantId": self.student_id,
            "ueId": self.course_unit_id,
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Grade":
        return cls(
            id=_as_int(data.get("id", data.get("Id"))),
            value=data.get("valeur", data.get("Valeur")),
            student_id=_as_int(data.get("etudiantId", data.get("IdEtudiant"))),
            course_unit_id=_as_int(data.get("ueId", data.get("IdUe"))),
        )
