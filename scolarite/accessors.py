"""
Data access objects, one per entity type.

Each accessor translates domain calls into requests on the shared client
and re-raises every failure as an AccessError with a readable message.

Relationships:
- Student <-> Track: a student follows at most one track. StudentAccessor.update
  issues the unlink / link calls when the track changes.
- Track <-> CourseUnit: many-to-many, linked explicitly through TrackAccessor.
- Grade: addressed by id or by (student id, course unit id).
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from scolarite.errors import AccessError, ApiFailure, ReconciliationError, UpdateState, error_message
from scolarite.model import CourseUnit, Grade, Student, Track


logger = logging.getLogger(__name__)


class Transport(Protocol):
    def request(self, method: str, path: str, json: Any = None) -> Any: ...


# ---------------------------------------------------------------------------
# Shared contract
# ---------------------------------------------------------------------------


class ResourceAccessor:
    """
    CRUD on one REST collection: create / get / update / delete / list.
    """

    path = ""
    messages: dict[str, str] = {}

    def __init__(self, client: Transport):
        self.client = client

    def item_path(self, entity_id: int) -> str:
        return f"{self.path}/{entity_id}"

    def _call(self, method: str, path: str, default: str, json: Any = None) -> Any:
        try:
            return self.client.request(method, path, json=json)
        except ApiFailure as exc:
            message = error_message(exc, default)
            logger.warning("%s (%s)", message, exc)
            raise AccessError(message, failure=exc) from exc

    def create(self, entity: Any) -> Any:
        return self._call("POST", self.path, self.messages["create"], json=entity.to_json())

    def get(self, entity_id: int) -> Any:
        return self._call("GET", self.item_path(entity_id), self.messages["get"])

    def update(self, entity_id: int, entity: Any) -> Any:
        return self._call("PUT", self.item_path(entity_id), self.messages["update"], json=entity.to_json())

    def delete(self, entity_id: int) -> None:
        self._call("DELETE", self.item_path(entity_id), self.messages["delete"])

    def list(self) -> list[Any]:
        return self._call("GET", self.path, self.messages["list"])


def _messages(singular: str, plural: str) -> dict[str, str]:
    return {
        "create": f"cannot create the {singular}",
        "get": f"cannot fetch the {singular}",
        "update": f"cannot update the {singular}",
        "delete": f"cannot delete the {singular}",
        "list": f"cannot fetch the {plural}",
    }


# ---------------------------------------------------------------------------
# Students
# ---------------------------------------------------------------------------


class StudentAccessor(ResourceAccessor):
    path = "/api/Etudiant"
    messages = _messages("student", "students")

    def update(self, entity_id: int, entity: Student, previous_track_id: Optional[int] = None) -> Any:
        """
        Update a student and move them between tracks if needed.

        previous_track_id is the track the student followed before this edit;
        the caller must supply it, it is never fetched here. When it differs
        from entity.track, the student is first removed from the old track,
        then added to the new one, then the student record is PUT.

        The three calls are not atomic. A failure raises ReconciliationError;
        its state is PARTIAL when a link step already reached the backend
        (e.g. unlinked from the old track but not linked to the new one).
        """
        new_track_id = entity.track_id
        completed: list[tuple[str, int]] = []

        try:
            if new_track_id != previous_track_id:
                if previous_track_id is not None:
                    self.remove_student_from_track(previous_track_id, entity_id)
                    completed.append(("unlink", previous_track_id))
                    logger.info("Student %s removed from track %s", entity_id, previous_track_id)
                if new_track_id is not None:
                    self.add_student_to_track(new_track_id, entity_id)
                    completed.append(("link", new_track_id))
                    logger.info("Student %s added to track %s", entity_id, new_track_id)

            return super().update(entity_id, entity)
        except AccessError as exc:
            state = UpdateState.PARTIAL if completed else UpdateState.NOT_APPLIED
            if completed:
                logger.warning("Student %s partially updated, completed steps: %s", entity_id, completed)
            raise ReconciliationError(str(exc), failure=exc.failure, state=state, completed=completed) from exc

    def add_student_to_track(self, track_id: int, student_id: int) -> None:
        self._call(
            "POST",
            f"{TrackAccessor.path}/{track_id}/etudiants/{student_id}",
            "cannot add the student to the track",
        )

    def remove_student_from_track(self, track_id: int, student_id: int) -> None:
        self._call(
            "DELETE",
            f"{TrackAccessor.path}/{track_id}/etudiants/{student_id}",
            "cannot remove the student from the track",
        )


# ---------------------------------------------------------------------------
# Tracks
# ---------------------------------------------------------------------------


class TrackAccessor(ResourceAccessor):
    path = "/api/Parcours"
    messages = _messages("track", "tracks")

    def add_course_unit_to_track(self, track_id: int, course_unit_id: int) -> None:
        self._call(
            "POST",
            f"{self.path}/{track_id}/Ues/{course_unit_id}",
            "cannot add the course unit to the track",
        )

    def remove_course_unit_from_track(self, track_id: int, course_unit_id: int) -> None:
        self._call(
            "DELETE",
            f"{self.path}/{track_id}/Ues/{course_unit_id}",
            "cannot remove the course unit from the track",
        )


# ---------------------------------------------------------------------------
# Course units
# ---------------------------------------------------------------------------


class CourseUnitAccessor(ResourceAccessor):
    path = "/api/Ue"
    messages = _messages("course unit", "course units")


# ---------------------------------------------------------------------------
# Grades
# ---------------------------------------------------------------------------


class GradeAccessor(ResourceAccessor):
    path = "/api/Note"
    messages = _messages("grade", "grades")

    def pair_path(self, student_id: int, course_unit_id: int) -> str:
        return f"{self.path}/etudiant/{student_id}/ue/{course_unit_id}"

    def get_by_student_and_course_unit(self, student_id: int, course_unit_id: int) -> Optional[Any]:
        """
        Return the grade of a student in a course unit, or None.

        The backend may answer with an object or a list; a list is unwrapped
        to its first element. An empty answer or any failed request means
        "no grade" and gives None.
        """
        try:
            data = self.client.request("GET", self.pair_path(student_id, course_unit_id))
        except ApiFailure as exc:
            logger.debug("No grade for student %s in course unit %s (%s)", student_id, course_unit_id, exc)
            return None

        if isinstance(data, list):
            return data[0] if data else None
        # plain text or other non-object payloads are not grades
        if isinstance(data, dict) and data:
            return data
        return None

    def update_by_student_and_course_unit(self, student_id: int, course_unit_id: int, value: float) -> Any:
        payload = {"IdEtudiant": student_id, "IdUe": course_unit_id, "Valeur": value}
        return self._call("PUT", self.pair_path(student_id, course_unit_id), self.messages["update"], json=payload)

    def delete_by_student_and_course_unit(self, student_id: int, course_unit_id: int) -> None:
        self._call("DELETE", self.pair_path(student_id, course_unit_id), self.messages["delete"])


ACCESSORS = {
    Student: StudentAccessor,
    Track: TrackAccessor,
    CourseUnit: CourseUnitAccessor,
    Grade: GradeAccessor,
}
