"""
In-memory backend used when no server is available (`scolarite --offline`, tests).

InMemoryBackend has the same request(method, path, json) contract as
client.ApiClient, so the real accessors run against it unchanged.
It serves every endpoint of the REST API, keeps the Parcours <-> Etudiant
and Parcours <-> Ue link tables, and answers the composite grade lookup
with a list, like the real backend does.
"""

from __future__ import annotations

import copy
import logging
import re
from typing import Any, Callable, Optional

from scolarite.errors import ApiFailure


logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class InMemoryBackend:
    def __init__(self, seed: bool = True):
        self.students: dict[int, dict[str, Any]] = {}
        self.tracks: dict[int, dict[str, Any]] = {}
        self.course_units: dict[int, dict[str, Any]] = {}
        self.grades: dict[int, dict[str, Any]] = {}
        self.track_students: dict[int, set[int]] = {}
        self.track_units: dict[int, set[int]] = {}
        self.calls: list[tuple[str, str]] = []
        self._next_ids = {"students": 1, "tracks": 1, "course_units": 1, "grades": 1}

        self._routes: list[tuple[str, re.Pattern[str], Handler]] = []
        self._register_routes()

        if seed:
            self._seed()

    # ------------------------------------------------------------------
    # Transport contract
    # ------------------------------------------------------------------

    def request(self, method: str, path: str, json: Any = None) -> Any:
        method = method.upper()
        path = "/" + path.strip("/")
        self.calls.append((method, path))
        logger.debug("offline %s %s", method, path)

        path_matched = False
        for route_method, pattern, handler in self._routes:
            m = pattern.fullmatch(path)
            if not m:
                continue
            path_matched = True
            if route_method != method:
                continue
            args = [int(x) for x in m.groups()]
            try:
                result = handler(*args, body=copy.deepcopy(json))
            except ApiFailure as exc:
                raise ApiFailure(exc.status_code, exc.body, method=method, path=path) from None
            return copy.deepcopy(result)

        if path_matched:
            raise ApiFailure(405, {"title": "Method not allowed"}, method=method, path=path)
        raise ApiFailure(404, {"title": "Not found"}, method=method, path=path)

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def _route(self, method: str, pattern: str, handler: Handler) -> None:
        self._routes.append((method, re.compile(pattern), handler))

    def _register_routes(self) -> None:
        for name, prefix in (
            ("students", "/api/Etudiant"),
            ("tracks", "/api/Parcours"),
            ("course_units", "/api/Ue"),
            ("grades", "/api/Note"),
        ):
            self._route("GET", prefix, self._lister(name))
            self._route("POST", prefix, self._creator(name))
            self._route("GET", prefix + r"/(\d+)", self._getter(name))
            self._route("PUT", prefix + r"/(\d+)", self._updater(name))
            self._route("DELETE", prefix + r"/(\d+)", self._deleter(name))

        self._route("POST", r"/api/Parcours/(\d+)/etudiants/(\d+)", self._link_student)
        self._route("DELETE", r"/api/Parcours/(\d+)/etudiants/(\d+)", self._unlink_student)
        self._route("POST", r"/api/Parcours/(\d+)/Ues/(\d+)", self._link_course_unit)
        self._route("DELETE", r"/api/Parcours/(\d+)/Ues/(\d+)", self._unlink_course_unit)

        pair = r"/api/Note/etudiant/(\d+)/ue/(\d+)"
        self._route("GET", pair, self._grades_for_pair)
        self._route("PUT", pair, self._update_grade_for_pair)
        self._route("DELETE", pair, self._delete_grade_for_pair)

    # ------------------------------------------------------------------
    # Generic CRUD
    # ------------------------------------------------------------------

    _LABELS = {"students": "Etudiant", "tracks": "Parcours", "course_units": "Ue", "grades": "Note"}

    @staticmethod
    def _id_key(name: str) -> str:
        return "id" if name == "grades" else "Id"

    def _store(self, name: str) -> dict[int, dict[str, Any]]:
        return getattr(self, name)

    def _find(self, name: str, entity_id: int) -> dict[str, Any]:
        record = self._store(name).get(entity_id)
        if record is None:
            raise ApiFailure(404, {"title": f"{self._LABELS[name]} not found"})
        return record

    def _insert(self, name: str, body: Optional[dict[str, Any]]) -> dict[str, Any]:
        if not isinstance(body, dict):
            raise ApiFailure(400, {"title": "A JSON object is required"})
        if name == "students":
            self._check_track_ref(body)
        entity_id = self._next_ids[name]
        self._next_ids[name] += 1
        record = dict(body)
        record[self._id_key(name)] = entity_id
        self._store(name)[entity_id] = record
        if name == "students":
            self._set_student_track(entity_id, record.get("ParcoursSuivi"))
        return record

    def _lister(self, name: str) -> Handler:
        def handler(body: Any = None) -> list[dict[str, Any]]:
            return list(self._store(name).values())

        return handler

    def _creator(self, name: str) -> Handler:
        def handler(body: Any = None) -> dict[str, Any]:
            return self._insert(name, body)

        return handler

    def _getter(self, name: str) -> Handler:
        def handler(entity_id: int, body: Any = None) -> dict[str, Any]:
            return self._find(name, entity_id)

        return handler

    def _updater(self, name: str) -> Handler:
        def handler(entity_id: int, body: Any = None) -> dict[str, Any]:
            record = self._find(name, entity_id)
            if not isinstance(body, dict):
                raise ApiFailure(400, {"title": "A JSON object is required"})
            if name == "students":
                self._check_track_ref(body)
            record.update(body)
            record[self._id_key(name)] = entity_id
            if name == "students" and "ParcoursSuivi" in body:
                self._set_student_track(entity_id, record["ParcoursSuivi"])
            return record

        return handler

    def _deleter(self, name: str) -> Handler:
        def handler(entity_id: int, body: Any = None) -> None:
            self._find(name, entity_id)
            del self._store(name)[entity_id]
            if name == "tracks":
                self._forget_track(entity_id)
            if name == "students":
                self._set_student_track(entity_id, None)
            return None

        return handler

    def _forget_track(self, track_id: int) -> None:
        for student_id in self.track_students.pop(track_id, set()):
            student = self.students.get(student_id)
            if student is not None and student.get("ParcoursSuivi") == track_id:
                student["ParcoursSuivi"] = None
        for unit_id in self.track_units.pop(track_id, set()):
            unit = self.course_units.get(unit_id)
            if unit is not None:
                unit["EnseigneeDans"] = [t for t in unit.get("EnseigneeDans") or [] if t != track_id]

    # ------------------------------------------------------------------
    # Link tables
    # ------------------------------------------------------------------

    def _check_track_ref(self, body: dict[str, Any]) -> None:
        track_id = body.get("ParcoursSuivi")
        if track_id is not None and track_id not in self.tracks:
            raise ApiFailure(400, {"errors": {"ParcoursSuivi": [f"Parcours {track_id} does not exist."]}})

    def _set_student_track(self, student_id: int, track_id: Optional[int]) -> None:
        # a student is a member of at most one track
        for members in self.track_students.values():
            members.discard(student_id)
        if track_id is not None:
            self.track_students.setdefault(track_id, set()).add(student_id)

    def _link_student(self, track_id: int, student_id: int, body: Any = None) -> None:
        self._find("tracks", track_id)
        student = self._find("students", student_id)
        self._set_student_track(student_id, track_id)
        student["ParcoursSuivi"] = track_id

    def _unlink_student(self, track_id: int, student_id: int, body: Any = None) -> None:
        self._find("tracks", track_id)
        student = self._find("students", student_id)
        members = self.track_students.get(track_id, set())
        if student_id not in members:
            raise ApiFailure(404, {"title": "Etudiant not in Parcours"})
        members.discard(student_id)
        if student.get("ParcoursSuivi") == track_id:
            student["ParcoursSuivi"] = None

    def _link_course_unit(self, track_id: int, unit_id: int, body: Any = None) -> None:
        self._find("tracks", track_id)
        unit = self._find("course_units", unit_id)
        self.track_units.setdefault(track_id, set()).add(unit_id)
        taught_in = list(unit.get("EnseigneeDans") or [])
        if track_id not in taught_in:
            taught_in.append(track_id)
        unit["EnseigneeDans"] = taught_in

    def _unlink_course_unit(self, track_id: int, unit_id: int, body: Any = None) -> None:
        self._find("tracks", track_id)
        unit = self._find("course_units", unit_id)
        units = self.track_units.get(track_id, set())
        if unit_id not in units:
            raise ApiFailure(404, {"title": "Ue not in Parcours"})
        units.discard(unit_id)
        unit["EnseigneeDans"] = [t for t in unit.get("EnseigneeDans") or [] if t != track_id]

    # ------------------------------------------------------------------
    # Grades by (student, course unit)
    # ------------------------------------------------------------------

    def _pair_matches(self, student_id: int, unit_id: int) -> list[dict[str, Any]]:
        return [g for g in self.grades.values() if g.get("etudiantId") == student_id and g.get("ueId") == unit_id]

    def _grades_for_pair(self, student_id: int, unit_id: int, body: Any = None) -> list[dict[str, Any]]:
        return self._pair_matches(student_id, unit_id)

    def _update_grade_for_pair(self, student_id: int, unit_id: int, body: Any = None) -> dict[str, Any]:
        matches = self._pair_matches(student_id, unit_id)
        if not matches:
            raise ApiFailure(404, {"title": "Note not found"})
        if not isinstance(body, dict) or "Valeur" not in body:
            raise ApiFailure(400, {"errors": {"Valeur": ["The Valeur field is required."]}})
        grade = matches[0]
        grade["valeur"] = body["Valeur"]
        return grade

    def _delete_grade_for_pair(self, student_id: int, unit_id: int, body: Any = None) -> None:
        matches = self._pair_matches(student_id, unit_id)
        if not matches:
            raise ApiFailure(404, {"title": "Note not found"})
        for grade in matches:
            del self.grades[grade["id"]]

    # ------------------------------------------------------------------
    # Seed data
    # ------------------------------------------------------------------

    def _seed(self) -> None:
        licence = self._insert("tracks", {"NomParcours": "Licence Informatique", "AnneeFormation": 2023})
        master = self._insert("tracks", {"NomParcours": "Master MIAGE", "AnneeFormation": 2024})

        info = self._insert("course_units", {"NumeroUe": "245896", "Intitule": "Informatique", "EnseigneeDans": []})
        transverse = self._insert(
            "course_units", {"NumeroUe": "5464853", "Intitule": "Compétence transverse", "EnseigneeDans": []}
        )
        self._link_course_unit(licence["Id"], info["Id"])
        self._link_course_unit(master["Id"], transverse["Id"])
