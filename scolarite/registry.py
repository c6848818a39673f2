"""
Accessor registry: exactly one accessor per entity type.

Build one registry at startup and pass it to whoever needs data access:

    registry = AccessorRegistry(ApiClient.from_settings(Settings.from_env()))
    registry.students.update(12, student, previous_track_id=3)

Accessors are created lazily on first access and then kept for the lifetime
of the registry. All of them share the registry's client.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

from scolarite.accessors import (
    ACCESSORS,
    CourseUnitAccessor,
    GradeAccessor,
    StudentAccessor,
    TrackAccessor,
    Transport,
)
from scolarite.model import CourseUnit, Grade, Student, Track


class AccessorRegistry:
    def __init__(self, client: Transport, factories: Optional[Mapping[type, Callable[[Transport], Any]]] = None):
        self.client = client
        self._factories = dict(ACCESSORS if factories is None else factories)
        self._instances: dict[type, Any] = {}

    def get(self, entity_type: type) -> Any:
        if entity_type not in self._instances:
            try:
                factory = self._factories[entity_type]
            except KeyError:
                raise KeyError(f"No accessor registered for {entity_type.__name__}") from None
            self._instances[entity_type] = factory(self.client)
        return self._instances[entity_type]

    @property
    def students(self) -> StudentAccessor:
        return self.get(Student)

    @property
    def tracks(self) -> TrackAccessor:
        return self.get(Track)

    @property
    def course_units(self) -> CourseUnitAccessor:
        return self.get(CourseUnit)

    @property
    def grades(self) -> GradeAccessor:
        return self.get(Grade)
