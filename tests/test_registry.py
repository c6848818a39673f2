import unittest

from scolarite.accessors import CourseUnitAccessor, GradeAccessor, StudentAccessor, TrackAccessor
from scolarite.mocks import InMemoryBackend
from scolarite.model import CourseUnit, Grade, Student, Track
from scolarite.registry import AccessorRegistry


class TestAccessorRegistry(unittest.TestCase):
    def test_one_instance_per_entity_type(self) -> None:
        registry = AccessorRegistry(InMemoryBackend(seed=False))
        self.assertIs(registry.get(Student), registry.get(Student))
        self.assertIs(registry.students, registry.get(Student))
        self.assertIs(registry.grades, registry.grades)

    def test_accessor_types(self) -> None:
        registry = AccessorRegistry(InMemoryBackend(seed=False))
        self.assertIsInstance(registry.students, StudentAccessor)
        self.assertIsInstance(registry.tracks, TrackAccessor)
        self.assertIsInstance(registry.course_units, CourseUnitAccessor)
        self.assertIsInstance(registry.grades, GradeAccessor)

    def test_accessors_share_the_client(self) -> None:
        backend = InMemoryBackend(seed=False)
        registry = AccessorRegistry(backend)
        self.assertIs(registry.students.client, backend)
        self.assertIs(registry.tracks.client, registry.grades.client)

    def test_built_lazily(self) -> None:
        built = []

        def factory(client):
            built.append(client)
            return TrackAccessor(client)

        registry = AccessorRegistry(InMemoryBackend(seed=False), factories={Track: factory})
        self.assertEqual(built, [])
        registry.tracks
        registry.tracks
        self.assertEqual(len(built), 1)

    def test_unknown_type(self) -> None:
        registry = AccessorRegistry(InMemoryBackend(seed=False), factories={Track: TrackAccessor})
        with self.assertRaises(KeyError):
            registry.get(CourseUnit)
        with self.assertRaises(KeyError):
            registry.get(Grade)

    def test_registries_are_independent(self) -> None:
        a = AccessorRegistry(InMemoryBackend(seed=False))
        b = AccessorRegistry(InMemoryBackend(seed=False))
        self.assertIsNot(a.students, b.students)


if __name__ == "__main__":
    unittest.main()
