"""
Unit tests for the entity wire format.

Relationships are written as identifiers only.
"""

import unittest

from scolarite.model import CourseUnit, Grade, Student, Track


class TestStudent(unittest.TestCase):
    def test_to_json_carries_track_id_only(self) -> None:
        s = Student(1, "Martin", "Alice", "E1", "a@example.org", Track(3, "Licence Informatique", 2023))
        data = s.to_json()
        self.assertEqual(data["ParcoursSuivi"], 3)
        self.assertEqual(s.track_id, 3)

    def test_no_track(self) -> None:
        s = Student(None, "Martin", "Alice", "E1", "a@example.org")
        self.assertIsNone(s.to_json()["ParcoursSuivi"])
        self.assertIsNone(s.track_id)

    def test_from_json_accepts_id_or_object(self) -> None:
        by_id = Student.from_json({"Id": 4, "Nom": "Martin", "ParcoursSuivi": 3})
        self.assertEqual(by_id.track_id, 3)
        nested = Student.from_json(
            {"Id": 4, "ParcoursSuivi": {"Id": 3, "NomParcours": "Master MIAGE", "AnneeFormation": 2024}}
        )
        self.assertEqual(nested.track, Track(3, "Master MIAGE", 2024))
        self.assertIsNone(Student.from_json({"Id": 4, "ParcoursSuivi": None}).track)


class TestCourseUnit(unittest.TestCase):
    def test_identifier_spellings(self) -> None:
        self.assertEqual(CourseUnit.from_json({"ID": 2, "NumeroUe": "5464853"}).id, 2)
        self.assertEqual(CourseUnit.from_json({"Id": 5}).id, 5)

    def test_tracks_from_ids_or_objects(self) -> None:
        unit = CourseUnit.from_json({"Id": 1, "EnseigneeDans": [1, {"Id": 2, "NomParcours": "Master MIAGE"}]})
        self.assertEqual(unit.track_ids, [1, 2])
        self.assertEqual(unit.to_json()["EnseigneeDans"], [1, 2])


class TestGrade(unittest.TestCase):
    def test_roundtrip_fields(self) -> None:
        g = Grade.from_json({"id": 1, "valeur": 15.5, "etudiantId": 12, "ueId": 7})
        self.assertEqual(g.key, (12, 7))
        self.assertEqual(g.to_json(), {"id": 1, "valeur": 15.5, "etudiantId": 12, "ueId": 7})

    def test_composite_record_spelling(self) -> None:
        g = Grade.from_json({"IdEtudiant": 12, "IdUe": 7, "Valeur": 11})
        self.assertEqual((g.student_id, g.course_unit_id, g.value), (12, 7, 11))


if __name__ == "__main__":
    unittest.main()
