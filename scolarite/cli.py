"""
CLI (Command Line Interface).

Quick terminal commands on top of the accessors, e.g.:

    scolarite login <token>
    scolarite list students
    scolarite get tracks 2
    scolarite move-student 12 3
    scolarite link-ue 3 7
    scolarite set-grade 12 7 15.5
    scolarite --offline list course-units

Output is JSON. A failed command prints the backend's message and exits with 1.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Optional

from scolarite.client import ApiClient
from scolarite.config import Settings
from scolarite.errors import AccessError, ReconciliationError, UpdateState
from scolarite.mocks import InMemoryBackend
from scolarite.model import Student, Track
from scolarite.registry import AccessorRegistry
from scolarite.storage import clear_auth_token, save_auth_token


logger = logging.getLogger(__name__)

KINDS = ("students", "tracks", "course-units", "grades")


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _accessor(registry: AccessorRegistry, kind: str) -> Any:
    return getattr(registry, kind.replace("-", "_"))


def _parse_track(raw: str) -> Optional[int]:
    """
    'none' (or empty) means: the student follows no track.
    """
    text = (raw or "").strip().lower()
    if text in ("", "none", "null", "-"):
        return None
    return int(text)


def _cmd_login(args: argparse.Namespace, settings: Settings) -> int:
    token = (args.token or "").strip()
    if not token:
        print("Please provide a token.")
        return 1
    save_auth_token(token, settings.token_file)
    print("Token saved.")
    return 0


def _cmd_logout(args: argparse.Namespace, settings: Settings) -> int:
    if clear_auth_token(settings.token_file):
        print("Token removed.")
    else:
        print("No stored token.")
    return 0


def _cmd_list(args: argparse.Namespace, registry: AccessorRegistry) -> int:
    _print_json(_accessor(registry, args.kind).list())
    return 0


def _cmd_get(args: argparse.Namespace, registry: AccessorRegistry) -> int:
    _print_json(_accessor(registry, args.kind).get(args.id))
    return 0


def _cmd_delete(args: argparse.Namespace, registry: AccessorRegistry) -> int:
    _accessor(registry, args.kind).delete(args.id)
    print(f"Deleted: {args.kind} {args.id}")
    return 0


def _cmd_move_student(args: argparse.Namespace, registry: AccessorRegistry) -> int:
    """
    Move a student to another track (or to none).

    The student's current track, as returned by the backend, is passed as the
    previous track so that only the needed unlink / link calls are issued.
    """
    try:
        new_track_id = _parse_track(args.track)
    except ValueError:
        print(f"Invalid track id: {args.track!r}")
        return 1

    student = Student.from_json(registry.students.get(args.student_id))
    previous_track_id = student.track_id

    student.track = Track(id=new_track_id, name=None, year=None) if new_track_id is not None else None

    try:
        updated = registry.students.update(args.student_id, student, previous_track_id=previous_track_id)
    except ReconciliationError as exc:
        if exc.state is UpdateState.PARTIAL:
            steps = ", ".join(f"{step} {track}" for step, track in exc.completed)
            print(f"Warning: student partially updated (done: {steps}).")
        raise

    _print_json(updated)
    return 0


def _cmd_link_ue(args: argparse.Namespace, registry: AccessorRegistry) -> int:
    registry.tracks.add_course_unit_to_track(args.track_id, args.ue_id)
    print(f"Linked: course unit {args.ue_id} -> track {args.track_id}")
    return 0


def _cmd_unlink_ue(args: argparse.Namespace, registry: AccessorRegistry) -> int:
    registry.tracks.remove_course_unit_from_track(args.track_id, args.ue_id)
    print(f"Unlinked: course unit {args.ue_id} -/- track {args.track_id}")
    return 0


def _cmd_grade(args: argparse.Namespace, registry: AccessorRegistry) -> int:
    grade = registry.grades.get_by_student_and_course_unit(args.student_id, args.ue_id)
    if grade is None:
        print("No grade.")
        return 0
    _print_json(grade)
    return 0


def _cmd_set_grade(args: argparse.Namespace, registry: AccessorRegistry) -> int:
    _print_json(registry.grades.update_by_student_and_course_unit(args.student_id, args.ue_id, args.value))
    return 0


def _cmd_clear_grade(args: argparse.Namespace, registry: AccessorRegistry) -> int:
    registry.grades.delete_by_student_and_course_unit(args.student_id, args.ue_id)
    print(f"Deleted grade of student {args.student_id} in course unit {args.ue_id}")
    return 0


COMMANDS = {
    "list": _cmd_list,
    "get": _cmd_get,
    "delete": _cmd_delete,
    "move-student": _cmd_move_student,
    "link-ue": _cmd_link_ue,
    "unlink-ue": _cmd_unlink_ue,
    "grade": _cmd_grade,
    "set-grade": _cmd_set_grade,
    "clear-grade": _cmd_clear_grade,
}


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="scolarite", description="Academic records API client")
    parser.add_argument("--offline", action="store_true", help="Use the in-memory backend instead of the API")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every request")
    sub = parser.add_subparsers(dest="command", required=True)

    p_login = sub.add_parser("login", help="Store the auth token used for requests")
    p_login.add_argument("token", type=str, help="Bearer token")

    sub.add_parser("logout", help="Remove the stored auth token")

    p_list = sub.add_parser("list", help="List a collection")
    p_list.add_argument("kind", choices=KINDS)

    p_get = sub.add_parser("get", help="Show one record")
    p_get.add_argument("kind", choices=KINDS)
    p_get.add_argument("id", type=int)

    p_delete = sub.add_parser("delete", help="Delete one record")
    p_delete.add_argument("kind", choices=KINDS)
    p_delete.add_argument("id", type=int)

    p_move = sub.add_parser("move-student", help="Change the track a student follows")
    p_move.add_argument("student_id", type=int)
    p_move.add_argument("track", type=str, help="New track id, or 'none'")

    for name, help_text in (("link-ue", "Add a course unit to a track"), ("unlink-ue", "Remove a course unit from a track")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("track_id", type=int)
        p.add_argument("ue_id", type=int)

    p_grade = sub.add_parser("grade", help="Show the grade of a student in a course unit")
    p_grade.add_argument("student_id", type=int)
    p_grade.add_argument("ue_id", type=int)

    p_set = sub.add_parser("set-grade", help="Set the grade of a student in a course unit")
    p_set.add_argument("student_id", type=int)
    p_set.add_argument("ue_id", type=int)
    p_set.add_argument("value", type=float)

    p_clear = sub.add_parser("clear-grade", help="Delete the grade of a student in a course unit")
    p_clear.add_argument("student_id", type=int)
    p_clear.add_argument("ue_id", type=int)

    return parser


def build_registry(settings: Settings, offline: bool = False) -> AccessorRegistry:
    if offline:
        return AccessorRegistry(InMemoryBackend())
    return AccessorRegistry(ApiClient.from_settings(settings))


def main(argv: list[str] | None = None, registry: AccessorRegistry | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = Settings.from_env()

    if args.command == "login":
        raise SystemExit(_cmd_login(args, settings))
    if args.command == "logout":
        raise SystemExit(_cmd_logout(args, settings))

    handler = COMMANDS.get(args.command)
    if handler is None:
        raise SystemExit(2)

    if registry is None:
        registry = build_registry(settings, offline=args.offline)

    try:
        code = handler(args, registry)
    except AccessError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        code = 1

    raise SystemExit(code)
