"""Command line entry point for tingxie."""
import argparse
import logging
import sys
from datetime import datetime, UTC
from typing import List, Optional, Tuple

from tingxie.config import settings
from tingxie.errors import TingxieError
from tingxie.logging_config import setup_logging
from tingxie.models.base import SessionLocal, init_db
from tingxie.models.session_models import SelectionMode, WordStatus
from tingxie.services.backup_service import dump_backup, load_backup
from tingxie.services.learning_service import LearningService
from tingxie.services.notification_service import ReminderService

logger = logging.getLogger("tingxie")


def parse_grade(token: str) -> Tuple[str, bool]:
    """Parse ``ID`` or ``ID=0``/``ID=1`` into an outcome pair."""
    word_id, _, value = token.partition("=")
    if value not in ("", "0", "1"):
        raise argparse.ArgumentTypeError(f"Expected ID, ID=0 or ID=1, got {token!r}")
    return word_id, value != "0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tingxie", description="Dictation review scheduler")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    commands = parser.add_subparsers(dest="command", required=True)

    add = commands.add_parser("add", help="Add a group of words")
    add.add_argument("group")
    add.add_argument("words", nargs="+")

    session = commands.add_parser("session", help="Select words for a session")
    session.add_argument("mode", choices=[mode.value for mode in SelectionMode])
    session.add_argument("--group", default=None)
    session.add_argument("--only-errors", action="store_true")

    grade = commands.add_parser("grade", help="Record session results")
    grade.add_argument("results", nargs="+", type=parse_grade, metavar="ID[=0|1]")

    mark = commands.add_parser("mark", help="Override a word's status")
    mark.add_argument("word_id")
    mark.add_argument("status", choices=[status.value.lower() for status in WordStatus])

    commands.add_parser("stats", help="Show collection counters")

    export = commands.add_parser("export", help="Write a backup file")
    export.add_argument("path")

    restore = commands.add_parser("import", help="Restore a backup file")
    restore.add_argument("path")

    commands.add_parser("remind", help="Print a reminder if words are due")
    return parser


def run(args: argparse.Namespace, service: LearningService, now: datetime) -> int:
    """Execute one command and return the exit status."""
    if args.command == "add":
        records = service.word_service.add_group(args.words, args.group, now)
        for record in records:
            print(f"{record.id}  {record.text}")
        return 0

    if args.command == "session":
        selection = service.start_session(
            SelectionMode(args.mode), now, group_title=args.group, only_errors=args.only_errors
        )
        if selection.nothing_to_review:
            print("Nothing to review.")
            return 0
        for word in selection:
            print(f"{word.id}  {word.text}")
        return 0

    if args.command == "grade":
        changed = service.finish_session(args.results, now)
        print(f"Graded {len(changed)} words.")
        return 0

    if args.command == "mark":
        record = service.update_word_status(args.word_id, WordStatus(args.status.upper()), now)
        print(f"{record.text}: next review {record.next_review:%Y-%m-%d %H:%M}")
        return 0

    if args.command == "stats":
        stats = service.dashboard(now)
        print(f"Words: {stats.total}  Due: {stats.due}  Mastered: {stats.mastered}  With errors: {stats.with_errors}")
        for group in stats.groups:
            print(f"  {group.title}: {group.total} words, {group.due} due, {group.mastered} mastered")
        return 0

    if args.command == "export":
        dump_backup(args.path, service.word_service.load_words(), service.settings, now)
        return 0

    if args.command == "import":
        words, overrides = load_backup(args.path)
        imported = service.restore_backup(words, overrides)
        print(f"Imported {len(words)} words.")
        if overrides:
            print(f"Backup settings: order={imported.order.value}, batch={imported.max_review_batch_size}")
        return 0

    if args.command == "remind":
        reminders = ReminderService()
        words = service.word_service.load_words()
        message = reminders.get_reminder_message(words, now)
        if message is None:
            print("Nothing is due.")
            return 0

        preferences = service.preference_service
        if reminders.should_send_reminder(words, now, preferences.last_reminder_time()):
            print(message)
            preferences.update_last_reminder_time(now)
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level or settings.logging.level)

    init_db()
    db = SessionLocal()
    try:
        return run(args, LearningService(db), datetime.now(UTC))
    except TingxieError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
