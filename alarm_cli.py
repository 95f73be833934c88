import argparse
import asyncio
import logging
import sys
from datetime import datetime, time
from typing import List, Optional

from alarms.controller import AlarmListController, AlarmRow
from alarms.messages import error_message, t
from alarms.storage import AlarmStore, FileStorage, StoreError
from alarms.validation import ValidationError
from config import Config, load_config, setup_logging
from time_utils import format_local_date, resolve_timezone

logger = logging.getLogger("cycle_alarms")

BAR_WIDTH = 20


def progress_bar(progress: float, width: int = BAR_WIDTH) -> str:
    filled = int(round(progress * width))
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def render_rows(rows: List[AlarmRow], lang: str, tz) -> str:
    lines = [t("my_alarms", lang)]
    if not rows:
        lines.append(t("no_alarms", lang))
        return "\n".join(lines)
    for row in rows:
        alarm = row.record
        status = f" {t('due', lang)}" if row.is_due else ""
        lines.append(f"{alarm.id}  {alarm.name}{status}")
        lines.append(
            f"    {progress_bar(row.progress)} "
            f"{t('start_date_label', lang)} {format_local_date(alarm.started_at, tz)}  "
            f"{t('remaining_days', lang)} {row.remaining_days}{t('days', lang)}"
        )
    return "\n".join(lines)


def parse_start_date(raw: str, tz) -> datetime:
    day = datetime.strptime(raw, "%Y-%m-%d").date()
    return datetime.combine(day, time(0, 0), tzinfo=tz)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cycle-alarms", description="Recurring reminder alarms")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("list", help="show alarms, most urgent first")
    add = sub.add_parser("add", help="add an alarm starting now")
    add.add_argument("name")
    add.add_argument("interval")
    edit = sub.add_parser("edit", help="change name, interval and start date")
    edit.add_argument("id")
    edit.add_argument("name")
    edit.add_argument("interval")
    edit.add_argument("--start", help="cycle start date, YYYY-MM-DD (default: keep current)")
    reset = sub.add_parser("reset", help="restart the cycle of an alarm now")
    reset.add_argument("id")
    delete = sub.add_parser("delete", help="delete an alarm")
    delete.add_argument("id")
    return parser


async def run_command(args: argparse.Namespace, config: Config) -> List[str]:
    tz = resolve_timezone(config.timezone_name)
    store = AlarmStore(FileStorage(config.storage_dir), key=config.storage_key)
    controller = AlarmListController(store)
    rows = await controller.activate()
    notice: Optional[str] = None

    if args.command == "add":
        rows = await controller.on_add_submit(args.name, args.interval)
        notice = t("added", config.lang)
    elif args.command == "edit":
        record = controller.on_edit(args.id)
        if record is None:
            raise KeyError(args.id)
        try:
            started_at = parse_start_date(args.start, tz) if args.start else record.started_at
            rows = await controller.on_edit_submit(args.name, args.interval, started_at)
        except ValidationError:
            controller.on_edit_cancel()
            raise
        notice = t("updated", config.lang)
    elif args.command in ("reset", "delete") and not any(a.id == args.id for a in controller.alarms):
        raise KeyError(args.id)
    elif args.command == "reset":
        rows = await controller.on_reset(args.id)
        notice = t("reset", config.lang)
    elif args.command == "delete":
        rows = await controller.on_delete(args.id)
        notice = t("deleted", config.lang)

    output = [render_rows(rows, config.lang, tz)]
    if notice:
        output.insert(0, notice)
    return output


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command is None:
        args.command = "list"
    config = load_config()
    setup_logging(config.log_level, config.log_dir, config.log_to_file, config.log_max_bytes)
    try:
        output = asyncio.run(run_command(args, config))
    except ValidationError as exc:
        for kind in exc.kinds:
            print(error_message(kind, config.lang), file=sys.stderr)
        return 2
    except KeyError as exc:
        logger.error("Unknown alarm id %s", exc)
        return 2
    except ValueError as exc:
        logger.error("Invalid argument: %s", exc)
        return 2
    except StoreError as exc:
        print(f"{t('store_error', config.lang)} {exc}", file=sys.stderr)
        return 1
    for block in output:
        print(block)
    return 0


if __name__ == "__main__":
    sys.exit(main())
