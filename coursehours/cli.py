"""
CLI (Command Line Interface).

This module provides terminal commands around the hours dashboard, e.g.:

    coursehours import <calendar.ics> <session.json>
    coursehours modules <source>
    coursehours show <source>
    coursehours export-md <source> <out.md>
    coursehours export-pdf <source> <out.pdf>

<source> is either a saved session (.json) or a calendar export (anything else).

Every command that shows data accepts the same filters:
    --start / --end YYYY-MM-DD   date range (default: session range or school year)
    --sort date|code             module order (default: session preference)
    --module "R5.09 (standard)"  restrict to modules, repeatable

Note:
- plain text output, except for the matrix which is printed as a rich table
- decode errors are printed as one message and exit with code 1
"""

from __future__ import annotations

import argparse
from datetime import datetime
from pathlib import Path
from typing import Optional

from coursehours.aggregate import SORT_POLICIES, aggregate, filter_by_date_range, module_keys
from coursehours.colors import assign_module_colors
from coursehours.errors import CourseHoursError
from coursehours.export_markdown import export_markdown
from coursehours.export_pdf import export_pdf
from coursehours.ics_import import load_calendar_file
from coursehours.model import AggregationResult, ModuleKey, ScheduleEntry, module_label, parse_module_label
from coursehours.storage import SessionState, load_session, save_session, school_year_bounds
from coursehours.table_view import print_table


NO_DATA_MESSAGE = "No sessions found for the selected period or modules. Try another date range or module filter."


def _date_arg(value: str) -> str:
    """
    argparse type for 'YYYY-MM-DD' values.
    """
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date().isoformat()
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r} (expected YYYY-MM-DD)")


def _module_arg(value: str) -> ModuleKey:
    try:
        return parse_module_label(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def _load_source(path: str) -> SessionState:
    """
    Open a session file or decode a calendar, depending on the file suffix.
    """
    source = Path(path)
    if source.suffix.lower() == ".json":
        return load_session(source)

    entries = load_calendar_file(source)
    labels = [module_label(code, cohort) for code, cohort in module_keys(entries)]
    return SessionState(entries=entries, module_colors=assign_module_colors(labels), file_name=source.name)


def _entries_in_range(args: argparse.Namespace, state: SessionState) -> list[ScheduleEntry]:
    start = args.start or state.default_start_date
    end = args.end or state.default_end_date
    return filter_by_date_range(state.entries, start, end)


def _module_filter(args: argparse.Namespace, state: SessionState) -> Optional[set[ModuleKey]]:
    """
    --module flags win over the saved selection; no selection at all means every module.

    The saved selection belongs to the saved date range: another range starts
    again from every module found in it.
    """
    if args.module:
        return set(args.module)

    start = args.start or state.default_start_date
    end = args.end or state.default_end_date
    if (start, end) != (state.default_start_date, state.default_end_date):
        return None

    keys: set[ModuleKey] = set()
    for label in state.selected_modules:
        try:
            keys.add(parse_module_label(label))
        except ValueError:
            continue
    return keys or None


def _build_result(args: argparse.Namespace, state: SessionState) -> AggregationResult:
    entries = _entries_in_range(args, state)
    sort_policy = args.sort or state.sort_order
    return aggregate(entries, sort_policy=sort_policy, module_filter=_module_filter(args, state))


def _cmd_import(args: argparse.Namespace) -> int:
    """
    Decode a calendar and store its entries plus default preferences in a session file.
    """
    entries = load_calendar_file(args.calendar)
    if not entries:
        print("The calendar file does not contain any event.")
        return 1

    default_start, default_end = school_year_bounds()
    start = args.start or default_start
    end = args.end or default_end

    in_range = filter_by_date_range(entries, start, end)
    labels = [module_label(code, cohort) for code, cohort in module_keys(in_range)]

    state = SessionState(
        entries=entries,
        module_colors=assign_module_colors(labels),
        sort_order=args.sort or "date",
        default_start_date=start,
        default_end_date=end,
        available_modules=labels,
        selected_modules=list(labels),
        file_name=Path(args.calendar).name,
    )
    save_session(state, args.session)

    print(f"Imported {len(entries)} sessions ({len(in_range)} between {start} and {end}, {len(labels)} modules)")
    print(f"Session saved to: {args.session}")
    if not in_range:
        print(NO_DATA_MESSAGE)
    return 0


def _cmd_modules(args: argparse.Namespace) -> int:
    """
    List module labels available in the active date range.
    """
    state = _load_source(args.source)
    entries = _entries_in_range(args, state)
    keys = module_keys(entries)

    if not keys:
        print(NO_DATA_MESSAGE)
        return 0

    selected = _module_filter(args, state)
    for code, cohort in keys:
        mark = "*" if selected is None or (code, cohort) in selected else " "
        print(f"[{mark}] {module_label(code, cohort)}")
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    state = _load_source(args.source)
    result = _build_result(args, state)

    if result.is_empty:
        print(NO_DATA_MESSAGE)
        return 0

    print_table(result)
    return 0


def _cmd_export_md(args: argparse.Namespace) -> int:
    state = _load_source(args.source)
    result = _build_result(args, state)

    if result.is_empty:
        print(NO_DATA_MESSAGE)
        return 0

    out = export_markdown(result, args.out)
    print(f"Exported {len(result.ordered_modules)} modules to: {out}")
    return 0


def _cmd_export_pdf(args: argparse.Namespace) -> int:
    state = _load_source(args.source)
    result = _build_result(args, state)

    if result.is_empty:
        print(NO_DATA_MESSAGE)
        return 0

    out = export_pdf(result, args.out, module_colors=state.module_colors)
    print(f"Exported {len(result.ordered_modules)} modules to: {out}")
    return 0


def _add_filters(p: argparse.ArgumentParser) -> None:
    p.add_argument("--start", type=_date_arg, default=None, help="First day (YYYY-MM-DD)")
    p.add_argument("--end", type=_date_arg, default=None, help="Last day (YYYY-MM-DD)")
    p.add_argument("--sort", choices=SORT_POLICIES, default=None, help="Module order")
    p.add_argument(
        "--module",
        type=_module_arg,
        action="append",
        default=None,
        help='Module label, e.g. "R5.09 (standard)" (repeatable)',
    )


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="coursehours", description="Teaching hours dashboard")
    sub = parser.add_subparsers(dest="command", required=True)

    p_import = sub.add_parser("import", help="Decode a calendar into a session file")
    p_import.add_argument("calendar", type=str, help="Calendar export (.ics)")
    p_import.add_argument("session", type=str, help="Session file to write (.json)")
    p_import.add_argument("--start", type=_date_arg, default=None, help="First day (YYYY-MM-DD)")
    p_import.add_argument("--end", type=_date_arg, default=None, help="Last day (YYYY-MM-DD)")
    p_import.add_argument("--sort", choices=SORT_POLICIES, default=None, help="Module order")

    p_modules = sub.add_parser("modules", help="List modules in the date range")
    p_modules.add_argument("source", type=str, help="Session (.json) or calendar (.ics)")
    _add_filters(p_modules)

    p_show = sub.add_parser("show", help="Print the hours table")
    p_show.add_argument("source", type=str, help="Session (.json) or calendar (.ics)")
    _add_filters(p_show)

    p_md = sub.add_parser("export-md", help="Export the hours table as markdown")
    p_md.add_argument("source", type=str, help="Session (.json) or calendar (.ics)")
    p_md.add_argument("out", type=str, help="Output file path (e.g. hours.md)")
    _add_filters(p_md)

    p_pdf = sub.add_parser("export-pdf", help="Export the hours table as PDF")
    p_pdf.add_argument("source", type=str, help="Session (.json) or calendar (.ics)")
    p_pdf.add_argument("out", type=str, help="Output file path (e.g. hours.pdf)")
    _add_filters(p_pdf)

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    handlers = {
        "import": _cmd_import,
        "modules": _cmd_modules,
        "show": _cmd_show,
        "export-md": _cmd_export_md,
        "export-pdf": _cmd_export_pdf,
    }

    handler = handlers.get(args.command)
    if handler is None:
        raise SystemExit(2)

    try:
        code = handler(args)
    except CourseHoursError as exc:
        print(f"Error: {exc}")
        raise SystemExit(1)

    raise SystemExit(code)
