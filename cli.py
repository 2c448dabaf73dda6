from __future__ import annotations

import argparse
import json
import os
import shlex
import sys
from typing import List, Optional

import uvicorn

from codebrief.errors import CodebriefError
from codebrief.fs_scan import scan_repository
from codebrief.log import configure_logging
from codebrief.pattern_scan import search_files
from codebrief.pipeline import run_pipeline
from codebrief.settings import get_settings
from codebrief.tools import run_readonly_command


def _print(payload) -> None:
	print(json.dumps(payload, indent=2))


def _extensions(args: argparse.Namespace) -> Optional[List[str]]:
	if args.ext:
		return args.ext
	return get_settings().extension_list


def cmd_files(args: argparse.Namespace) -> None:
	files = scan_repository(os.path.abspath(args.path), extensions=_extensions(args))
	_print([f.model_dump() for f in files])


def cmd_grep(args: argparse.Namespace) -> None:
	files = scan_repository(os.path.abspath(args.path), extensions=_extensions(args))
	matches = search_files(files, args.pattern, regex=args.regex, ignore_case=args.ignore_case, max_matches=args.max)
	_print([m.model_dump() for m in matches])


def cmd_signatures(args: argparse.Namespace) -> None:
	report = run_pipeline(
		args.path,
		pattern=args.pattern,
		extensions=_extensions(args),
		summarize=False,
	)
	_print([s.model_dump() for s in report.signatures])


def cmd_summarize(args: argparse.Namespace) -> None:
	report = run_pipeline(
		args.path,
		pattern=args.pattern,
		extensions=_extensions(args),
		regex=args.regex,
		limit=args.limit,
	)
	_print(report.model_dump())


def cmd_run(args: argparse.Namespace) -> None:
	settings = get_settings()
	command = shlex.join(args.command)
	print(
		run_readonly_command(
			command,
			os.path.abspath(args.path),
			timeout=settings.command_timeout,
			max_output=settings.max_output,
		),
		end="",
	)


def cmd_serve(args: argparse.Namespace) -> None:
	uvicorn.run("api:create_app", factory=True, host=args.host, port=args.port, reload=args.reload)


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="codebrief")
	sub = parser.add_subparsers(dest="cmd", required=True)

	pf = sub.add_parser("files", help="List source files")
	pf.add_argument("path", help="Path to repository root")
	pf.add_argument("--ext", action="append", help="Only files with this extension (repeatable)")
	pf.set_defaults(func=cmd_files)

	pg = sub.add_parser("grep", help="Search files line by line")
	pg.add_argument("path")
	pg.add_argument("pattern")
	pg.add_argument("--regex", action="store_true", help="Treat pattern as a regular expression")
	pg.add_argument("-i", "--ignore-case", action="store_true")
	pg.add_argument("--max", type=int, default=None, help="Stop after this many matches")
	pg.add_argument("--ext", action="append")
	pg.set_defaults(func=cmd_grep)

	ps = sub.add_parser("signatures", help="Extract function, method and class signatures")
	ps.add_argument("path")
	ps.add_argument("--pattern", help="Only files containing this text")
	ps.add_argument("--ext", action="append")
	ps.set_defaults(func=cmd_signatures)

	pm = sub.add_parser("summarize", help="Summarize each code unit with the model")
	pm.add_argument("path")
	pm.add_argument("--pattern", help="Only files containing this text")
	pm.add_argument("--regex", action="store_true")
	pm.add_argument("--limit", type=int, default=None, help="Maximum units to summarize")
	pm.add_argument("--ext", action="append")
	pm.set_defaults(func=cmd_summarize)

	pr = sub.add_parser("run", help="Run a read-only command inside the repository")
	pr.add_argument("path")
	pr.add_argument("command", nargs=argparse.REMAINDER)
	pr.set_defaults(func=cmd_run)

	pv = sub.add_parser("serve", help="Run FastAPI server")
	pv.add_argument("--host", default="127.0.0.1")
	pv.add_argument("--port", type=int, default=8000)
	pv.add_argument("--reload", action="store_true")
	pv.set_defaults(func=cmd_serve)

	return parser


def main(argv: Optional[List[str]] = None) -> int:
	args = build_parser().parse_args(argv)
	configure_logging(get_settings().log_level)
	if args.cmd == "run" and args.command and args.command[0] == "--":
		args.command = args.command[1:]
	try:
		args.func(args)
	except CodebriefError as e:
		print(f"error: {e}", file=sys.stderr)
		return 1
	return 0


if __name__ == "__main__":
	sys.exit(main())
