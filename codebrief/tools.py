"""Constrained shell access for agents.

Only a handful of read-only programs may run, never through a shell, and
every path-like argument must stay inside the working directory.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional

from strands import tool

from .errors import ToolError

logger = logging.getLogger(__name__)

ALLOWED_COMMANDS: FrozenSet[str] = frozenset({"ls", "cat", "head", "tail", "wc", "grep", "find"})

SHELL_METACHARACTERS = (";", "|", "&", ">", "<", "$", "`", "\n")

FORBIDDEN_ARGUMENTS: Dict[str, FrozenSet[str]] = {
	"find": frozenset({"-exec", "-execdir", "-ok", "-okdir", "-delete", "-fprint", "-fprint0", "-fprintf", "-fls"}),
}

# short options that take a value, which may be attached as in "grep -fFILE"
VALUE_OPTIONS: Dict[str, str] = {
	"grep": "efmABCdD",
	"head": "nc",
	"tail": "ncs",
	"ls": "wIT",
}

TRUNCATION_MARKER = "\n[truncated]"


def _inside(root: str, candidate: str) -> bool:
	root = os.path.realpath(root)
	target = os.path.realpath(os.path.join(root, candidate))
	return target == root or target.startswith(root + os.sep)


def _option_value(program: str, arg: str) -> Optional[str]:
	"""The value carried inside an option argument, or None when it has none."""
	if arg.startswith("--"):
		return arg.split("=", 1)[1] if "=" in arg else None
	if program == "find":
		# find options take their values as separate arguments
		return None
	letters = VALUE_OPTIONS.get(program, "")
	for i, ch in enumerate(arg[1:], start=1):
		if ch in letters:
			return arg[i + 1:] or None
	if "/" in arg or ".." in arg:
		return arg[1:]
	return None


def validate_command(command: str, cwd: str, allowed: Iterable[str] = ALLOWED_COMMANDS) -> List[str]:
	"""Split command into argv, raising ToolError if it is not allowed to run."""
	if not command or not command.strip():
		raise ToolError("Empty command")
	for ch in SHELL_METACHARACTERS:
		if ch in command:
			raise ToolError(f"Shell metacharacter {ch!r} is not allowed")
	try:
		argv = shlex.split(command)
	except ValueError as e:
		raise ToolError(f"Cannot parse command: {e}") from e

	program = argv[0]
	if program not in set(allowed):
		raise ToolError(f"Command {program!r} is not allowed")

	forbidden = FORBIDDEN_ARGUMENTS.get(program, frozenset())
	for arg in argv[1:]:
		if arg in forbidden:
			raise ToolError(f"Argument {arg!r} is not allowed for {program}")
		value = _option_value(program, arg) if arg.startswith("-") else arg
		if value is None:
			continue
		if os.path.isabs(value) or not _inside(cwd, value):
			raise ToolError(f"Path {value!r} escapes the working directory")
	return argv


def run_readonly_command(
	command: str,
	cwd: str,
	allowed: Iterable[str] = ALLOWED_COMMANDS,
	timeout: float = 10,
	max_output: int = 10000,
) -> str:
	argv = validate_command(command, cwd, allowed)
	logger.info("Running %s in %s", argv, cwd)
	try:
		proc = subprocess.run(argv, cwd=cwd, capture_output=True, text=True, timeout=timeout, check=False)
	except subprocess.TimeoutExpired as e:
		raise ToolError(f"Command timed out after {timeout}s") from e
	except FileNotFoundError as e:
		raise ToolError(f"Command {argv[0]!r} is not installed") from e

	if proc.returncode != 0:
		return f"exit {proc.returncode}: {proc.stderr.strip()}"[:max_output]
	out = proc.stdout
	if len(out) > max_output:
		if max_output > len(TRUNCATION_MARKER):
			out = out[:max_output - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER
		else:
			out = out[:max_output]
	return out


def make_shell_tool(root: str, timeout: float = 10, max_output: int = 10000) -> Callable[..., str]:
	"""Build a Strands tool that runs read-only commands inside root."""
	root = os.path.abspath(root)

	@tool
	def shell(command: str) -> str:
		"""Run a read-only command (ls, cat, head, tail, wc, grep, find) in the repository.

		Pipes, redirection and paths outside the repository are refused.

		Args:
			command: The command line to run, for example "grep -n TODO src/app.py".
		"""
		try:
			return run_readonly_command(command, root, timeout=timeout, max_output=max_output)
		except ToolError as e:
			logger.warning("Refused command %r: %s", command, e)
			return f"Error: {e}"

	return shell
