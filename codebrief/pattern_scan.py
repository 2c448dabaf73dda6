from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Pattern, Tuple

from .errors import PatternError
from .model import FileInfo, PatternMatch

logger = logging.getLogger(__name__)


def compile_pattern(pattern: str, regex: bool = False, ignore_case: bool = False) -> Pattern[str]:
	if not pattern:
		raise PatternError("Empty search pattern")
	flags = re.IGNORECASE if ignore_case else 0
	source = pattern if regex else re.escape(pattern)
	try:
		return re.compile(source, flags)
	except re.error as e:
		raise PatternError(f"Invalid regular expression {pattern!r}: {e}") from e


def search_text(
	text: str,
	pattern: str,
	regex: bool = False,
	ignore_case: bool = False,
) -> List[Tuple[int, str, int, int]]:
	"""Return (line, text, start, end) for the first hit on each matching line."""
	compiled = compile_pattern(pattern, regex=regex, ignore_case=ignore_case)
	return _search_compiled(text, compiled)


def split_lines(text: str) -> List[str]:
	"""Split on line feeds only, so line numbers agree with ast, grep and re.MULTILINE."""
	lines = text.split("\n")
	if lines and lines[-1] == "":
		lines.pop()
	return [line[:-1] if line.endswith("\r") else line for line in lines]


def _search_compiled(text: str, compiled: Pattern[str]) -> List[Tuple[int, str, int, int]]:
	hits: List[Tuple[int, str, int, int]] = []
	for lineno, line in enumerate(split_lines(text), start=1):
		m = compiled.search(line)
		if m:
			hits.append((lineno, line, m.start(), m.end()))
	return hits


def _read_text(path: str) -> Optional[str]:
	try:
		with open(path, "r", encoding="utf-8") as fh:
			return fh.read()
	except (OSError, UnicodeDecodeError) as e:
		logger.debug("Skipping unreadable file %s: %s", path, e)
		return None


def search_files(
	files: Iterable[FileInfo],
	pattern: str,
	regex: bool = False,
	ignore_case: bool = False,
	max_matches: Optional[int] = None,
) -> List[PatternMatch]:
	compiled = compile_pattern(pattern, regex=regex, ignore_case=ignore_case)
	matches: List[PatternMatch] = []
	for f in files:
		text = _read_text(f.path)
		if text is None:
			continue
		for lineno, line, start, end in _search_compiled(text, compiled):
			if max_matches is not None and len(matches) >= max_matches:
				logger.info("Stopped after %d matches for %r", len(matches), pattern)
				return matches
			matches.append(PatternMatch(rel_path=f.rel_path, line=lineno, text=line, start=start, end=end))
	logger.info("Found %d matches for %r", len(matches), pattern)
	return matches


def filter_files(
	files: Iterable[FileInfo],
	pattern: str,
	regex: bool = False,
	ignore_case: bool = False,
) -> List[FileInfo]:
	compiled = compile_pattern(pattern, regex=regex, ignore_case=ignore_case)
	kept: List[FileInfo] = []
	for f in files:
		text = _read_text(f.path)
		if text is not None and any(compiled.search(line) for line in split_lines(text)):
			kept.append(f)
	logger.info("%d files contain %r", len(kept), pattern)
	return kept
