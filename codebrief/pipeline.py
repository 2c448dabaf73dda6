from __future__ import annotations

import logging
import os
from typing import Any, Iterable, List, Optional, Tuple

from .agent import build_agent
from .extract import extract_units, signatures_for_file
from .fs_scan import scan_repository
from .model import CodeUnit, FileInfo, ScanReport, Signature
from .pattern_scan import search_files
from .settings import CodebriefSettings, get_settings
from .summarize import summarize_overview, summarize_units
from .tools import make_shell_tool

logger = logging.getLogger(__name__)


def collect_units(
	files: Iterable[FileInfo],
	max_unit_lines: int = 200,
) -> Tuple[List[Signature], List[CodeUnit]]:
	signatures: List[Signature] = []
	units: List[CodeUnit] = []
	for f in files:
		if f.language == "unknown":
			continue
		try:
			with open(f.path, "r", encoding="utf-8") as fh:
				text = fh.read()
		except (OSError, UnicodeDecodeError) as e:
			logger.debug("Skipping %s: %s", f.rel_path, e)
			continue
		sigs = signatures_for_file(text, f.rel_path, f.language)
		signatures.extend(sigs)
		units.extend(extract_units(text, sigs, max_unit_lines=max_unit_lines))
	logger.info("Extracted %d signatures", len(signatures))
	return signatures, units


def run_pipeline(
	root: str,
	pattern: Optional[str] = None,
	extensions: Optional[Iterable[str]] = None,
	regex: bool = False,
	ignore_case: bool = False,
	summarize: bool = True,
	agent: Any = None,
	settings: Optional[CodebriefSettings] = None,
	limit: Optional[int] = None,
) -> ScanReport:
	"""Discover, narrow and extract deterministically, then ask the model about each unit."""
	settings = settings or get_settings()
	root = os.path.abspath(root)
	if extensions is None:
		extensions = settings.extension_list

	files = scan_repository(root, extensions=extensions)
	report = ScanReport(root=root, files=files)

	candidates = files
	if pattern:
		report.matches = search_files(files, pattern, regex=regex, ignore_case=ignore_case)
		hit_paths = {m.rel_path for m in report.matches}
		candidates = [f for f in files if f.rel_path in hit_paths]

	report.signatures, units = collect_units(candidates, max_unit_lines=settings.max_unit_lines)

	if summarize and units:
		if agent is None:
			shell = make_shell_tool(root, timeout=settings.command_timeout, max_output=settings.max_output)
			agent = build_agent(settings, tools=[shell])
		if limit is None:
			limit = settings.summary_limit
		report.summaries, report.skipped = summarize_units(agent, units, limit=limit)

	report.overview = summarize_overview(report)
	return report
