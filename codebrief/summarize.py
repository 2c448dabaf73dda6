from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from .errors import SummaryValidationError
from .model import CodeUnit, ScanReport, UnitSummary

logger = logging.getLogger(__name__)

PLACEHOLDER_PURPOSE = "This unit could not be summarized."


def build_prompt(unit: CodeUnit) -> str:
	sig = unit.signature
	return (
		f"Location: {unit.location}\n"
		f"Language: {sig.language}\n"
		f"Declaration: {sig.signature}\n"
		"\n"
		f"```{sig.language}\n{unit.source}\n```\n"
		"\n"
		f"Summarize this {sig.kind}. Use location {unit.location!r}."
	)


def validate_summary(raw: Any) -> UnitSummary:
	"""Coerce a model response into a UnitSummary or raise SummaryValidationError."""
	try:
		if isinstance(raw, UnitSummary):
			return UnitSummary.model_validate(raw.model_dump())
		if isinstance(raw, (str, bytes)):
			return UnitSummary.model_validate_json(raw)
		return UnitSummary.model_validate(raw)
	except ValidationError as e:
		raise SummaryValidationError(f"Malformed summary: {e.error_count()} error(s)", e.errors()) from e


def placeholder(unit: CodeUnit) -> UnitSummary:
	return UnitSummary(location=unit.location, purpose=PLACEHOLDER_PURPOSE)


def try_summarize_unit(agent: Any, unit: CodeUnit) -> Tuple[UnitSummary, bool]:
	"""One model call for one unit, returning the summary and whether the model produced it.

	Failures and malformed replies come back as the placeholder with False.
	"""
	try:
		raw = agent.structured_output(UnitSummary, build_prompt(unit))
		summary = validate_summary(raw)
	except SummaryValidationError as e:
		logger.warning("Rejected summary for %s: %s", unit.location, e)
		return placeholder(unit), False
	except Exception as e:
		logger.warning("Model call failed for %s: %s", unit.location, e)
		return placeholder(unit), False

	if summary.location != unit.location:
		logger.debug("Model reported location %r for %s", summary.location, unit.location)
		summary = summary.model_copy(update={"location": unit.location})
	return summary, True


def summarize_unit(agent: Any, unit: CodeUnit) -> UnitSummary:
	summary, _ = try_summarize_unit(agent, unit)
	return summary


def summarize_units(
	agent: Any,
	units: Iterable[CodeUnit],
	limit: Optional[int] = None,
) -> Tuple[List[UnitSummary], List[str]]:
	summaries: List[UnitSummary] = []
	skipped: List[str] = []
	for i, unit in enumerate(units):
		if limit is not None and i >= limit:
			break
		summary, ok = try_summarize_unit(agent, unit)
		summaries.append(summary)
		if not ok:
			skipped.append(unit.location)
	logger.info("Summarized %d units, %d skipped", len(summaries), len(skipped))
	return summaries, skipped


def summarize_overview(report: ScanReport) -> str:
	languages = Counter(f.language for f in report.files)
	kinds = Counter(s.kind for s in report.signatures)
	parts: List[str] = [f"Repository at {report.root}: {len(report.files)} files"]
	if languages:
		parts.append("  Languages: " + ", ".join(f"{lang} ({n})" for lang, n in sorted(languages.items())))
	if report.matches:
		files_hit = len({m.rel_path for m in report.matches})
		parts.append(f"  Matches: {len(report.matches)} in {files_hit} files")
	if report.signatures:
		parts.append("  Signatures: " + ", ".join(f"{n} {kind}" for kind, n in sorted(kinds.items())))
	if report.summaries:
		parts.append(f"  Summaries: {len(report.summaries)} ({len(report.skipped)} skipped)")
	return "\n".join(parts)
