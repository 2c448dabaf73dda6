import json

import pytest

from codebrief.errors import SummaryValidationError
from codebrief.model import CodeUnit, ScanReport, Signature, UnitSummary
from codebrief.summarize import (
	PLACEHOLDER_PURPOSE,
	build_prompt,
	summarize_overview,
	summarize_unit,
	summarize_units,
	try_summarize_unit,
	validate_summary,
)


def _unit(line=3, name="add"):
	sig = Signature(name=name, signature=f"def {name}(a, b)", rel_path="m.py", line=line, language="python")
	return CodeUnit(signature=sig, source=f"def {name}(a, b):\n    return a + b")


def test_validate_summary_accepts_dict_json_and_model(summary):
	assert validate_summary({"location": "a.py:1", "purpose": "This adds numbers."}) == summary
	assert validate_summary(json.dumps({"location": "a.py:1", "purpose": "This adds numbers."})) == summary
	assert validate_summary(summary) == summary


@pytest.mark.parametrize(
	"raw",
	[
		{"location": "a.py:1"},
		{"location": "a.py:1", "purpose": "Adds numbers."},
		"not json",
		'{"purpose": "This adds."}',
		None,
		["a.py:1", "This adds."],
	],
)
def test_validate_summary_rejects_malformed(raw):
	with pytest.raises(SummaryValidationError) as exc:
		validate_summary(raw)
	assert exc.value.errors


def test_build_prompt_mentions_location_and_source():
	prompt = build_prompt(_unit())
	assert prompt.startswith("Location: m.py:3\n")
	assert "return a + b" in prompt
	assert "```python" in prompt


def test_summarize_unit_uses_structured_output(make_agent):
	agent = make_agent([UnitSummary(location="m.py:3", purpose="This adds two numbers.")])
	result = summarize_unit(agent, _unit())
	assert result.purpose == "This adds two numbers."
	assert len(agent.prompts) == 1


def test_summarize_unit_forces_unit_location(make_agent):
	agent = make_agent([UnitSummary(location="elsewhere.py:99", purpose="This adds.")])
	assert summarize_unit(agent, _unit()).location == "m.py:3"


def test_summarize_unit_placeholder_on_failure(make_agent):
	agent = make_agent([RuntimeError("throttled")])
	result = summarize_unit(agent, _unit())
	assert result == UnitSummary(location="m.py:3", purpose=PLACEHOLDER_PURPOSE)


def test_summarize_unit_placeholder_on_malformed_reply(make_agent):
	agent = make_agent([{"location": "m.py:3", "purpose": "Adds numbers."}])
	assert summarize_unit(agent, _unit()).purpose == PLACEHOLDER_PURPOSE


def test_summarize_units_one_call_each(make_agent):
	agent = make_agent([None, RuntimeError("boom"), None])
	units = [_unit(line=1, name="a"), _unit(line=5, name="b"), _unit(line=9, name="c")]
	summaries, skipped = summarize_units(agent, units)
	assert [s.location for s in summaries] == ["m.py:1", "m.py:5", "m.py:9"]
	assert skipped == ["m.py:5"]
	assert len(agent.prompts) == 3



def test_summarize_units_keeps_replies_that_match_the_placeholder(make_agent):
	agent = make_agent([UnitSummary(location="m.py:3", purpose=PLACEHOLDER_PURPOSE)])
	summaries, skipped = summarize_units(agent, [_unit()])
	assert summaries[0].purpose == PLACEHOLDER_PURPOSE
	assert skipped == []


def test_try_summarize_unit_reports_failures(make_agent):
	assert try_summarize_unit(make_agent([RuntimeError("boom")]), _unit())[1] is False
	summary, ok = try_summarize_unit(make_agent(), _unit())
	assert ok
	assert summary.purpose == "This code does something."


def test_summarize_units_limit(stub_agent):
	units = [_unit(line=i) for i in range(1, 6)]
	summaries, skipped = summarize_units(stub_agent, units, limit=2)
	assert len(summaries) == 2
	assert skipped == []
	assert len(stub_agent.prompts) == 2


def test_summarize_overview():
	report = ScanReport(root="/r")
	assert summarize_overview(report) == "Repository at /r: 0 files"
