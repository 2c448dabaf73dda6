"""codebrief: decompose a codebase with deterministic steps, then ask a model about one unit at a time.

Modules:
- fs_scan.py: Filesystem walk with extension filtering and language detection.
- pattern_scan.py: Line-based substring/regex search over discovered files.
- extract.py: Regex-based signature extraction and code unit slicing.
- ast_parse.py: Precise Python signature extraction via the ast module.
- tools.py: Constrained read-only shell tool for agents.
- agent.py: Strands agent construction.
- summarize.py: Per-unit model summaries with structured output validation.
- pipeline.py: Glue for the steps above.
"""

__all__ = [
	"fs_scan",
	"pattern_scan",
	"extract",
	"ast_parse",
	"tools",
	"agent",
	"summarize",
	"pipeline",
	"model",
	"settings",
]
