"""Regex-based extraction of function, method and class signatures.

The patterns read declarations line by line and use indentation to decide
which class a callable belongs to. Conventionally formatted code is handled
well; macros, decorators spanning several lines and declarations inside
string literals are not.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, NamedTuple, Optional, Pattern, Tuple

from .ast_parse import parse_python_signatures
from .model import CodeUnit, Signature
from .pattern_scan import split_lines

logger = logging.getLogger(__name__)

# "callable" means function or method, decided by the enclosing block.
# "scope" entries open a container (rust impl blocks) but are not reported.
CLASS = "class"
CALLABLE = "callable"
METHOD = "method"
SCOPE = "scope"

_MODIFIERS_JAVA = r"(?:(?:public|private|protected|static|final|abstract|synchronized|native|default|strictfp)\s+)"
_MODIFIERS_CS = r"(?:(?:public|private|protected|internal|static|sealed|abstract|virtual|override|async|extern|unsafe|partial|new)\s+)"
_KEYWORDS = frozenset(
	{"if", "for", "while", "switch", "catch", "return", "function", "else", "do", "new", "sizeof", "typeof", "using", "lock"}
)


def _c(pattern: str) -> Pattern[str]:
	return re.compile(pattern, re.MULTILINE)


LANGUAGE_PATTERNS: Dict[str, List[Tuple[str, Pattern[str]]]] = {
	"python": [
		(CLASS, _c(r"^(?P<indent>[ \t]*)class\s+(?P<name>\w+)[^:\n]*")),
		(CALLABLE, _c(r"^(?P<indent>[ \t]*)(?:async\s+)?def\s+(?P<name>\w+)\s*\([^)]*\)?")),
	],
	"javascript": [
		(CLASS, _c(r"^(?P<indent>[ \t]*)(?:export\s+)?(?:default\s+)?class\s+(?P<name>[\w$]+)")),
		(CALLABLE, _c(r"^(?P<indent>[ \t]*)(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*(?P<name>[\w$]+)\s*\([^)]*\)")),
		(CALLABLE, _c(r"^(?P<indent>[ \t]*)(?:export\s+)?(?:const|let|var)\s+(?P<name>[\w$]+)\s*=\s*(?:async\s+)?(?:\([^)]*\)|[\w$]+)\s*=>")),
		(METHOD, _c(r"^(?P<indent>[ \t]+)(?:(?:static|async|get|set)\s+)*(?P<name>[A-Za-z_$][\w$]*)\s*\([^)]*\)\s*\{")),
	],
	"typescript": [
		(CLASS, _c(r"^(?P<indent>[ \t]*)(?:export\s+)?(?:default\s+)?(?:abstract\s+)?(?:class|interface)\s+(?P<name>[\w$]+)")),
		(CALLABLE, _c(r"^(?P<indent>[ \t]*)(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*(?P<name>[\w$]+)\s*(?:<[^>]*>)?\s*\([^)]*\)(?:\s*:\s*[^{;\n]+)?")),
		(CALLABLE, _c(r"^(?P<indent>[ \t]*)(?:export\s+)?(?:const|let|var)\s+(?P<name>[\w$]+)(?:\s*:\s*[^=\n]+)?\s*=\s*(?:async\s+)?(?:\([^)]*\)|[\w$]+)(?:\s*:\s*[^=\n]+)?\s*=>")),
		(METHOD, _c(r"^(?P<indent>[ \t]+)(?:(?:public|private|protected|static|async|readonly|abstract|override|get|set)\s+)*(?P<name>[A-Za-z_$][\w$]*)\s*(?:<[^>]*>)?\s*\([^)]*\)(?:\s*:\s*[^{;\n]+)?\s*\{")),
	],
	"java": [
		(CLASS, _c(r"^(?P<indent>[ \t]*)" + _MODIFIERS_JAVA + r"*(?:class|interface|enum|record)\s+(?P<name>\w+)")),
		(CALLABLE, _c(r"^(?P<indent>[ \t]*)" + _MODIFIERS_JAVA + r"+(?:<[^>]+>\s+)?[\w<>\[\],.?]+(?:\s*<[^>]*>)?\s+(?P<name>\w+)\s*\([^)]*\)")),
	],
	"csharp": [
		(CLASS, _c(r"^(?P<indent>[ \t]*)" + _MODIFIERS_CS + r"*(?:class|interface|struct|enum|record)\s+(?P<name>\w+)")),
		(CALLABLE, _c(r"^(?P<indent>[ \t]*)" + _MODIFIERS_CS + r"+[\w<>\[\],.?]+(?:\s*<[^>]*>)?\s+(?P<name>\w+)\s*(?:<[^>]*>)?\s*\([^)]*\)")),
	],
	"kotlin": [
		(CLASS, _c(r"^(?P<indent>[ \t]*)(?:(?:public|private|protected|internal|open|abstract|sealed|data|enum|inner)\s+)*(?:class|interface|object)\s+(?P<name>\w+)")),
		(CALLABLE, _c(r"^(?P<indent>[ \t]*)(?:(?:public|private|protected|internal|open|override|suspend|inline|operator|abstract)\s+)*fun\s+(?:<[^>]+>\s*)?(?:\w+\.)?(?P<name>\w+)\s*\([^)]*\)(?:\s*:\s*[\w<>?,. ]+)?")),
	],
	"go": [
		(CLASS, _c(r"^(?P<indent>)type\s+(?P<name>\w+)\s+(?:struct|interface)")),
		(METHOD, _c(r"^(?P<indent>)func\s+\((?P<recv>[^)]*)\)\s*(?P<name>\w+)\s*(?:\[[^\]]*\])?\s*\([^)]*\)[^{\n]*")),
		(CALLABLE, _c(r"^(?P<indent>)func\s+(?P<name>\w+)\s*(?:\[[^\]]*\])?\s*\([^)]*\)[^{\n]*")),
	],
	"rust": [
		(CLASS, _c(r"^(?P<indent>[ \t]*)(?:pub(?:\([^)]*\))?\s+)?(?:struct|enum|trait)\s+(?P<name>\w+)")),
		(SCOPE, _c(r"^(?P<indent>[ \t]*)impl(?:<[^>]*>)?\s+(?:[\w:<>]+\s+for\s+)?(?P<name>\w+)")),
		(CALLABLE, _c(r"^(?P<indent>[ \t]*)(?:pub(?:\([^)]*\))?\s+)?(?:const\s+)?(?:async\s+)?(?:unsafe\s+)?(?:extern\s+\"[^\"]*\"\s+)?fn\s+(?P<name>\w+)\s*(?:<[^>]*>)?\s*\([^)]*\)(?:\s*->\s*[^{\n]+)?")),
	],
	"ruby": [
		(CLASS, _c(r"^(?P<indent>[ \t]*)(?:class|module)\s+(?P<name>[\w:]+)")),
		(CALLABLE, _c(r"^(?P<indent>[ \t]*)def\s+(?:self\.)?(?P<name>[\w?!=]+)(?:\s*\([^)]*\))?")),
	],
	"c": [
		(CLASS, _c(r"^(?P<indent>)(?:typedef\s+)?struct\s+(?P<name>\w+)\s*\{")),
		(CALLABLE, _c(r"^(?P<indent>)(?:[\w*]+[ \t]+)+\**(?P<name>\w+)\s*\([^;{)]*\)\s*\{?[ \t]*$")),
	],
	"cpp": [
		(CLASS, _c(r"^(?P<indent>[ \t]*)(?:template\s*<[^>]*>\s*)?(?:class|struct)\s+(?P<name>\w+)[^;\n]*$")),
		(CALLABLE, _c(r"^(?P<indent>[ \t]*)(?:[\w*&<>,:]+[ \t]+)+[*&]*(?P<name>[\w:~]+)\s*\([^;{)]*\)\s*(?:const\s*)?(?:override\s*)?\{?[ \t]*$")),
	],
}


class _Hit(NamedTuple):
	line: int
	indent: int
	kind: str
	name: str
	text: str
	receiver: Optional[str]


def _indent_width(indent: str) -> int:
	return len(indent.expandtabs(4))


def _clean(text: str) -> str:
	text = " ".join(text.split())
	return text.rstrip("{:").rstrip()


def _receiver_type(receiver: str) -> Optional[str]:
	# "s *Server[T]" -> "Server"
	parts = receiver.split()
	if not parts:
		return None
	return parts[-1].lstrip("*").split("[", 1)[0] or None


def _collect_hits(text: str, language: str) -> List[_Hit]:
	hits: Dict[int, _Hit] = {}
	for kind, pattern in LANGUAGE_PATTERNS[language]:
		for m in pattern.finditer(text):
			name = m.group("name")
			if name in _KEYWORDS:
				continue
			line = text.count("\n", 0, m.start()) + 1
			if line in hits:
				# earlier patterns win, classes are listed first
				continue
			receiver = m.groupdict().get("recv")
			hits[line] = _Hit(line, _indent_width(m.group("indent")), kind, name, _clean(m.group(0)), receiver)
	return [hits[k] for k in sorted(hits)]


def extract_signatures(text: str, rel_path: str, language: str) -> List[Signature]:
	if language not in LANGUAGE_PATTERNS:
		return []

	signatures: List[Signature] = []
	# (indent, kind, name) of blocks that may still enclose the next hit
	stack: List[Tuple[int, str, str]] = []
	for hit in _collect_hits(text, language):
		while stack and stack[-1][0] >= hit.indent:
			stack.pop()
		enclosing = stack[-1] if stack else None

		if hit.kind == SCOPE:
			stack.append((hit.indent, SCOPE, hit.name))
			continue

		if enclosing is not None and enclosing[1] not in (CLASS, SCOPE):
			# nested inside a function body
			if language == "python":
				stack.append((hit.indent, CALLABLE, hit.name))
			continue

		name = hit.name
		container = enclosing[2] if enclosing is not None else None
		if hit.kind == METHOD and hit.receiver is not None:
			container = _receiver_type(hit.receiver)
		if "::" in name:
			container, name = name.rsplit("::", 1)

		if hit.kind == CLASS:
			kind = "class"
		elif container:
			kind = "method"
		elif hit.kind == METHOD:
			# a bare indented call-like line outside any class is not a declaration
			continue
		else:
			kind = "function"

		signatures.append(
			Signature(
				name=name,
				kind=kind,
				signature=hit.text,
				rel_path=rel_path,
				line=hit.line,
				language=language,
				container=container if kind == "method" else None,
			)
		)
		stack.append((hit.indent, CLASS if kind == "class" else CALLABLE, name))

	return signatures


def signatures_for_file(text: str, rel_path: str, language: str, prefer_ast: bool = True) -> List[Signature]:
	"""Use the AST for Python when it parses, regular expressions otherwise."""
	if language == "python" and prefer_ast:
		try:
			return parse_python_signatures(text, rel_path)
		except SyntaxError as e:
			logger.debug("AST parse failed for %s (%s), using regex extraction", rel_path, e)
	return extract_signatures(text, rel_path, language)


def extract_units(text: str, signatures: List[Signature], max_unit_lines: int = 200) -> List[CodeUnit]:
	"""Slice the source of each signature up to the next sibling declaration."""
	lines = split_lines(text)
	ordered = sorted(signatures, key=lambda s: s.line)
	units: List[CodeUnit] = []
	for i, sig in enumerate(ordered):
		end = len(lines)
		for later in ordered[i + 1:]:
			# members declared inside the class body belong to its unit
			if sig.kind == "class" and later.container == sig.name and lines[later.line - 1][:1].isspace():
				continue
			end = later.first_line - 1
			break
		start = sig.first_line - 1
		end = min(end, start + max_unit_lines)
		chunk = lines[start:end]
		while chunk and not chunk[-1].strip():
			chunk.pop()
		units.append(CodeUnit(signature=sig, source="\n".join(chunk)))
	return units
