from __future__ import annotations

import re
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

PURPOSE_PREFIX = "This"
_PURPOSE_RE = re.compile(rf"^{PURPOSE_PREFIX}\s+\S")


class FileInfo(BaseModel):
	path: str
	rel_path: str
	language: str
	size: int = 0
	package: Optional[str] = None
	module: Optional[str] = None


class PatternMatch(BaseModel):
	rel_path: str
	line: int
	text: str
	start: int
	end: int


class Signature(BaseModel):
	name: str
	kind: str = "function"
	signature: str
	rel_path: str
	line: int
	language: str
	container: Optional[str] = None
	decorators: List[str] = []
	# first decorator line, when it precedes the declaration
	start_line: Optional[int] = None

	@property
	def qualified_name(self) -> str:
		if self.container:
			return f"{self.container}.{self.name}"
		return self.name

	@property
	def first_line(self) -> int:
		return self.start_line or self.line


class CodeUnit(BaseModel):
	signature: Signature
	source: str

	@property
	def location(self) -> str:
		return f"{self.signature.rel_path}:{self.signature.line}"


class UnitSummary(BaseModel):
	"""Summary of a single code unit."""

	location: str = Field(description="Source location of the unit as path:line")
	purpose: str = Field(description="One or two sentences describing what the unit does. Must start with 'This'.")

	@field_validator("location")
	@classmethod
	def _location_not_empty(cls, v: str) -> str:
		v = v.strip()
		if not v:
			raise ValueError("location must not be empty")
		return v

	@field_validator("purpose")
	@classmethod
	def _purpose_prefix(cls, v: str) -> str:
		v = v.strip()
		if not _PURPOSE_RE.match(v):
			raise ValueError(f"purpose must start with '{PURPOSE_PREFIX} '")
		return v


class ScanReport(BaseModel):
	root: str
	files: List[FileInfo] = []
	matches: List[PatternMatch] = []
	signatures: List[Signature] = []
	summaries: List[UnitSummary] = []
	skipped: List[str] = []
	overview: str = ""
