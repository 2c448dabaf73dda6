"""
codebrief errors.
"""


class CodebriefError(Exception):
	"""Base exception for all codebrief errors."""
	pass


class ScanError(CodebriefError):
	"""Errors while discovering files."""
	pass


class PatternError(CodebriefError):
	"""Invalid search pattern."""
	pass


class ToolError(CodebriefError):
	"""A command was refused by the constrained shell tool."""
	pass


class SummaryValidationError(CodebriefError):
	"""A model response did not fit the summary record."""

	def __init__(self, message: str, errors=None):
		super().__init__(message)
		self.errors = errors or []
