"""
codebrief settings.

Loaded from environment variables (prefix CODEBRIEF_), then a .env file in
the working directory, then defaults.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CodebriefSettings(BaseSettings):
	model_config = SettingsConfigDict(
		env_file=".env",
		env_file_encoding="utf-8",
		case_sensitive=False,
		extra="ignore",
		env_prefix="CODEBRIEF_",
	)

	model_id: str = Field(
		default="us.anthropic.claude-sonnet-4-20250514-v1:0",
		description="Bedrock model id used for unit summaries (env: CODEBRIEF_MODEL_ID)",
	)
	region: str = Field(default="us-west-2", description="AWS region for Bedrock (env: CODEBRIEF_REGION)")
	temperature: float = Field(default=0.0, ge=0.0, le=1.0)

	log_level: str = Field(default="INFO", description="DEBUG, INFO, WARNING, ERROR (env: CODEBRIEF_LOG_LEVEL)")

	max_unit_lines: int = Field(default=200, gt=0, description="Lines of source sent per unit")
	summary_limit: Optional[int] = Field(default=None, description="Maximum units summarized per run")

	command_timeout: float = Field(default=10.0, gt=0, description="Seconds before the shell tool gives up")
	max_output: int = Field(default=10000, gt=0, description="Characters of tool output returned to the model")

	extensions: str = Field(
		default="",
		description="Comma separated extensions to scan, empty for all (env: CODEBRIEF_EXTENSIONS)",
	)

	@property
	def extension_list(self) -> Optional[List[str]]:
		exts = [e.strip() for e in self.extensions.split(",") if e.strip()]
		return exts or None


_settings: Optional[CodebriefSettings] = None


def get_settings() -> CodebriefSettings:
	"""Return the process-wide settings, creating them on first use."""
	global _settings
	if _settings is None:
		_settings = CodebriefSettings()
	return _settings


def reset_settings() -> None:
	global _settings
	_settings = None
