from __future__ import annotations

import logging
from typing import Any, List, Optional

from strands import Agent
from strands.models import BedrockModel

from .model import PURPOSE_PREFIX
from .settings import CodebriefSettings, get_settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
	"You summarize exactly one code unit at a time. "
	"Reply with the unit's location unchanged and a purpose of one or two sentences. "
	f"The purpose must begin with the word '{PURPOSE_PREFIX}'. "
	"Describe what the code does, not how it is formatted."
)


def build_model(settings: CodebriefSettings) -> BedrockModel:
	return BedrockModel(
		model_id=settings.model_id,
		region_name=settings.region,
		temperature=settings.temperature,
	)


def build_agent(settings: Optional[CodebriefSettings] = None, tools: Optional[List[Any]] = None) -> Agent:
	settings = settings or get_settings()
	logger.info("Creating agent with model %s in %s", settings.model_id, settings.region)
	return Agent(
		model=build_model(settings),
		system_prompt=SYSTEM_PROMPT,
		tools=tools or [],
		callback_handler=None,
	)
