from __future__ import annotations

import os
from typing import Any, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from codebrief.errors import CodebriefError
from codebrief.fs_scan import scan_repository
from codebrief.log import configure_logging
from codebrief.model import FileInfo, PatternMatch, ScanReport, Signature
from codebrief.pattern_scan import search_files
from codebrief.pipeline import run_pipeline
from codebrief.settings import get_settings
from codebrief.tools import run_readonly_command


app = FastAPI(title="codebrief")


class ScanRequest(BaseModel):
	root_path: str
	extensions: Optional[List[str]] = None


class SearchRequest(ScanRequest):
	pattern: str
	regex: bool = False
	ignore_case: bool = False
	max_matches: Optional[int] = Field(default=None, ge=0)


class SignaturesRequest(ScanRequest):
	pattern: Optional[str] = None


class SummarizeRequest(SignaturesRequest):
	regex: bool = False
	limit: Optional[int] = Field(default=None, ge=0)


class RunRequest(BaseModel):
	root_path: str
	command: str


class RunResponse(BaseModel):
	output: str


def get_agent() -> Any:
	"""Agent for /summarize. None lets the pipeline build one from settings."""
	return None


def _root(path: str) -> str:
	root = os.path.abspath(path)
	if not os.path.isdir(root):
		raise HTTPException(status_code=400, detail=f"Invalid root_path: {root}")
	return root


@app.post("/files", response_model=List[FileInfo])
def files(req: ScanRequest) -> List[FileInfo]:
	try:
		return scan_repository(_root(req.root_path), extensions=req.extensions)
	except CodebriefError as e:
		raise HTTPException(status_code=400, detail=str(e))


@app.post("/search", response_model=List[PatternMatch])
def search(req: SearchRequest) -> List[PatternMatch]:
	try:
		found = scan_repository(_root(req.root_path), extensions=req.extensions)
		return search_files(
			found,
			req.pattern,
			regex=req.regex,
			ignore_case=req.ignore_case,
			max_matches=req.max_matches,
		)
	except CodebriefError as e:
		raise HTTPException(status_code=400, detail=str(e))


@app.post("/signatures", response_model=List[Signature])
def signatures(req: SignaturesRequest) -> List[Signature]:
	try:
		report = run_pipeline(
			_root(req.root_path),
			pattern=req.pattern,
			extensions=req.extensions,
			summarize=False,
		)
	except CodebriefError as e:
		raise HTTPException(status_code=400, detail=str(e))
	return report.signatures


@app.post("/summarize", response_model=ScanReport)
def summarize(req: SummarizeRequest, agent: Any = Depends(get_agent)) -> ScanReport:
	try:
		return run_pipeline(
			_root(req.root_path),
			pattern=req.pattern,
			extensions=req.extensions,
			regex=req.regex,
			agent=agent,
			limit=req.limit,
		)
	except CodebriefError as e:
		raise HTTPException(status_code=400, detail=str(e))


@app.post("/run", response_model=RunResponse)
def run(req: RunRequest) -> RunResponse:
	settings = get_settings()
	try:
		output = run_readonly_command(
			req.command,
			_root(req.root_path),
			timeout=settings.command_timeout,
			max_output=settings.max_output,
		)
	except CodebriefError as e:
		raise HTTPException(status_code=400, detail=str(e))
	return RunResponse(output=output)


def create_app() -> FastAPI:
	configure_logging(get_settings().log_level)
	return app
