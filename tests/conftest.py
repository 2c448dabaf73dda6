from textwrap import dedent

import pytest

from codebrief.model import UnitSummary
from codebrief.settings import reset_settings


PY_SOURCE = dedent(
	"""
	import os


	class Store(Base):
		def get(self, key, default=None):
			return self.data.get(key, default)

		async def load(self, *, path):
			return path


	def helper(a, b=2, *args, **kwargs):
		# TODO: remove
		return a + b
	"""
).lstrip()

JS_SOURCE = dedent(
	"""
	export function parse(text) {
	  return JSON.parse(text);
	}

	const add = (a, b) => a + b;

	class Client {
	  constructor(url) {
	    this.url = url;
	  }

	  async fetchAll(limit) {
	    if (limit) {
	      return [];
	    }
	  }
	}
	"""
).lstrip()


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch, tmp_path):
	for var in ("CODEBRIEF_EXTENSIONS", "CODEBRIEF_SUMMARY_LIMIT", "CODEBRIEF_MAX_UNIT_LINES"):
		monkeypatch.delenv(var, raising=False)
	# keep a developer's .env out of the tests
	monkeypatch.chdir(tmp_path)
	reset_settings()
	yield
	reset_settings()


@pytest.fixture
def repo(tmp_path):
	root = tmp_path / "repo"
	(root / "pkg").mkdir(parents=True)
	(root / "pkg" / "__init__.py").write_text("")
	(root / "pkg" / "store.py").write_text(PY_SOURCE)
	(root / "web").mkdir()
	(root / "web" / "client.js").write_text(JS_SOURCE)
	(root / "README.md").write_text("# demo\nTODO: write docs\n")
	(root / "node_modules" / "dep").mkdir(parents=True)
	(root / "node_modules" / "dep" / "index.js").write_text("function hidden() {}\n")
	(root / "blob.py").write_bytes(b"\xff\xfe\x00 not utf-8 TODO")
	return root


class StubAgent:
	"""Stands in for strands.Agent; replies from a list, one per call."""

	def __init__(self, replies=None):
		self.replies = list(replies or [])
		self.prompts = []

	def structured_output(self, output_model, prompt=None):
		self.prompts.append(prompt)
		reply = self.replies.pop(0) if self.replies else None
		if isinstance(reply, Exception):
			raise reply
		if reply is None:
			location = prompt.split("\n", 1)[0].split(": ", 1)[1]
			return output_model(location=location, purpose="This code does something.")
		return reply


@pytest.fixture
def stub_agent():
	return StubAgent()


@pytest.fixture
def make_agent():
	return StubAgent


@pytest.fixture
def summary():
	return UnitSummary(location="a.py:1", purpose="This adds numbers.")
