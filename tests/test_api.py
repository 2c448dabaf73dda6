import logging

import pytest
from fastapi.testclient import TestClient

import api
from codebrief.settings import reset_settings
from conftest import StubAgent


@pytest.fixture
def client():
	api.app.dependency_overrides[api.get_agent] = lambda: StubAgent()
	yield TestClient(api.app)
	api.app.dependency_overrides.clear()


def test_files(client, repo):
	resp = client.post("/files", json={"root_path": str(repo), "extensions": ["js"]})
	assert resp.status_code == 200
	assert [f["rel_path"] for f in resp.json()] == ["web/client.js"]


def test_invalid_root(client, tmp_path):
	resp = client.post("/files", json={"root_path": str(tmp_path / "missing")})
	assert resp.status_code == 400


def test_search(client, repo):
	resp = client.post("/search", json={"root_path": str(repo), "pattern": "TODO"})
	assert resp.status_code == 200
	assert [m["rel_path"] for m in resp.json()] == ["README.md", "pkg/store.py"]


def test_search_max_matches(client, repo):
	resp = client.post("/search", json={"root_path": str(repo), "pattern": "TODO", "max_matches": 0})
	assert resp.status_code == 200
	assert resp.json() == []

	resp = client.post("/search", json={"root_path": str(repo), "pattern": "TODO", "max_matches": -1})
	assert resp.status_code == 422


def test_search_bad_regex(client, repo):
	resp = client.post("/search", json={"root_path": str(repo), "pattern": "(", "regex": True})
	assert resp.status_code == 400
	assert "Invalid regular expression" in resp.json()["detail"]


def test_signatures(client, repo):
	resp = client.post("/signatures", json={"root_path": str(repo), "pattern": "class Client"})
	assert resp.status_code == 200
	assert [s["name"] for s in resp.json()] == ["parse", "add", "Client", "constructor", "fetchAll"]


def test_summarize(client, repo):
	resp = client.post("/summarize", json={"root_path": str(repo), "extensions": ["py"], "limit": 2})
	assert resp.status_code == 200
	body = resp.json()
	assert [s["location"] for s in body["summaries"]] == ["pkg/store.py:4", "pkg/store.py:5"]
	assert all(s["purpose"].startswith("This ") for s in body["summaries"])


def test_run(client, repo):
	resp = client.post("/run", json={"root_path": str(repo), "command": "ls web"})
	assert resp.status_code == 200
	assert resp.json()["output"] == "client.js\n"

	resp = client.post("/run", json={"root_path": str(repo), "command": "cat ../../etc/passwd"})
	assert resp.status_code == 400


def test_create_app_configures_logging(monkeypatch):
	pkg_logger = logging.getLogger("codebrief")
	saved = pkg_logger.level
	monkeypatch.setenv("CODEBRIEF_LOG_LEVEL", "DEBUG")
	reset_settings()
	try:
		assert api.create_app() is api.app
		assert pkg_logger.level == logging.DEBUG
	finally:
		pkg_logger.setLevel(saved)
