from __future__ import annotations

import logging
import os
from typing import Dict, FrozenSet, Iterable, List, Optional

from .errors import ScanError
from .model import FileInfo

logger = logging.getLogger(__name__)


EXTENSION_LANGUAGE: Dict[str, str] = {
	".py": "python",
	".ts": "typescript",
	".tsx": "typescript",
	".js": "javascript",
	".jsx": "javascript",
	".mjs": "javascript",
	".java": "java",
	".kt": "kotlin",
	".cs": "csharp",
	".go": "go",
	".rs": "rust",
	".rb": "ruby",
	".c": "c",
	".h": "c",
	".cpp": "cpp",
	".cc": "cpp",
	".hpp": "cpp",
}

DEFAULT_IGNORE_DIRS: FrozenSet[str] = frozenset(
	{
		".git",
		"node_modules",
		"dist",
		"build",
		"__pycache__",
		".venv",
		"venv",
		".tox",
		".mypy_cache",
		".pytest_cache",
	}
)


def detect_language(filename: str) -> str:
	_, ext = os.path.splitext(filename)
	return EXTENSION_LANGUAGE.get(ext.lower(), "unknown")


def normalize_extensions(extensions: Optional[Iterable[str]]) -> Optional[FrozenSet[str]]:
	"""Lower-case extensions and give each a leading dot. None means no filtering."""
	if extensions is None:
		return None
	normalized = set()
	for ext in extensions:
		ext = ext.strip().lower()
		if not ext:
			continue
		normalized.add(ext if ext.startswith(".") else "." + ext)
	return frozenset(normalized) or None


def to_module_name(root: str, file_path: str) -> str:
	rel_path = os.path.relpath(file_path, root)
	without_ext = os.path.splitext(rel_path)[0]
	parts = []
	for part in without_ext.split(os.sep):
		if part == "__init__":
			continue
		parts.append(part)
	return ".".join(parts).replace("-", "_")


def to_package_name(module_name: str) -> str:
	if "." in module_name:
		return module_name.rsplit(".", 1)[0]
	return ""


def scan_repository(
	root: str,
	extensions: Optional[Iterable[str]] = None,
	ignore_dirs: Iterable[str] = DEFAULT_IGNORE_DIRS,
) -> List[FileInfo]:
	if not os.path.isdir(root):
		raise ScanError(f"Not a directory: {root}")

	wanted = normalize_extensions(extensions)
	ignored = set(ignore_dirs)
	files: List[FileInfo] = []
	for dirpath, dirnames, filenames in os.walk(root):
		dirnames[:] = sorted(d for d in dirnames if d not in ignored)
		for filename in filenames:
			ext = os.path.splitext(filename)[1].lower()
			if wanted is not None and ext not in wanted:
				continue
			path = os.path.join(dirpath, filename)
			language = detect_language(filename)
			module = None
			package = None
			if language == "python":
				module = to_module_name(root, path)
				package = to_package_name(module)
			try:
				size = os.path.getsize(path)
			except OSError:
				logger.debug("Cannot stat %s, skipping", path)
				continue
			files.append(
				FileInfo(
					path=path,
					rel_path=os.path.relpath(path, root),
					language=language,
					size=size,
					package=package or None,
					module=module or None,
				)
			)

	files.sort(key=lambda f: f.rel_path)
	logger.info("Discovered %d files under %s", len(files), root)
	return files
