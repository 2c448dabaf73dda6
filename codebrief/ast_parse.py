from __future__ import annotations

import ast
from typing import List, Optional, Union

from .model import Signature

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]


def _get_decorator_names(node: ast.AST) -> List[str]:
	decorators: List[str] = []
	for deco in getattr(node, "decorator_list", []) or []:
		if isinstance(deco, ast.Call):
			deco = deco.func
		if isinstance(deco, ast.Name):
			decorators.append(deco.id)
		elif isinstance(deco, ast.Attribute):
			# Collect dotted attribute like module.decorator
			parts: List[str] = []
			cursor = deco
			while isinstance(cursor, ast.Attribute):
				parts.append(cursor.attr)
				cursor = cursor.value  # type: ignore[assignment]
			if isinstance(cursor, ast.Name):
				parts.append(cursor.id)
			decorators.append(".".join(reversed(parts)))
		else:
			decorators.append(ast.unparse(deco))
	return decorators


def _format_args(args: ast.arguments) -> str:
	parts: List[str] = []
	positional = args.posonlyargs + args.args
	# defaults line up with the tail of the positional list
	first_default = len(positional) - len(args.defaults)
	for i, a in enumerate(positional):
		parts.append(a.arg + ("=..." if i >= first_default else ""))
		if args.posonlyargs and i == len(args.posonlyargs) - 1:
			parts.append("/")
	if args.vararg:
		parts.append("*" + args.vararg.arg)
	elif args.kwonlyargs:
		parts.append("*")
	for a, default in zip(args.kwonlyargs, args.kw_defaults):
		parts.append(a.arg + ("=..." if default is not None else ""))
	if args.kwarg:
		parts.append("**" + args.kwarg.arg)
	return ", ".join(parts)


def _start_line(node: ast.AST) -> Optional[int]:
	decorators = getattr(node, "decorator_list", None)
	if not decorators:
		return None
	return min(d.lineno for d in decorators)


def _function_signature(node: FunctionNode, rel_path: str, container: Optional[str]) -> Signature:
	prefix = "async def" if isinstance(node, ast.AsyncFunctionDef) else "def"
	return Signature(
		name=node.name,
		kind="method" if container else "function",
		signature=f"{prefix} {node.name}({_format_args(node.args)})",
		rel_path=rel_path,
		line=node.lineno,
		language="python",
		container=container,
		decorators=_get_decorator_names(node),
		start_line=_start_line(node),
	)


def parse_python_signatures(text: str, rel_path: str) -> List[Signature]:
	"""Top-level functions, classes and their methods, in source order.

	Raises SyntaxError for source that does not parse.
	"""
	tree = ast.parse(text, filename=rel_path)
	signatures: List[Signature] = []

	for node in tree.body:
		if isinstance(node, ast.ClassDef):
			bases = ", ".join(ast.unparse(b) for b in node.bases)
			signatures.append(
				Signature(
					name=node.name,
					kind="class",
					signature=f"class {node.name}({bases})" if bases else f"class {node.name}",
					rel_path=rel_path,
					line=node.lineno,
					language="python",
					decorators=_get_decorator_names(node),
					start_line=_start_line(node),
				)
			)
			for sub in node.body:
				if isinstance(sub, (ast.FunctionDef, ast.AsyncFunctionDef)):
					signatures.append(_function_signature(sub, rel_path, node.name))
		elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
			signatures.append(_function_signature(node, rel_path, None))

	return signatures
