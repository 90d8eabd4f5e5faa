"""Text templates with ``{{.Field}}`` actions and helpers to render files from them."""

from __future__ import annotations

import json
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class TemplateError(Exception):
    """A template could not be parsed or rendered."""


@dataclass
class InitCmdTemplateInfo:
    """Values available to templates rendered while creating a project."""

    project_name: str = ""
    go_mod_name: str = ""
    tail_wind_file_name: str = ""
    main_binary_file_name: str = ""
    main_server_package_name: str = ""
    main_server_function_name: str = ""
    page_name: str = ""
    route_name: str = ""
    component_name: str = ""


@dataclass
class RouteTemplateInfo:
    """Values available to page, component and API route templates."""

    page_name: str = ""
    route_name: str = ""
    component_name: str = ""
    go_mod_name: str = ""


@dataclass
class EnvValueInfo:
    """One environment variable written into the deployment template."""

    key: str = ""
    value: Any = None


@dataclass
class StageTemplateInfo:
    """Stage-specific values of the deployment template."""

    name: str = ""
    bucket_name: str = ""
    lambda_name: str = ""
    custom_domain: str = ""
    hosted_zone: str = ""
    certificate_arn: str = ""
    env: list[EnvValueInfo] = field(default_factory=list)


@dataclass
class SamYamlTemplateInfo:
    """Values of the SAM ``template.yaml``."""

    timeout: int = 0
    memory_size: int = 0
    used_template_name: str = ""
    project_name: str = ""
    stage_template_info: StageTemplateInfo = field(default_factory=StageTemplateInfo)


@dataclass
class SamTomlTemplateInfo:
    """Values of the SAM ``samconfig.toml``."""

    stack_name: str = ""
    aws_region: str = ""


class _NoValue:
    def __repr__(self) -> str:
        return "<no value>"


_NO_VALUE = _NoValue()
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_BLOCK_KEYWORDS = frozenset({"if", "with", "range"})
_UNSUPPORTED_KEYWORDS = frozenset({"define", "template", "block", "break", "continue"})


@dataclass
class _Text:
    text: str


@dataclass
class _Output:
    expr: str


@dataclass
class _Block:
    kind: str
    expr: str
    body: list = field(default_factory=list)
    alternative: list = field(default_factory=list)


def _snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _split_actions(text: str) -> list[tuple[str, str]]:
    """Split template text into ``("text", ...)`` and ``("action", ...)`` items."""
    items: list[tuple[str, str]] = []
    pos = 0
    trim_next = False
    while True:
        start = text.find("{{", pos)
        if start == -1:
            chunk = text[pos:]
            items.append(("text", chunk.lstrip() if trim_next else chunk))
            return items
        end = text.find("}}", start + 2)
        if end == -1:
            raise TemplateError(f"unclosed action starting at offset {start}")
        chunk = text[pos:start]
        if trim_next:
            chunk = chunk.lstrip()
        raw = text[start + 2 : end]
        if len(raw) > 1 and raw[0] == "-" and raw[1].isspace():
            chunk = chunk.rstrip()
            raw = raw[1:]
        trim_next = len(raw) > 1 and raw[-1] == "-" and raw[-2].isspace()
        if trim_next:
            raw = raw[:-1]
        items.append(("text", chunk))
        items.append(("action", raw.strip()))
        pos = end + 2


def _parse(text: str) -> list:
    root: list = []
    current = root
    # Each entry: (block, chained to the previous block by "else", list holding the block)
    stack: list[tuple[_Block, bool, list]] = []
    for kind, value in _split_actions(text):
        if kind == "text":
            if value:
                current.append(_Text(value))
            continue
        if value.startswith("/*"):
            if not value.endswith("*/"):
                raise TemplateError("unclosed comment")
            continue
        parts = value.split(None, 1)
        if not parts:
            raise TemplateError("missing value for command")
        keyword = parts[0]
        rest = parts[1].strip() if len(parts) > 1 else ""
        if keyword in _BLOCK_KEYWORDS:
            if not rest:
                raise TemplateError(f"missing value for {keyword}")
            block = _Block(keyword, rest)
            current.append(block)
            stack.append((block, False, current))
            current = block.body
        elif keyword == "else":
            if not stack:
                raise TemplateError("unexpected {{else}}")
            block = stack[-1][0]
            if current is block.alternative:
                raise TemplateError("expected end; found {{else}}")
            current = block.alternative
            if rest:
                nested_parts = rest.split(None, 1)
                nested_kind = nested_parts[0]
                if nested_kind not in ("if", "with") or len(nested_parts) < 2:
                    raise TemplateError(f"unexpected {rest!r} after else")
                nested = _Block(nested_kind, nested_parts[1].strip())
                current.append(nested)
                stack.append((nested, True, current))
                current = nested.body
        elif keyword == "end":
            if not stack:
                raise TemplateError("unexpected {{end}}")
            while True:
                _, chained, parent = stack.pop()
                if not chained:
                    break
            current = parent
        elif keyword in _UNSUPPORTED_KEYWORDS:
            raise TemplateError(f"unsupported action {keyword!r}")
        else:
            current.append(_Output(value))
    if stack:
        raise TemplateError(f"unexpected EOF: unclosed {{{{{stack[-1][0].kind}}}}}")
    return root


def _field(value: Any, name: str) -> Any:
    if value is None or value is _NO_VALUE:
        raise TemplateError(f"nil pointer evaluating field {name}")
    if isinstance(value, Mapping):
        return value.get(name, _NO_VALUE)
    for attribute in (name, _snake_case(name)):
        if not attribute.startswith("_") and hasattr(value, attribute):
            return getattr(value, attribute)
    raise TemplateError(f"can't evaluate field {name} in type {type(value).__name__}")


def _evaluate(expr: str, dot: Any) -> Any:
    expr = expr.strip()
    if expr == ".":
        return dot
    if expr.startswith("."):
        value = dot
        for name in expr[1:].split("."):
            if not name:
                raise TemplateError(f"bad field reference {expr!r}")
            value = _field(value, name)
        return value
    if len(expr) >= 2 and expr[0] == expr[-1] == "`":
        return expr[1:-1]
    if len(expr) >= 2 and expr[0] == expr[-1] == '"':
        try:
            return json.loads(expr)
        except ValueError as exc:
            raise TemplateError(f"bad string literal {expr}") from exc
    if expr in ("true", "false"):
        return expr == "true"
    try:
        return int(expr)
    except ValueError:
        pass
    raise TemplateError(f"function {expr!r} not defined")


def _format(value: Any) -> str:
    if value is _NO_VALUE:
        return "<no value>"
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format(item) for item in value) + "]"
    if isinstance(value, Mapping):
        return "map[" + " ".join(f"{key}:{_format(value[key])}" for key in sorted(value)) + "]"
    return str(value)


def _truth(value: Any) -> bool:
    if value is None or value is _NO_VALUE:
        return False
    return bool(value)


def _items(value: Any) -> list:
    if value is None or value is _NO_VALUE:
        return []
    if isinstance(value, Mapping):
        return [value[key] for key in sorted(value)]
    if isinstance(value, bool) or isinstance(value, (str, bytes)):
        raise TemplateError(f"range can't iterate over {_format(value)}")
    if isinstance(value, int):
        return list(range(value))
    try:
        return list(value)
    except TypeError as exc:
        raise TemplateError(f"range can't iterate over {_format(value)}") from exc


def _execute(nodes: list, dot: Any, out: list[str]) -> None:
    for node in nodes:
        if isinstance(node, _Text):
            out.append(node.text)
        elif isinstance(node, _Output):
            out.append(_format(_evaluate(node.expr, dot)))
        elif node.kind == "if":
            chosen = node.body if _truth(_evaluate(node.expr, dot)) else node.alternative
            _execute(chosen, dot, out)
        elif node.kind == "with":
            value = _evaluate(node.expr, dot)
            if _truth(value):
                _execute(node.body, value, out)
            else:
                _execute(node.alternative, dot, out)
        else:
            items = _items(_evaluate(node.expr, dot))
            if not items:
                _execute(node.alternative, dot, out)
            for item in items:
                _execute(node.body, item, out)


def render_template(text: str, data: Any) -> str:
    """Render ``text`` with ``data`` as the dot value.

    ``{{.Name}}`` looks up a mapping key or an attribute, trying the name as
    written and then in snake case; ``if``, ``with``, ``range``, ``else`` and
    ``end`` control the output, and ``{{-``/``-}}`` trim surrounding space.
    """
    out: list[str] = []
    _execute(_parse(text), data, out)
    return "".join(out)


def _render_to_file(text: str, output_path: str | os.PathLike, data: Any) -> None:
    tree = _parse(text)
    out: list[str] = []
    try:
        _execute(tree, data, out)
    except TemplateError as exc:
        raise TemplateError(f"error rendering template into {output_path}: {exc}") from exc
    Path(output_path).write_text("".join(out), encoding="utf-8")


def _resolve(source_root: Any, template_path: str) -> Any:
    root = Path(source_root) if isinstance(source_root, (str, os.PathLike)) else source_root
    return root / template_path


@dataclass
class TemplateHelper:
    """Renders and copies project files."""

    init_cmd_template_info: InitCmdTemplateInfo = field(default_factory=InitCmdTemplateInfo)
    route_template_info: RouteTemplateInfo = field(default_factory=RouteTemplateInfo)

    def update_from_template(
        self, template_path: str | os.PathLike, output_path: str | os.PathLike, data: Any
    ) -> None:
        """Render the file at ``template_path`` into ``output_path``."""
        text = Path(template_path).read_text(encoding="utf-8")
        _render_to_file(text, output_path, data)

    def create_from_template(
        self, source_root: Any, template_path: str, output_path: str | os.PathLike, data: Any
    ) -> None:
        """Render ``template_path`` found under ``source_root`` into ``output_path``."""
        text = _resolve(source_root, template_path).read_text(encoding="utf-8")
        _render_to_file(text, output_path, data)

    def copy_file(self, path: str | os.PathLike, destination: str | os.PathLike) -> None:
        """Copy a file's bytes to ``destination``."""
        Path(destination).write_bytes(Path(path).read_bytes())

    def delete_file(self, path: str | os.PathLike) -> None:
        """Remove a file."""
        os.remove(path)

    def copy_from_root(
        self, source_root: Any, template_path: str, output_path: str | os.PathLike
    ) -> None:
        """Copy ``template_path`` found under ``source_root`` to ``output_path`` unchanged."""
        Path(output_path).write_bytes(_resolve(source_root, template_path).read_bytes())