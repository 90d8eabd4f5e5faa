"""File-based routing: scans pages, components and API handlers into a route table."""

from __future__ import annotations

import enum
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterator

from gothicframework.templates import TemplateHelper

STATIC_CACHE_CONTROL = "max-age=31536000"
DEFAULT_CONFIG_NAME = "DefaultConfig"
DEFAULT_API_CONFIG_NAME = "DefaultApiConfig"
DEFAULT_CONFIG_PACKAGE = "routes"

_PACKAGE_RE = re.compile(r"(?m)^package\s+(\w+)")
_ROUTE_CONFIG_RE = re.compile(r"(?m)^var\s+(\w+)\s*=\s*routes\.RouteConfig\[[^\]]+\]\s*\{([^}]*)\}")
_API_ROUTE_CONFIG_RE = re.compile(r"(?m)^var\s+(\w+)\s*=\s*routes\.ApiRouteConfig\s*\{([^}]+)\}")
_ROUTE_FUNC_RE = re.compile(r"(?m)^func\s+(\w+)\s*\(.*\)\s+templ\.Component\s*\{")
_API_ROUTE_FUNC_RE = re.compile(r"(?m)^func\s+(\w+)\s*\(.*\)\s*\{")
_PATH_PARAM_RE = re.compile(r"var_([a-zA-Z0-9_]+)")


class ConfigType(enum.Enum):
    """How responses of a route may be cached."""

    ISR = 0
    STATIC = 1
    DYNAMIC = 2


class HttpMethod(enum.Enum):
    """HTTP method a route answers to."""

    GET = 0
    POST = 1
    PUT = 2
    PATCH = 3
    DELETE = 4


@dataclass
class RouteConfig:
    """Caching, method and props middleware of a page or component route."""

    type: ConfigType = ConfigType.ISR
    http_method: HttpMethod = HttpMethod.GET
    revalidate_in_sec: int = 0
    middleware: Callable[..., Any] | None = None

    def cache_control(self) -> str | None:
        """The ``Cache-Control`` header the route sends, or None for dynamic routes."""
        if self.type is ConfigType.STATIC:
            return STATIC_CACHE_CONTROL
        if self.type is ConfigType.ISR:
            seconds = self.revalidate_in_sec
            return (
                f"max-age={seconds}, stale-while-revalidate={seconds}, "
                f"stale-if-error={seconds}"
            )
        return None


DEFAULT_CONFIG = RouteConfig(
    type=ConfigType.STATIC,
    http_method=HttpMethod.GET,
    middleware=lambda *_args: None,
)


@dataclass
class RouteTemplate:
    """One discovered route as the routes template sees it."""

    function_name: str = ""
    config_name: str = ""
    package_name: str = ""
    config_package_name: str = ""
    http_path: str = ""
    origin_file: str = ""


@dataclass
class Import:
    """A Go package the generated routes file imports."""

    package: str = ""
    package_path: str = ""


@dataclass
class TemplateInfo:
    """Everything the generated routes file is rendered from."""

    go_mod_name: str = ""
    import_default: bool = False
    imports: list[Import] = field(default_factory=list)
    routes: list[RouteTemplate] = field(default_factory=list)
    api_routes: list[RouteTemplate] = field(default_factory=list)


def _walk_files(root: str) -> Iterator[str]:
    """Yield files under ``root`` in lexical order, depth first."""
    for name in sorted(os.listdir(root)):
        path = os.path.normpath(os.path.join(root, name))
        if os.path.isdir(path) and not os.path.islink(path):
            yield from _walk_files(path)
        else:
            yield path


def _to_slash(path: str) -> str:
    return path.replace(os.sep, "/") if os.sep != "/" else path


@dataclass
class FileBasedRouteHelper:
    """Builds the routes file from the sources found under ``src``."""

    output_file: str = "./src/routes/autoGenRoutes.go"
    template_file: str = "./.gothicCli/templates/autoGenRoutes.go"
    api_routes_folder: str = "./src/api"
    component_routes_folder: str = "./src/components"
    page_routes_folder: str = "./src/pages"
    template_info: TemplateInfo = field(default_factory=TemplateInfo)
    template: TemplateHelper = field(default_factory=TemplateHelper)

    def render(self, go_mod_name: str) -> None:
        """Scan every route folder and write the generated routes file."""
        self.initialize(go_mod_name)
        self._collect(
            self.page_routes_folder, "pages", "templ.go",
            _ROUTE_CONFIG_RE, _ROUTE_FUNC_RE, DEFAULT_CONFIG_NAME,
            self.template_info.routes, go_mod_name,
        )
        self._collect(
            self.component_routes_folder, "components", "templ.go",
            _ROUTE_CONFIG_RE, _ROUTE_FUNC_RE, DEFAULT_API_CONFIG_NAME,
            self.template_info.routes, go_mod_name,
        )
        self._collect(
            self.api_routes_folder, "api", ".go",
            _API_ROUTE_CONFIG_RE, _API_ROUTE_FUNC_RE, DEFAULT_API_CONFIG_NAME,
            self.template_info.api_routes, go_mod_name,
        )
        self.remove_duplicates()
        self._prune_missing_files()
        self.template.update_from_template(self.template_file, self.output_file, self.template_info)

    def initialize(self, go_mod_name: str) -> None:
        """Reset the collected routes and remove the previous output file."""
        self.template_info.api_routes = []
        self.template_info.routes = []
        self.template_info.go_mod_name = go_mod_name
        self.template_info.import_default = False
        try:
            self.template.delete_file(self.output_file)
        except OSError:
            pass

    def _collect(
        self,
        folder: str,
        label: str,
        suffix: str,
        config_regex: re.Pattern,
        func_regex: re.Pattern,
        fallback_config: str,
        target: list[RouteTemplate],
        go_mod_name: str,
    ) -> None:
        try:
            for path in _walk_files(folder):
                if os.path.basename(path).endswith(suffix):
                    route = self._read_route(
                        path, config_regex, func_regex, fallback_config, go_mod_name
                    )
                    if route.function_name:
                        target.append(route)
        except OSError as exc:
            raise OSError(f"failed to walk through {label}: {exc}") from exc

    def _read_route(
        self,
        path: str,
        config_regex: re.Pattern,
        func_regex: re.Pattern,
        fallback_config: str,
        go_mod_name: str,
    ) -> RouteTemplate:
        try:
            content = Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise OSError(f"failed to read file {path}: {exc}") from exc

        route = RouteTemplate(
            origin_file=path,
            config_name=fallback_config,
            config_package_name=DEFAULT_CONFIG_PACKAGE,
        )
        package_match = _PACKAGE_RE.search(content)
        if package_match:
            route.package_name = package_match.group(1)
            route.config_package_name = package_match.group(1)
            rel_path = _to_slash(os.path.relpath(os.path.dirname(path) or ".", "src"))
            self.template_info.imports.append(
                Import(package=route.package_name, package_path=f"{go_mod_name}/src/{rel_path}")
            )

        config_match = config_regex.search(content)
        if config_match:
            route.config_name = config_match.group(1)
        else:
            route.config_name = fallback_config
            route.config_package_name = DEFAULT_CONFIG_PACKAGE

        func_match = func_regex.search(content)
        if func_match:
            route.function_name = func_match.group(1)

        route.http_path = self.normalize_http_path(path)
        return route

    def _prune_missing_files(self) -> None:
        info = self.template_info
        valid = {
            route.origin_file
            for route in (*info.routes, *info.api_routes)
            if os.path.exists(route.origin_file)
        }
        info.routes = [route for route in info.routes if route.origin_file in valid]
        info.api_routes = [route for route in info.api_routes if route.origin_file in valid]
        used = {route.package_name for route in (*info.routes, *info.api_routes)}
        info.imports = [imp for imp in info.imports if imp.package in used]

    def normalize_http_path(self, path: str) -> str:
        """Turn a source file path into the URL path it is served on."""
        if os.name == "nt":
            path = path.replace("\\", "/")
        path = path.removesuffix("_templ.go").removesuffix(".go")
        is_http_route = "src/pages" in path or "src/components" in path
        path = path.removeprefix("src/pages").removeprefix("src")
        if path.endswith("/index"):
            path = path.removesuffix("/index") or "/"
        if is_http_route:
            path = _PATH_PARAM_RE.sub(r"{\1}", path)
        return path

    def remove_duplicates(self) -> None:
        """Flag use of the default config and keep one import per package path."""
        info = self.template_info
        if any(route.config_name == DEFAULT_CONFIG_NAME for route in (*info.routes, *info.api_routes)):
            info.import_default = True
        unique: dict[str, Import] = {}
        for imp in info.imports:
            unique[imp.package_path] = imp
        info.imports = list(unique.values())