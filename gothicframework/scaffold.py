"""Creating the folder structure and starter files of a new project."""

from __future__ import annotations

import os
import re
import secrets
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable

from gothicframework.data import CliData, default_cli_data
from gothicframework.project import GothicCli
from gothicframework.templates import InitCmdTemplateInfo, RouteTemplateInfo, TemplateError
from gothicframework.tools import CommandError

APP_ID_FILE = ".gothicCli/app-id.txt"

_PROJECT_NAME_RE = re.compile(r"[a-z0-9]+(-[a-z0-9]+)*")
_ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_-"
_ID_LENGTH = 9
_SPECIAL_CHARS_RE = re.compile(r"[^\w\s]|_")


@dataclass(frozen=True)
class _TailwindTarget:
    source_name: str
    output_name: str
    main_binary: str


_TAILWIND_TARGETS = {
    "linux": _TailwindTarget("tailwindcss-linux", "tailwindcss", "./tmp/main"),
    "darwin": _TailwindTarget("tailwindcss-mac", "tailwindcss", "./tmp/main"),
    "windows": _TailwindTarget("tailwindcss-windows.exe", "tailwindcss.exe", "./tmp/main.exe"),
}


def validate_project_name(name: str) -> str:
    """Return ``name`` if it is in kebab case, otherwise raise ValueError."""
    if not _PROJECT_NAME_RE.fullmatch(name):
        raise ValueError(
            "invalid name format. Please use kebab case "
            "(lowercase letters and numbers only, with dashes)"
        )
    return name


def generate_app_id() -> str:
    """A short random id made of lowercase letters, digits and dashes."""
    raw = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))
    return _SPECIAL_CHARS_RE.sub("-", raw.lower())


@dataclass
class InitCommand:
    """Asks for the project's names and scaffolds a new project in the current folder."""

    cli: GothicCli
    data: CliData = field(default_factory=default_cli_data)
    prompt: Callable[[str], str] = input

    def create_new_app(self, data: CliData | None = None) -> None:
        """Prompt for the names, write the project files and prepare the module."""
        data = self.data if data is None else data
        project_name = self.prompt_for_project_name()
        go_mod_name = self.prompt_for_go_mod_name()
        self.data = replace(data, project_name=project_name, go_mod_name=go_mod_name)

        self.initialize_project()
        self.cli.initialize_module(go_mod_name)
        self.cli.templ.render()
        self.cli.file_based_router.render(go_mod_name)
        try:
            self.cli.runner(["git", "init"])
        except (OSError, CommandError):
            pass
        print("Project initialized successfully!")

    def initialize_project(self) -> None:
        """Create the directories and files of the project."""
        self.cli.templates.init_cmd_template_info = InitCmdTemplateInfo(
            project_name=self.data.project_name,
            go_mod_name=self.data.go_mod_name,
            main_server_package_name="package main",
            main_server_function_name="main()",
        )
        self._create_initial_dirs()
        self._create_tailwind_binary()
        self._create_hidden_files()
        self._create_initial_file_structure()
        self._create_template_based_files()

    def _create_initial_dirs(self) -> None:
        for directory in self.data.initial_dirs:
            try:
                os.makedirs(directory, exist_ok=True)
            except OSError as exc:
                raise OSError(f"error generating initial Directories: {exc}") from exc

    def _create_tailwind_binary(self) -> None:
        target = _TAILWIND_TARGETS.get(self.cli.runtime)
        if target is None:
            raise ValueError("error: unknown OS")
        roots = {
            "linux": self.data.tailwind.linux,
            "darwin": self.data.tailwind.mac,
            "windows": self.data.tailwind.windows,
        }
        try:
            content = (Path(roots[self.cli.runtime]) / target.source_name).read_bytes()
        except OSError:
            content = b""
        info = self.cli.templates.init_cmd_template_info
        info.tail_wind_file_name = target.output_name
        info.main_binary_file_name = target.main_binary
        try:
            Path(target.output_name).write_bytes(content)
            os.chmod(target.output_name, 0o755)
        except OSError as exc:
            raise OSError(f"error creating file {target.output_name}: {exc}") from exc

    def _create_hidden_files(self) -> None:
        Path(APP_ID_FILE).write_text(generate_app_id(), encoding="utf-8")
        Path(".env").write_text(self.data.env, encoding="utf-8")
        Path(".gitignore").write_text(self.data.git_ignore, encoding="utf-8")

    def _create_initial_file_structure(self) -> None:
        templates = self.cli.templates
        info = templates.init_cmd_template_info
        try:
            server = (Path(self.data.server_folder) / "server/server.go").read_bytes()
        except OSError:
            server = b""
        try:
            Path("main.go").write_bytes(server)
        except OSError as exc:
            raise OSError(f"error creating file main.go: {exc}") from exc
        try:
            templates.update_from_template("main.go", "main.go", info)
        except (OSError, TemplateError):
            pass

        for filename, root in self.data.initial_files.items():
            templates.create_from_template(root, filename, filename, info)
        for filename, root in self.data.template_files.items():
            templates.copy_from_root(root, filename, filename)
        for filename, root in self.data.public_folder_assets.items():
            try:
                Path(filename).write_bytes((Path(root) / filename).read_bytes())
            except OSError as exc:
                raise OSError(f"error creating file {filename}: {exc}") from exc

    def _create_template_based_files(self) -> None:
        templates = self.cli.templates
        source = self.data.src_folder
        go_mod_name = self.data.go_mod_name
        for path, page_name in self.data.custom_template_based_pages.items():
            templates.create_from_template(
                source, path, path, RouteTemplateInfo(page_name=page_name, go_mod_name=go_mod_name)
            )
        for path, component_name in self.data.custom_template_based_components.items():
            templates.create_from_template(
                source,
                path,
                path,
                RouteTemplateInfo(component_name=component_name, go_mod_name=go_mod_name),
            )
        for path, route_name in self.data.custom_template_based_routes.items():
            templates.create_from_template(
                source,
                path,
                path,
                RouteTemplateInfo(route_name=route_name, go_mod_name=go_mod_name),
            )

    def _read_word(self, message: str) -> str:
        try:
            line = self.prompt(message)
        except EOFError:
            line = ""
        words = line.split()
        return words[0] if words else ""

    def prompt_for_project_name(self) -> str:
        """Ask for the stack name and check that it is in kebab case."""
        name = self._read_word(
            "Enter your unique stack name in kebab case (e.g., your-unique-stack-name): "
        )
        return validate_project_name(name)

    def prompt_for_go_mod_name(self) -> str:
        """Ask for the Go module name."""
        name = self._read_word("Enter your go module name: ")
        if not name:
            raise ValueError("go module name cannot be empty")
        return name