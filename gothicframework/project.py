"""The shared state and helpers every command works with."""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path
from typing import Any, Callable, Sequence

from gothicframework.config import DEFAULT_CONFIG_FILE, Config, load_config
from gothicframework.routing import FileBasedRouteHelper
from gothicframework.templates import TemplateHelper
from gothicframework.tools import (
    AwsHelper,
    AwsSamHelper,
    CommandError,
    TailwindHelper,
    TemplHelper,
    new_logger,
)

APP_ID_FILE = ".gothicCli/app-id.txt"

_PLATFORM_NAMES = {"win32": "windows", "cygwin": "windows"}


def _platform_name() -> str:
    """The operating system name in the form the scaffolding expects."""
    if sys.platform.startswith("linux"):
        return "linux"
    return _PLATFORM_NAMES.get(sys.platform, sys.platform)


def _run_quietly(args: Sequence[str]) -> None:
    """Run a command sharing stdin and stderr, discarding stdout and its status."""
    try:
        subprocess.run(list(args), stdout=subprocess.DEVNULL, check=False)
    except OSError:
        pass


class GothicCli:
    """Holds the project configuration, its app id and the tool helpers."""

    def __init__(
        self,
        *,
        runtime: str | None = None,
        templates: TemplateHelper | None = None,
        tailwind: TailwindHelper | None = None,
        templ: TemplHelper | None = None,
        logger: logging.Logger | None = None,
        aws_sam: AwsSamHelper | None = None,
        aws: AwsHelper | None = None,
        file_based_router: FileBasedRouteHelper | None = None,
        config: Config | None = None,
        app_id: str | None = None,
        config_path: str | Path = DEFAULT_CONFIG_FILE,
        app_id_path: str | Path = APP_ID_FILE,
        runner: Callable[[Sequence[str]], Any] = _run_quietly,
    ) -> None:
        self.runtime = runtime if runtime is not None else _platform_name()
        self.templates = templates if templates is not None else TemplateHelper()
        self.tailwind = tailwind if tailwind is not None else TailwindHelper()
        self.templ = templ if templ is not None else TemplHelper()
        self.logger = logger if logger is not None else new_logger("error", False, sys.stdout)
        self.aws_sam = aws_sam if aws_sam is not None else AwsSamHelper()
        self.aws = aws if aws is not None else AwsHelper()
        self.file_based_router = (
            file_based_router if file_based_router is not None else FileBasedRouteHelper()
        )
        self.config_path = Path(config_path)
        self.app_id_path = Path(app_id_path)
        self.runner = runner
        self._config = config
        self._app_id = app_id

    def get_app_id(self) -> str:
        """The project's app id, read once from its file."""
        if self._app_id is not None:
            return self._app_id
        try:
            content = self.app_id_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise OSError(f"error reading file: {exc}") from exc
        self._app_id = content
        return content

    def get_config(self) -> Config:
        """The project configuration, read once from ``gothic-config.json``."""
        if self._config is not None:
            return self._config
        try:
            config = load_config(self.config_path)
        except OSError as exc:
            raise OSError(f"Error opening file: {exc}") from exc
        except ValueError as exc:
            raise ValueError(f"Error decoding JSON: {exc}") from exc
        self._config = config
        return config

    def initialize_module(self, go_module_name: str) -> None:
        """Create the Go module and tidy its dependencies; failures are ignored."""
        for command in (["go", "mod", "init", go_module_name], ["go", "mod", "tidy"]):
            try:
                self.runner(command)
            except (OSError, CommandError):
                continue