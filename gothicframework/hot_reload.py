"""Running a project locally and rebuilding it whenever its sources change."""

from __future__ import annotations

import functools
import logging
import os
import re
import subprocess
import threading
import time
from pathlib import Path
from typing import Any, Callable, Sequence

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from gothicframework.project import GothicCli
from gothicframework.templates import TemplateError
from gothicframework.tools import CommandError

log = logging.getLogger(__name__)

EXCLUDED_DIRS = ("assets", "tmp", "vendor", "public", "routes")
WATCHED_EXTENSIONS = (".go", ".tpl", ".tmpl", ".templ", ".html")
GENERATED_FILE_PATTERN = re.compile(r".*_templ\.go$")
SOURCE_DIR = "src"
TAILWIND_STARTUP_SECONDS = 4.0

BANNER = """
=====================================
  GOTHIC APP
=====================================

🚀 Gothic App is up and running!
🌐 Listening on: http://127.0.0.1:7331
🔥  Mode: HOT RELOAD ENABLED
"""

_HANDLED_EVENTS = frozenset({"created", "deleted", "modified", "moved"})


class _SourceEventHandler(FileSystemEventHandler):
    """Rebuilds the app when a watched source file changes."""

    def __init__(self, command: HotReloadCommand) -> None:
        super().__init__()
        self._command = command

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in _HANDLED_EVENTS or event.is_directory:
            return
        removed = event.event_type == "deleted"
        paths = [os.fsdecode(event.src_path)]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(os.fsdecode(dest))
        if any(self._command.should_handle(path, removed) for path in paths):
            self._command.rebuild()


class HotReloadCommand:
    """Watches templates, Go sources and CSS and restarts the app on changes."""

    def __init__(
        self,
        cli: GothicCli,
        *,
        build_runner: Callable[[Sequence[str]], Any] | None = None,
        spawn: Callable[[Sequence[str]], Any] = subprocess.Popen,
        startup_delay: float = TAILWIND_STARTUP_SECONDS,
        source_dir: str | os.PathLike = SOURCE_DIR,
    ) -> None:
        self.cli = cli
        windows = cli.runtime == "windows"
        self.tailwind_file = "./tailwindcss.exe" if windows else "./tailwindcss"
        self.main_binary_name = "tmp/main.exe" if windows else "tmp/main"
        self.excluded_dirs: tuple[str, ...] = EXCLUDED_DIRS
        self.watched_extensions: tuple[str, ...] = WATCHED_EXTENSIONS
        self.exclude_regex = GENERATED_FILE_PATTERN
        self.build_runner = build_runner or functools.partial(subprocess.run, check=False)
        self.spawn = spawn
        self.startup_delay = startup_delay
        self.source_dir = Path(source_dir)
        self._lock = threading.Lock()
        self._process: Any = None
        self._tailwind: Any = None
        self._observer: Any = None
        self._stopped = threading.Event()

    def hot_reload(self) -> None:
        """Start Tailwind, the source watcher and the template watcher, then block."""
        self._start_tailwind()
        time.sleep(self.startup_delay)
        threading.Thread(target=self._watch_sources, daemon=True).start()
        threading.Thread(target=self._watch_templates, daemon=True).start()
        print(BANNER)
        try:
            self._stopped.wait()
        except KeyboardInterrupt:
            pass
        finally:
            self._shutdown()

    def is_excluded_dir(self, path: str) -> bool:
        """Whether ``path`` lies inside one of the excluded directories."""
        return any(f"{os.sep}{name}{os.sep}" in path for name in self.excluded_dirs)

    def should_handle(self, path: str, removed: bool) -> bool:
        """Whether a change to ``path`` calls for a rebuild.

        Generated template files only count when they are removed.
        """
        if self.is_excluded_dir(path):
            return False
        if self.exclude_regex.match(os.path.basename(path)) and not removed:
            return False
        return os.path.splitext(path)[1] in self.watched_extensions

    def rebuild(self) -> bool:
        """Regenerate routes, build the binary and restart it; True when it started."""
        with self._lock:
            log.info("Build routes...")
            try:
                self.cli.file_based_router.render(self.cli.get_config().go_mod_name)
            except (OSError, ValueError, TemplateError, CommandError) as exc:
                print(f"error building routes: {exc}")
                return False

            log.info("Build app...")
            try:
                result = self.build_runner(
                    ["go", "build", "-o", self.main_binary_name, "main.go"]
                )
            except OSError as exc:
                print(f"error building app: {exc}")
                return False
            if result.returncode != 0:
                print(f"error building app: exit status {result.returncode}")
                return False

            if self._process is not None:
                log.info("Stopping previous go run process...")
                self._stop_app()

            log.info("Running app...")
            try:
                process = self.spawn([self.main_binary_name])
            except OSError as exc:
                print(f"error running app: {exc}")
                return False
            self._process = process
            threading.Thread(target=self._report_exit, args=(process,), daemon=True).start()
            return True

    def _report_exit(self, process: Any) -> None:
        code = process.wait()
        if code and process is self._process:
            print(f"error running app: exit status {code}")

    def _stop_app(self) -> None:
        process, self._process = self._process, None
        if process is None:
            return
        process.terminate()
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()

    def _start_tailwind(self) -> None:
        log.info("Starting Tailwind in watch mode...")
        command = [
            self.tailwind_file,
            "--watch=always",
            "-i",
            "src/css/app.css",
            "-o",
            "public/styles.css",
            "--minify",
        ]
        try:
            self._tailwind = self.spawn(command)
        except OSError as exc:
            print(f"Failed to start Tailwind watch process: {exc}")
            return
        log.info("Tailwind is watching with PID %s", getattr(self._tailwind, "pid", "?"))
        threading.Thread(target=self._wait_tailwind, daemon=True).start()

    def _wait_tailwind(self) -> None:
        code = self._tailwind.wait()
        if code:
            print(f"Tailwind process exited with error: exit status {code}")
        else:
            log.info("Tailwind process exited normally.")

    def _watch_sources(self) -> None:
        self.rebuild()
        observer = Observer()
        try:
            observer.schedule(_SourceEventHandler(self), str(self.source_dir), recursive=True)
            observer.start()
        except OSError as exc:
            print(f"error walking through directories: {exc}")
            self.rebuild()
            return
        self._observer = observer

    def _watch_templates(self) -> None:
        try:
            self.cli.templ.watch()
        except (OSError, CommandError) as exc:
            log.error("template watcher stopped: %s", exc)

    def _shutdown(self) -> None:
        if self._observer is not None:
            self._observer.stop()
        with self._lock:
            self._stop_app()
        if self._tailwind is not None:
            self._tailwind.terminate()