"""Command line entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Sequence

from gothicframework.deploy import DeployCommand
from gothicframework.hot_reload import HotReloadCommand
from gothicframework.images import ImageOptimizer
from gothicframework.project import GothicCli
from gothicframework.scaffold import InitCommand
from gothicframework.templates import TemplateError
from gothicframework.tools import CommandError


@dataclass
class BuildCommand:
    """Compiles the templates and regenerates the routes file."""

    cli: GothicCli

    def build(self) -> None:
        """Render templates, then the file-based routes."""
        self.cli.templ.render()
        self.cli.file_based_router.render(self.cli.get_config().go_mod_name)


def _run_build(cli: GothicCli, args: argparse.Namespace) -> None:
    BuildCommand(cli).build()


def _run_deploy(cli: GothicCli, args: argparse.Namespace) -> None:
    DeployCommand(cli).deploy(args.stage, args.action)


def _run_hot_reload(cli: GothicCli, args: argparse.Namespace) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    HotReloadCommand(cli).hot_reload()


def _run_init(cli: GothicCli, args: argparse.Namespace) -> None:
    InitCommand(cli).create_new_app()


def _run_optimize_images(cli: GothicCli, args: argparse.Namespace) -> None:
    ImageOptimizer(cli).optimize_images()


def build_parser() -> argparse.ArgumentParser:
    """The parser for the ``gothicframework`` command and its subcommands."""
    parser = argparse.ArgumentParser(
        prog="gothicframework",
        description="Create, build, run and deploy Gothic apps.",
    )
    commands = parser.add_subparsers(dest="command", metavar="command")

    build = commands.add_parser("build", help="Compiles all Templ files into go files.")
    build.set_defaults(handler=_run_build)

    deploy = commands.add_parser(
        "deploy", help="Deploy or remove the application on AWS using AWS SAM."
    )
    deploy.add_argument(
        "-s", "--stage", default="dev", help="Define AWS stage to deploy or delete"
    )
    deploy.add_argument(
        "-a",
        "--action",
        default="deploy",
        help="Action to be taken, to deploy or delete the api",
    )
    deploy.set_defaults(handler=_run_deploy)

    hot_reload = commands.add_parser(
        "hot-reload", help="Run your Gothic app locally in hot-reload mode."
    )
    hot_reload.set_defaults(handler=_run_hot_reload)

    init = commands.add_parser(
        "init",
        help="Initialize the project structure and configuration files for a Gothic app.",
    )
    init.set_defaults(handler=_run_init)

    optimize = commands.add_parser(
        "optimize-images",
        help="Generate optimized and blurred image variants in the public folder",
    )
    optimize.set_defaults(handler=_run_optimize_images)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; returns the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 0
    try:
        handler(GothicCli(), args)
    except (OSError, ValueError, TemplateError, CommandError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())