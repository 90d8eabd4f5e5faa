"""Wrappers around the external tools a project is built and deployed with."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import IO, Any, Callable, Sequence

TEMPL_PROXY = "http://localhost:8080"


class CommandError(Exception):
    """An external command could not be started or exited with an error."""

    def __init__(self, command: Sequence[str], returncode: int | None = None, reason: str = ""):
        self.command = list(command)
        self.returncode = returncode
        detail = reason or f"exit status {returncode}"
        super().__init__(f"{' '.join(self.command)}: {detail}")


def _run_command(args: Sequence[str], capture: bool = False) -> str:
    """Run a command with inherited stdio, or capture its stdout when asked."""
    try:
        completed = subprocess.run(
            list(args),
            stdout=subprocess.PIPE if capture else None,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise CommandError(args, reason=str(exc)) from exc
    if completed.returncode != 0:
        raise CommandError(args, completed.returncode)
    return completed.stdout or ""


def _spawn_command(args: Sequence[str]) -> subprocess.Popen:
    try:
        return subprocess.Popen(list(args))
    except OSError as exc:
        raise CommandError(args, reason=str(exc)) from exc


Runner = Callable[..., str]


def new_logger(log_level: str, verbose: bool, stream: IO[str]) -> logging.Logger:
    """Create a logger writing to ``stream`` at the named level."""
    if verbose:
        log_level = "debug"
    level = {
        "debug": logging.DEBUG,
        "warn": logging.WARNING,
        "error": logging.ERROR,
    }.get(log_level, logging.INFO)
    logger = logging.Logger("gothicframework", level)
    handler = logging.StreamHandler(stream)
    if log_level == "debug":
        fmt = "%(levelname)s %(pathname)s:%(lineno)d %(message)s"
    else:
        fmt = "%(levelname)s %(message)s"
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    return logger


@dataclass
class AwsHelper:
    """Uses the AWS CLI to manage the public assets and the CDN cache."""

    runner: Runner = _run_command

    def add_cloudfront_assets(self, origin_bucket_name: str, region: str, aws_profile: str) -> None:
        """Upload the ``public`` folder to the origin bucket."""
        bucket_folder = "s3://" + origin_bucket_name + "/public"
        try:
            self.runner(
                ["aws", "s3", "cp", "public", bucket_folder, "--recursive",
                 "--region", region, "--profile", aws_profile]
            )
        except CommandError as exc:
            print(f"Error adding CloudFront assets: {exc}")
            raise
        print("S3 Files added successfully.")

    def remove_cloudfront_assets(
        self, origin_bucket_name: str, region: str, aws_profile: str
    ) -> None:
        """Delete the public assets from the origin bucket."""
        bucket_folder = "s3://" + origin_bucket_name + "/public"
        try:
            self.runner(
                ["aws", "s3", "rm", bucket_folder, "--recursive",
                 "--region", region, "--profile", aws_profile]
            )
        except CommandError as exc:
            print(f"Error removing CloudFront Assets: {exc}")
            raise
        print("S3 Files deleted successfully.")

    def clean_cloudfront_cache(
        self, stack_name: str, stage: str, region: str, aws_profile: str
    ) -> str:
        """Invalidate every path of the stack's distribution; return its id."""
        try:
            output = self.runner(
                ["aws", "cloudformation", "describe-stacks",
                 "--stack-name", f"{stack_name}-{stage}",
                 "--query", "Stacks[0].Outputs[?OutputKey=='CloudFrontId'].OutputValue",
                 "--output", "text", "--region", region, "--profile", aws_profile],
                capture=True,
            )
        except CommandError as exc:
            print(f"Error getting CloudFront Id: {exc}")
            raise
        distribution_id = output.strip()
        if not distribution_id:
            print("CloudFront ID not found")
            raise CommandError(["aws", "cloudformation", "describe-stacks"],
                               reason="CloudFront ID not found")
        try:
            self.runner(
                ["aws", "cloudfront", "create-invalidation",
                 "--distribution-id", distribution_id, "--paths", "/*",
                 "--region", region, "--profile", aws_profile],
                capture=True,
            )
        except CommandError as exc:
            print(f"Error cleaning up deploy files: {exc}")
            raise
        print(f"Successfully reset CloudFront cache for distribution: {distribution_id}")
        return distribution_id


@dataclass
class AwsSamHelper:
    """Uses the AWS SAM CLI to build, deploy and delete the stack."""

    runner: Runner = _run_command

    def build(self) -> None:
        """Build the SAM application."""
        try:
            self.runner(["sam", "build"])
        except CommandError as exc:
            print(f"Error building AWS Sam app:{exc}")
            raise

    def deploy(self, stage: str, stack_name: str, aws_profile: str) -> None:
        """Deploy the stack for ``stage``."""
        try:
            self.runner(
                ["sam", "deploy", "--stack-name", f"{stack_name}-{stage}",
                 "--parameter-overrides", f"Stage={stage}", "--profile", aws_profile]
            )
        except CommandError as exc:
            print(f"Error deploying app:{exc}")
            raise

    def delete_stack(self, stage: str, stack_name: str, aws_profile: str) -> None:
        """Delete the stack for ``stage``."""
        try:
            self.runner(
                ["sam", "delete", "--stack-name", f"{stack_name}-{stage}",
                 "--profile", aws_profile]
            )
        except CommandError as exc:
            print(f"Error deleting app:{exc}")
            raise


@dataclass
class TailwindHelper:
    """Generates the stylesheet through the project's makefile."""

    runner: Runner = _run_command

    def build(self) -> None:
        """Run ``make css``."""
        try:
            self.runner(["make", "css"])
        except CommandError as exc:
            print(f"Error generating tailwind css:{exc}")
            raise


@dataclass
class TemplHelper:
    """Compiles ``.templ`` files into Go sources."""

    runner: Runner = _run_command
    spawner: Callable[[Sequence[str]], Any] = _spawn_command

    def render(self) -> None:
        """Generate Go files for every template once."""
        self.runner(["templ", "generate"])

    def watch(self) -> Any:
        """Start generation in watch mode behind the live-reload proxy; return the process."""
        return self.spawner(["templ", "generate", "-watch", f"-proxy={TEMPL_PROXY}"])