"""Project configuration read from ``gothic-config.json``."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

DEFAULT_CONFIG_FILE = "gothic-config.json"


@dataclass
class OptimizeImagesConfig:
    """Settings for the image optimisation command."""

    low_resolution_rate: int = 0


@dataclass
class EnvVariables:
    """Per-stage deployment settings."""

    bucket_name: str = ""
    lambda_name: str = ""
    hosted_zone_id: str | None = None
    custom_domain: str | None = None
    certificate_arn: str | None = None
    env: dict[str, Any] = field(default_factory=dict)


@dataclass
class DeployConfig:
    """Settings for deploying the application."""

    server_memory: int = 0
    server_timeout: int = 0
    region: str = ""
    profile: str = ""
    stages: dict[str, EnvVariables] = field(default_factory=dict)
    custom_domain: bool = False


@dataclass
class Config:
    """The whole project configuration."""

    project_name: str = ""
    go_mod_name: str = ""
    optimize_images: OptimizeImagesConfig = field(default_factory=OptimizeImagesConfig)
    deploy: DeployConfig | None = None


def _lookup(data: Mapping[str, Any], key: str) -> Any:
    """Find ``key`` exactly, falling back to a case-insensitive match."""
    if key in data:
        return data[key]
    lowered = key.lower()
    for name, value in data.items():
        if isinstance(name, str) and name.lower() == lowered:
            return value
    return None


def _object(value: Any, where: str) -> Mapping[str, Any] | None:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ValueError(f"cannot read {where}: expected an object, got {type(value).__name__}")
    return value


def _string(value: Any, where: str, default: str = "") -> str:
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"cannot read {where}: expected a string, got {type(value).__name__}")
    return value


def _optional_string(value: Any, where: str) -> str | None:
    if value is None:
        return None
    return _string(value, where)


def _integer(value: Any, where: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"cannot read {where}: expected a number, got {type(value).__name__}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"cannot read {where}: {value} is not an integer")
    return int(value)


def _boolean(value: Any, where: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"cannot read {where}: expected a boolean, got {type(value).__name__}")
    return value


def _parse_stage(name: str, data: Any) -> EnvVariables:
    where = f"deploy.stages.{name}"
    stage = _object(data, where)
    if stage is None:
        return EnvVariables()
    env = _object(_lookup(stage, "env"), f"{where}.env")
    return EnvVariables(
        bucket_name=_string(_lookup(stage, "BucketName"), f"{where}.BucketName"),
        lambda_name=_string(_lookup(stage, "LambdaName"), f"{where}.LambdaName"),
        hosted_zone_id=_optional_string(_lookup(stage, "hostedZoneId"), f"{where}.hostedZoneId"),
        custom_domain=_optional_string(_lookup(stage, "customDomain"), f"{where}.customDomain"),
        certificate_arn=_optional_string(
            _lookup(stage, "certificateArn"), f"{where}.certificateArn"
        ),
        env=dict(env) if env is not None else {},
    )


def _parse_deploy(data: Any) -> DeployConfig | None:
    deploy = _object(data, "deploy")
    if deploy is None:
        return None
    stages = _object(_lookup(deploy, "stages"), "deploy.stages") or {}
    return DeployConfig(
        server_memory=_integer(_lookup(deploy, "serverMemory"), "deploy.serverMemory"),
        server_timeout=_integer(_lookup(deploy, "serverTimeout"), "deploy.serverTimeout"),
        region=_string(_lookup(deploy, "region"), "deploy.region"),
        profile=_string(_lookup(deploy, "profile"), "deploy.profile"),
        stages={name: _parse_stage(name, value) for name, value in stages.items()},
        custom_domain=_boolean(_lookup(deploy, "customDomain"), "deploy.customDomain"),
    )


def parse_config(data: Any) -> Config:
    """Build a :class:`Config` from decoded JSON data."""
    root = _object(data, "configuration")
    if root is None:
        return Config()
    optimize = _object(_lookup(root, "optimizeImages"), "optimizeImages") or {}
    return Config(
        project_name=_string(_lookup(root, "projectName"), "projectName"),
        go_mod_name=_string(_lookup(root, "goModuleName"), "goModuleName"),
        optimize_images=OptimizeImagesConfig(
            low_resolution_rate=_integer(
                _lookup(optimize, "lowResolutionRate"), "optimizeImages.lowResolutionRate"
            )
        ),
        deploy=_parse_deploy(_lookup(root, "deploy")),
    )


def load_config(path: str | Path = DEFAULT_CONFIG_FILE) -> Config:
    """Read and parse a configuration file."""
    with open(path, encoding="utf-8") as handle:
        return parse_config(json.load(handle))