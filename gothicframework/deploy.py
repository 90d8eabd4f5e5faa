"""Deploying and removing a project's AWS stack."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping

from gothicframework.config import EnvVariables
from gothicframework.project import GothicCli
from gothicframework.templates import (
    EnvValueInfo,
    SamTomlTemplateInfo,
    SamYamlTemplateInfo,
    StageTemplateInfo,
)
from gothicframework.tools import CommandError

ALLOWED_ACTIONS = ("delete", "deploy")

TEMPLATE_DEFAULT = ".gothicCli/templates/template-default.yaml"
TEMPLATE_CUSTOM_DOMAIN = ".gothicCli/templates/template-custom-domain.yaml"
TEMPLATE_CUSTOM_DOMAIN_WITH_ARN = ".gothicCli/templates/template-custom-domain-with-arn.yaml"
DOCKERFILE_TEMPLATE = ".gothicCli/templates/Dockerfile-template"
SAMCONFIG_TEMPLATE = ".gothicCli/templates/samconfig-template.toml"

GENERATED_FILES = ("Dockerfile", "template.yaml", "samconfig.toml")

_QUOTE_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def _quote(text: str) -> str:
    """Quote a string with backslash escapes for anything unprintable."""
    parts = ['"']
    for char in text:
        code = ord(char)
        if char in _QUOTE_ESCAPES:
            parts.append(_QUOTE_ESCAPES[char])
        elif char.isprintable():
            parts.append(char)
        elif code < 0x80:
            parts.append(f"\\x{code:02x}")
        elif code < 0x10000:
            parts.append(f"\\u{code:04x}")
        else:
            parts.append(f"\\U{code:08x}")
    parts.append('"')
    return "".join(parts)


def _format_number(value: float) -> str:
    """Shortest decimal form, switching to exponent form for large or tiny values."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    sign, digit_tuple, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    count = len(digits)
    point = count + exponent
    exp = point - 1
    limit = 6
    if limit > count and count >= point:
        limit = count
    prefix = "-" if sign else ""
    if exp < -4 or exp >= limit:
        mantissa = digits[0] + ("." + digits[1:] if count > 1 else "")
        exp_sign = "-" if exp < 0 else "+"
        return f"{prefix}{mantissa}e{exp_sign}{abs(exp):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{digits}"
    if point >= count:
        return f"{prefix}{digits}{'0' * (point - count)}"
    return f"{prefix}{digits[:point]}.{digits[point:]}"


def _format_plain(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _format_number(float(value))
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        items = " ".join(f"{key}:{_format_plain(value[key])}" for key in sorted(value))
        return f"map[{items}]"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format_plain(item) for item in value) + "]"
    return str(value)


def format_env_value(value: Any) -> str:
    """Render an environment value for the deployment template; strings are quoted."""
    if isinstance(value, str):
        return _quote(value)
    return _format_plain(value)


@dataclass
class DeployCommand:
    """Builds the project and deploys or deletes its stack for a stage."""

    cli: GothicCli
    allowed_actions: tuple[str, ...] = ALLOWED_ACTIONS

    def is_valid_action(self, action: str) -> bool:
        """Whether ``action`` is one of the allowed actions."""
        return action in self.allowed_actions

    def deploy(self, stage: str, action: str) -> None:
        """Prepare the deployment files, build, then deploy or delete the stack."""
        if not self.is_valid_action(action):
            allowed = "[" + " ".join(self.allowed_actions) + "]"
            raise ValueError(f'error: invalid action "{action}". Allowed values: {allowed}')

        self.setup(stage)
        cli = self.cli
        config = cli.get_config()
        cli.templ.render()
        cli.file_based_router.render(config.go_mod_name)
        cli.tailwind.build()
        cli.aws_sam.build()

        try:
            app_id = cli.get_app_id()
        except OSError as exc:
            raise OSError(f"error getting app id: {exc}") from exc

        origin_bucket_name = f"{config.project_name}-{stage}-{app_id}"
        deploy_config = config.deploy
        assert deploy_config is not None

        if action == "deploy":
            cli.aws_sam.deploy(stage, config.project_name, deploy_config.profile)
            self.cleanup()
            try:
                cli.aws.clean_cloudfront_cache(
                    config.project_name, stage, deploy_config.region, deploy_config.profile
                )
            except CommandError:
                pass
            try:
                cli.aws.add_cloudfront_assets(
                    origin_bucket_name, deploy_config.region, deploy_config.profile
                )
            except CommandError:
                pass
            return

        cli.aws.remove_cloudfront_assets(
            origin_bucket_name, deploy_config.region, deploy_config.profile
        )
        cli.aws_sam.delete_stack(stage, config.project_name, deploy_config.profile)
        self.cleanup()

    def setup(self, stage: str) -> SamYamlTemplateInfo:
        """Write ``template.yaml``, ``Dockerfile`` and ``samconfig.toml`` for ``stage``."""
        config = self.cli.get_config()
        deploy = config.deploy
        if deploy is None:
            raise ValueError("Deploy configuration missing in gothic-config.json")
        print("SELECTED STAGE: " + stage)

        env_config = deploy.stages.get(stage) or EnvVariables()
        try:
            app_id = self.cli.get_app_id()
        except OSError as exc:
            raise OSError(f"error getting appId: {exc}") from exc

        bucket_name = env_config.bucket_name
        lambda_name = env_config.lambda_name
        if not bucket_name or not lambda_name:
            bucket_name = lambda_name = f"{config.project_name}-{stage}-{app_id}"

        stage_info = StageTemplateInfo(
            name=stage,
            bucket_name=f'BucketName: "{bucket_name}"',
            lambda_name=f'LambdaName: "{lambda_name}"',
            env=[
                EnvValueInfo(key=key, value=format_env_value(value))
                for key, value in env_config.env.items()
            ],
        )
        yaml_info = SamYamlTemplateInfo(
            timeout=deploy.server_timeout,
            memory_size=deploy.server_memory,
            project_name=config.project_name,
            stage_template_info=stage_info,
        )

        if deploy.custom_domain:
            if deploy.region != "us-east-1" and env_config.certificate_arn is None:
                raise ValueError(
                    "for custom domains, if you set a region other than us-east-1, you must "
                    "provide a us-east-1 ACM CertificateArn in your environment variables"
                )
            if env_config.custom_domain is None or env_config.hosted_zone_id is None:
                raise ValueError(
                    "environment variables customDomain and hostedZoneId are required when "
                    "deploy.customDomain is set to true"
                )
            stage_info.custom_domain = f'customDomain: "{env_config.custom_domain}"'
            stage_info.hosted_zone = f'hostedZoneId: "{env_config.hosted_zone_id}"'
            if env_config.certificate_arn is not None:
                yaml_info.used_template_name = TEMPLATE_CUSTOM_DOMAIN_WITH_ARN
                stage_info.certificate_arn = f'certificateArn: "{env_config.certificate_arn}"'
            else:
                yaml_info.used_template_name = TEMPLATE_CUSTOM_DOMAIN
        else:
            yaml_info.used_template_name = TEMPLATE_DEFAULT

        templates = self.cli.templates
        templates.copy_file(yaml_info.used_template_name, "template.yaml")
        templates.update_from_template("template.yaml", "template.yaml", yaml_info)
        templates.copy_file(DOCKERFILE_TEMPLATE, "Dockerfile")
        templates.copy_file(SAMCONFIG_TEMPLATE, "samconfig.toml")
        templates.update_from_template(
            "samconfig.toml",
            "samconfig.toml",
            SamTomlTemplateInfo(stack_name=config.project_name, aws_region=deploy.region),
        )
        return yaml_info

    def cleanup(self) -> None:
        """Remove the generated deployment files, reporting any that cannot be removed."""
        for path in GENERATED_FILES:
            try:
                os.remove(path)
            except OSError as exc:
                print(f"Error cleaning up deploy file file {path}: {exc}")