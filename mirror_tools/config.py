"""
Script: mirror_tools/config.py
What: Loads the run configuration from environment variables.
Doing: Reads required and optional env values once into frozen config objects.
Why: Each command gets its settings passed in explicitly instead of reading env all over the code.
Goal: Fail before any registry work when a required value is missing.
"""

from __future__ import annotations

from dataclasses import dataclass

from mirror_tools.common import (
    DEFAULT_COMMAND_TIMEOUT,
    ConfigError,
    optional_env,
    require_env,
)
from mirror_tools.engine import DEFAULT_BUILDER_NAME, DockerEngine


@dataclass(frozen=True)
class MirrorConfig:
    region: str
    registry: str
    images_tags: str
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    builder_name: str = DEFAULT_BUILDER_NAME
    build_cache_dir: str = ""

    def engine(self) -> DockerEngine:
        return DockerEngine(timeout=self.command_timeout, cache_dir=self.build_cache_dir)


@dataclass(frozen=True)
class AgentConfig:
    """Settings only needed when the derived agent image is in the image spec."""

    secret_name: str
    cert_file_path: str
    aws_profile: str = ""


def parse_timeout(raw_value: str) -> float:
    """Convert `MIRROR_COMMAND_TIMEOUT` into seconds; must be a positive integer."""
    if not raw_value:
        return DEFAULT_COMMAND_TIMEOUT
    try:
        seconds = int(raw_value)
    except ValueError as exc:
        raise ConfigError(f"MIRROR_COMMAND_TIMEOUT must be an integer, got {raw_value!r}") from exc
    if seconds <= 0:
        raise ConfigError(f"MIRROR_COMMAND_TIMEOUT must be positive, got {seconds}")
    return seconds


def load_config() -> MirrorConfig:
    # All three are required by every command; check them together up front.
    region = require_env("AWS_REGION")
    registry = require_env("REGISTRY")
    images_tags = require_env("UPSTREAM_IMAGES_TAGS")

    return MirrorConfig(
        region=region,
        # A trailing slash would produce `host//name:tag` refs.
        registry=registry.rstrip("/"),
        images_tags=images_tags,
        command_timeout=parse_timeout(optional_env("MIRROR_COMMAND_TIMEOUT").strip()),
        builder_name=optional_env("MIRROR_BUILDER_NAME").strip() or DEFAULT_BUILDER_NAME,
        build_cache_dir=optional_env("MIRROR_BUILD_CACHE_DIR").strip(),
    )


def load_agent_config() -> AgentConfig:
    return AgentConfig(
        secret_name=require_env("ES_CA_CERT"),
        cert_file_path=require_env("CERT_FILE_PATH"),
        aws_profile=optional_env("SSM_AWS_PROFILE").strip(),
    )
