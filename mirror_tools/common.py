"""
Script: mirror_tools/common.py
What: Shared helper functions used by all `mirror_tools` modules.
Doing: Defines the error classes, wraps env reads and external command execution.
Why: Avoids duplicated helper code across the setup/build/push commands.
Goal: Keep failure reporting and command behavior consistent across all helper modules.
"""

from __future__ import annotations

import json
import os
import subprocess
from typing import Sequence


DEFAULT_COMMAND_TIMEOUT = 1800


class MirrorToolError(RuntimeError):
    """Raised when a mirror helper hits a known error condition."""

    stage = "mirror"


class ConfigError(MirrorToolError):
    """Required environment or configuration value is missing or invalid."""

    stage = "config"


class ParseError(MirrorToolError):
    """The serialized image spec could not be parsed."""

    stage = "parse"


class AuthError(MirrorToolError):
    """Registry login failed."""

    stage = "auth"


class SecretRetrievalError(MirrorToolError):
    """A value could not be read from the secret store."""

    stage = "secret"


class PublishError(MirrorToolError):
    """Fetching, building, tagging or pushing one architecture image failed."""

    stage = "publish"


class ManifestError(MirrorToolError):
    """A multi-arch manifest could not be assembled or pushed."""

    stage = "manifest"


class BuilderError(MirrorToolError):
    """The multi-platform buildx builder could not be created or selected."""

    stage = "builder"


class CleanupError(MirrorToolError):
    """One or more run-owned temporary files could not be removed."""

    stage = "cleanup"


class CommandError(MirrorToolError):
    """An external command exited with a non-zero status."""

    stage = "command"


class CommandTimeoutError(CommandError):
    """An external command did not finish within its timeout."""


def require_env(name: str) -> str:
    """Return a required environment variable or raise a clear error."""
    value = os.environ.get(name)
    if value is None or value == "":
        raise ConfigError(f"Missing required environment variable: {name}")
    return value


def optional_env(name: str, default: str = "") -> str:
    """Return an environment variable with a fallback default."""
    return os.environ.get(name, default)


def run_cmd(
    args: Sequence[str],
    *,
    capture_output: bool = True,
    cwd: str | None = None,
    input_text: str | None = None,
    timeout: float | None = None,
) -> str:
    """
    Run a command and return stdout, raising a readable error on failure.

    `input_text` is written to the command's stdin (used for passwords so
    they never appear in the process list). `timeout` is in seconds; a command
    that runs longer is killed and reported as `CommandTimeoutError`.
    """
    try:
        result = subprocess.run(
            list(args),
            check=True,
            text=True,
            capture_output=capture_output,
            cwd=cwd,
            input=input_text,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise CommandTimeoutError(
            f"Command timed out after {timeout} seconds: {' '.join(args)}"
        ) from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        stdout = (exc.stdout or "").strip()
        details = stderr or stdout or str(exc)
        raise CommandError(f"Command failed: {' '.join(args)}\n{details}") from exc
    except FileNotFoundError as exc:
        raise CommandError(f"Command not found: {args[0]}") from exc

    if not capture_output:
        return ""
    return result.stdout


def run_json_cmd(args: Sequence[str], *, timeout: float | None = None) -> dict:
    """Run a command that returns JSON and parse it."""
    output = run_cmd(args, timeout=timeout)
    try:
        return json.loads(output)
    except json.JSONDecodeError as exc:
        raise CommandError(f"Expected JSON from command: {' '.join(args)}") from exc
