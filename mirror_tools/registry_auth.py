"""
Script: mirror_tools/registry_auth.py
What: Logs the image engine into the private ECR registry.
Doing: Reads a short-lived password with `aws ecr get-login-password` and passes it to `docker login`.
Why: Publish and manifest steps need push access; a failed login should stop the run right away.
Goal: Turn any login problem into one clear `AuthError`.
"""

from __future__ import annotations

from mirror_tools.common import DEFAULT_COMMAND_TIMEOUT, AuthError, CommandError, run_cmd
from mirror_tools.engine import DockerEngine


ECR_USERNAME = "AWS"


def ecr_login_password(region: str, *, timeout: float = DEFAULT_COMMAND_TIMEOUT) -> str:
    """Return a registry password for the ECR account in `region`."""
    try:
        password = run_cmd(
            ["aws", "ecr", "get-login-password", "--region", region],
            timeout=timeout,
        ).strip()
    except CommandError as exc:
        raise AuthError(f"Failed to get ECR login password for region {region}\n{exc}") from exc
    if not password:
        raise AuthError(f"ECR returned an empty login password for region {region}")
    return password


def registry_login(engine: DockerEngine, *, registry: str, region: str) -> None:
    print(f"Logging into registry {registry}...")
    password = ecr_login_password(region, timeout=engine.timeout)
    try:
        engine.login(registry, username=ECR_USERNAME, password=password)
    except CommandError as exc:
        raise AuthError(f"Docker login to {registry} failed\n{exc}") from exc
