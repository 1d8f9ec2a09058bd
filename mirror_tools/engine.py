"""
Script: mirror_tools/engine.py
What: Thin adapter over the `docker` CLI used for every image operation.
Doing: Wraps login, buildx builder setup, pull/build/tag/push, and `docker manifest` calls.
Why: Keeps command-line details in one place so publish/manifest logic can be tested with a fake engine.
Goal: Give the orchestration code a small set of image primitives with one error type.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from mirror_tools.common import (
    DEFAULT_COMMAND_TIMEOUT,
    CommandError,
    CommandTimeoutError,
    run_cmd,
    run_json_cmd,
)
from mirror_tools.platforms import Platform


DEFAULT_BUILDER_NAME = "multiarch-builder"


class DockerEngine:
    """
    Run image primitives through the local `docker` binary.

    Every call is bounded by `timeout` seconds; a hang surfaces as
    `CommandTimeoutError` instead of stalling the run.
    """

    def __init__(
        self,
        *,
        docker: str = "docker",
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
        cache_dir: str = "",
    ) -> None:
        self.docker = docker
        self.timeout = timeout
        self.cache_dir = cache_dir

    def _run(self, args: Sequence[str], *, input_text: str | None = None) -> str:
        return run_cmd([self.docker, *args], input_text=input_text, timeout=self.timeout)

    def login(self, registry: str, *, username: str, password: str) -> None:
        # Password goes through stdin so it never shows up in `ps` output.
        self._run(
            ["login", "--username", username, "--password-stdin", registry],
            input_text=password,
        )

    def ensure_builder(self, name: str = DEFAULT_BUILDER_NAME) -> None:
        """Create or select a buildx builder that can target several platforms."""
        try:
            self._run(["buildx", "inspect", name])
        except CommandError:
            self._run(["buildx", "create", "--name", name, "--driver", "docker-container", "--use"])
        else:
            self._run(["buildx", "use", name])
        self._run(["buildx", "inspect", "--bootstrap"])

    def fetch(self, ref: str, platform: Platform) -> None:
        self._run(["pull", "--platform", str(platform), ref])

    def build(
        self,
        recipe_path: str,
        *,
        build_args: Mapping[str, str],
        platform: Platform,
        tag: str,
        context_dir: str = ".",
    ) -> None:
        """Build one platform image from a recipe and load it into the local image store."""
        command = ["buildx", "build", "--platform", str(platform)]
        for key, value in build_args.items():
            command.extend(["--build-arg", f"{key}={value}"])
        command.extend(["--file", recipe_path, "--tag", tag])
        if self.cache_dir:
            command.extend(
                [
                    "--cache-to",
                    f"type=local,dest={self.cache_dir}",
                    "--cache-from",
                    f"type=local,src={self.cache_dir}",
                ]
            )
        command.extend(["--load", context_dir])
        self._run(command)

    def tag(self, source: str, destination: str) -> None:
        self._run(["tag", source, destination])

    def push(self, ref: str) -> None:
        self._run(["push", ref])

    def manifest_exists(self, ref: str) -> bool:
        """True when the registry has an image or manifest list at `ref`."""
        try:
            run_json_cmd([self.docker, "manifest", "inspect", ref], timeout=self.timeout)
        except CommandTimeoutError:
            raise
        except CommandError:
            return False
        return True

    def manifest_create(self, ref: str, members: Sequence[str], *, amend: bool = True) -> None:
        command = ["manifest", "create"]
        if amend:
            command.append("--amend")
        command.append(ref)
        command.extend(members)
        self._run(command)

    def manifest_remove(self, ref: str) -> None:
        """Remove a local manifest list; a missing one counts as removed."""
        try:
            self._run(["manifest", "rm", ref])
        except CommandTimeoutError:
            raise
        except CommandError as exc:
            if "no such manifest" not in str(exc).lower():
                raise

    def manifest_push(self, ref: str) -> None:
        self._run(["manifest", "push", ref])
