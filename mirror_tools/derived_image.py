"""
Script: mirror_tools/derived_image.py
What: Prepares the locally built elastic-agent image that carries our CA certificate.
Doing: Fetches the certificate from SSM, writes it and a generated Dockerfile into a temp build context.
Why: The agent must trust the cluster CA, so a straight pull/retag of the upstream image is not enough.
Goal: Give the publisher one recipe file that every platform build of the agent image can reuse.
"""

from __future__ import annotations

import posixpath
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from mirror_tools.common import PublishError
from mirror_tools.config import AgentConfig
from mirror_tools.temp_artifacts import TempArtifacts


AGENT_IMAGE = "elastic/elastic-agent"
CERT_FILENAME = "client-ca.crt"
RECIPE_FILENAME = "Dockerfile.elastic-agent"
TAG_BUILD_ARG = "TAG"


@dataclass(frozen=True)
class DerivedBuild:
    image: str
    recipe_path: Path
    context_dir: Path

    def build_args(self, tag: str) -> dict[str, str]:
        return {TAG_BUILD_ARG: tag}

    def local_ref(self, tag: str) -> str:
        # Kept apart from `image:tag` so the pulled upstream tag is never overwritten.
        return f"{self.image}:{tag}-derived"


def is_derived_image(image: str) -> bool:
    return image == AGENT_IMAGE


def render_recipe(*, upstream_image: str, cert_file_path: str) -> str:
    """
    Return a Dockerfile that copies the CA certificate into the upstream image.

    The upstream tag is a build argument so one file serves every tag.
    """
    cert_dir = posixpath.dirname(cert_file_path) or "/"
    return (
        f"ARG {TAG_BUILD_ARG}=latest\n"
        f"FROM {upstream_image}:${{{TAG_BUILD_ARG}}}\n"
        f"RUN mkdir -p {cert_dir}\n"
        f"COPY {CERT_FILENAME} {cert_file_path}\n"
    )


def prepare_derived_build(
    agent_config: AgentConfig,
    temp_artifacts: TempArtifacts,
    *,
    fetch_secret: Callable[[str], str],
    image: str = AGENT_IMAGE,
) -> DerivedBuild:
    """
    Write the certificate and recipe for the derived image.

    `fetch_secret` receives the SSM parameter name and returns its value.
    It is passed in to keep this function easy to test.
    """
    print(f"Preparing files for {image} build...")

    # Fetch first so a secret failure leaves nothing behind on disk.
    certificate = fetch_secret(agent_config.secret_name)

    try:
        context_dir = temp_artifacts.register(Path(tempfile.mkdtemp(prefix="mirror-agent-")))
        cert_path = temp_artifacts.register(context_dir / CERT_FILENAME)
        cert_path.write_text(certificate if certificate.endswith("\n") else certificate + "\n", encoding="utf-8")

        recipe_path = temp_artifacts.register(context_dir / RECIPE_FILENAME)
        recipe_path.write_text(
            render_recipe(upstream_image=image, cert_file_path=agent_config.cert_file_path),
            encoding="utf-8",
        )
    except OSError as exc:
        raise PublishError(f"Failed to write build files for {image}: {exc}") from exc
    return DerivedBuild(image=image, recipe_path=recipe_path, context_dir=context_dir)
