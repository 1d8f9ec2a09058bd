"""
Script: mirror_tools/mirror_build.py
What: Publishes every architecture image listed in `UPSTREAM_IMAGES_TAGS`.
Doing: Prepares the derived agent build once (if needed), then pulls/builds, retags, and pushes each platform.
Why: The `push` step can only assemble manifests after every `tag-arch` image exists in the registry.
Goal: Publish all per-architecture tags and always remove the temporary certificate and recipe.
"""

from __future__ import annotations

from functools import partial
from typing import Callable, Sequence

from mirror_tools.config import MirrorConfig, load_agent_config, load_config
from mirror_tools.derived_image import DerivedBuild, is_derived_image, prepare_derived_build
from mirror_tools.engine import DockerEngine
from mirror_tools.image_spec import ImageSpec, parse_image_spec
from mirror_tools.parameter_store import fetch_parameter
from mirror_tools.platforms import Platform, build_platform_matrix
from mirror_tools.publisher import PublishedArtifact, publish_all
from mirror_tools.temp_artifacts import TempArtifacts


def prepare_derived_builds(
    specs: Sequence[ImageSpec],
    temp_artifacts: TempArtifacts,
    *,
    fetch_secret: Callable[[str], str] | None = None,
    timeout: float,
) -> dict[str, DerivedBuild]:
    """
    Prepare recipes for derived images before anything is published.

    Runs at most once per derived image, so every tag and platform shares
    one recipe file. A config or secret failure stops the whole run.
    """
    derived_builds: dict[str, DerivedBuild] = {}
    for spec in specs:
        if not is_derived_image(spec.image):
            continue
        agent_config = load_agent_config()
        fetcher = fetch_secret or partial(
            fetch_parameter,
            profile=agent_config.aws_profile,
            timeout=timeout,
        )
        derived_builds[spec.image] = prepare_derived_build(
            agent_config,
            temp_artifacts,
            fetch_secret=fetcher,
            image=spec.image,
        )
    return derived_builds


def run_build(
    config: MirrorConfig,
    engine: DockerEngine,
    *,
    platforms: Sequence[Platform],
    fetch_secret: Callable[[str], str] | None = None,
) -> list[PublishedArtifact]:
    specs = parse_image_spec(config.images_tags)
    with TempArtifacts() as temp_artifacts:
        derived_builds = prepare_derived_builds(
            specs,
            temp_artifacts,
            fetch_secret=fetch_secret,
            timeout=config.command_timeout,
        )
        return publish_all(
            engine,
            registry=config.registry,
            specs=specs,
            platforms=platforms,
            derived_builds=derived_builds,
        )


def main() -> None:
    config = load_config()
    published = run_build(config, config.engine(), platforms=build_platform_matrix())
    print(f"Published {len(published)} architecture image(s)")


if __name__ == "__main__":
    main()
