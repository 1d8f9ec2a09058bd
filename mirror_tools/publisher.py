"""
Script: mirror_tools/publisher.py
What: Publishes one image per (image, tag, platform) under an architecture-suffixed tag.
Doing: Pulls (or builds, for the derived agent image) each platform, retags it as `registry/name:tag-arch`, and pushes.
Why: Multi-arch manifests can only reference per-architecture tags that already exist in the registry.
Goal: Leave exactly one pushed image per architecture tag, or stop the run on the first failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from mirror_tools.common import CommandError, PublishError
from mirror_tools.derived_image import DerivedBuild
from mirror_tools.engine import DockerEngine
from mirror_tools.image_spec import ImageSpec, destination_name
from mirror_tools.platforms import Platform


@dataclass(frozen=True)
class PublishedArtifact:
    image: str
    tag: str
    platform: Platform
    destination: str


def destination_ref(registry: str, image: str, tag: str, arch: str) -> str:
    """
    Build the architecture-qualified destination reference.

    Example: `registry`, `elastic/elastic-agent`, `8.10.0`, `arm64` gives
    `registry/elastic-agent:8.10.0-arm64`. The OS part of the platform is
    not part of the tag.
    """
    return f"{registry}/{destination_name(image)}:{tag}-{arch}"


def publish_architecture(
    engine: DockerEngine,
    *,
    registry: str,
    image: str,
    tag: str,
    platform: Platform,
    derived: DerivedBuild | None = None,
) -> PublishedArtifact:
    destination = destination_ref(registry, image, tag, platform.arch)
    try:
        if derived is None:
            source = f"{image}:{tag}"
            engine.fetch(source, platform)
        else:
            source = derived.local_ref(tag)
            engine.build(
                str(derived.recipe_path),
                build_args=derived.build_args(tag),
                platform=platform,
                tag=source,
                context_dir=str(derived.context_dir),
            )
        engine.tag(source, destination)
        engine.push(destination)
    except CommandError as exc:
        raise PublishError(f"Failed to publish {image}:{tag} for {platform} as {destination}\n{exc}") from exc

    print(f"Published {destination}")
    return PublishedArtifact(image=image, tag=tag, platform=platform, destination=destination)


def publish_all(
    engine: DockerEngine,
    *,
    registry: str,
    specs: Sequence[ImageSpec],
    platforms: Sequence[Platform],
    derived_builds: dict[str, DerivedBuild] | None = None,
) -> list[PublishedArtifact]:
    """
    Publish every (image, tag, platform) in spec order, platforms innermost.

    `derived_builds` maps image references to prepared recipes; those images
    are built instead of pulled. Any failure aborts the remaining publishes.
    """
    derived_builds = derived_builds or {}
    published: list[PublishedArtifact] = []
    for spec in specs:
        derived = derived_builds.get(spec.image)
        for tag in spec.tags:
            action = "Building" if derived else "Retagging"
            print(
                f"{action} and pushing {spec.image}:{tag} for platforms: "
                f"{' '.join(str(platform) for platform in platforms)}"
            )
            for platform in platforms:
                published.append(
                    publish_architecture(
                        engine,
                        registry=registry,
                        image=spec.image,
                        tag=tag,
                        platform=platform,
                        derived=derived,
                    )
                )
    return published
