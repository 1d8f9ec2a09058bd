"""
Script: mirror_tools/mirror_push.py
What: Publishes the multi-arch manifests for every image/tag in `UPSTREAM_IMAGES_TAGS`.
Doing: Recreates `registry/name:tag` from the `tag-arch` images pushed by `build`, then pushes it.
Why: Users should pull one tag and get the image for their own architecture.
Goal: Keep each manifest in sync with the current platform list on every run.
"""

from __future__ import annotations

from typing import Sequence

from mirror_tools.config import MirrorConfig, load_config
from mirror_tools.engine import DockerEngine
from mirror_tools.image_spec import parse_image_spec
from mirror_tools.manifests import Manifest, assemble_all
from mirror_tools.platforms import Platform, build_platform_matrix


def run_push(
    config: MirrorConfig,
    engine: DockerEngine,
    *,
    platforms: Sequence[Platform],
) -> list[Manifest]:
    specs = parse_image_spec(config.images_tags)
    return assemble_all(engine, registry=config.registry, specs=specs, platforms=platforms)


def main() -> None:
    config = load_config()
    manifests = run_push(config, config.engine(), platforms=build_platform_matrix())
    print(f"Pushed {len(manifests)} manifest(s)")


if __name__ == "__main__":
    main()
