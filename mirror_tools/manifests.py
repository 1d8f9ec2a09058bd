"""
Script: mirror_tools/manifests.py
What: Assembles and pushes one multi-arch manifest per (image, tag).
Doing: Checks every `tag-arch` member exists, removes any old local manifest, recreates it with `--amend`, and pushes it.
Why: Users pull the plain tag; the manifest lets the registry pick the right architecture.
Goal: Make each pushed manifest list exactly the current architecture set, with no stale members from older runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from mirror_tools.common import CommandError, ManifestError
from mirror_tools.engine import DockerEngine
from mirror_tools.image_spec import ImageSpec, destination_name
from mirror_tools.platforms import Platform, matrix_arches
from mirror_tools.publisher import destination_ref


@dataclass(frozen=True)
class Manifest:
    image: str
    tag: str
    ref: str
    members: tuple[str, ...]


def manifest_ref(registry: str, image: str, tag: str) -> str:
    return f"{registry}/{destination_name(image)}:{tag}"


def manifest_members(registry: str, image: str, tag: str, arches: Sequence[str]) -> tuple[str, ...]:
    return tuple(destination_ref(registry, image, tag, arch) for arch in arches)


def assemble_manifest(
    engine: DockerEngine,
    *,
    registry: str,
    image: str,
    tag: str,
    arches: Sequence[str],
) -> Manifest:
    ref = manifest_ref(registry, image, tag)
    members = manifest_members(registry, image, tag, arches)

    try:
        # Every member must already be pushed; a missing one means the build
        # phase did not finish for this tag.
        missing = [member for member in members if not engine.manifest_exists(member)]
        if missing:
            raise ManifestError(
                f"Cannot assemble {ref}; architecture tags missing from registry: {' '.join(missing)}"
            )

        # Start from an empty manifest so members from an older run cannot survive.
        engine.manifest_remove(ref)
        engine.manifest_create(ref, members, amend=True)
        engine.manifest_push(ref)
    except CommandError as exc:
        raise ManifestError(f"Failed to assemble or push manifest {ref}\n{exc}") from exc

    print(f"Pushed manifest {ref} ({' '.join(members)})")
    return Manifest(image=image, tag=tag, ref=ref, members=members)


def assemble_all(
    engine: DockerEngine,
    *,
    registry: str,
    specs: Sequence[ImageSpec],
    platforms: Sequence[Platform],
) -> list[Manifest]:
    arches = matrix_arches(platforms)
    manifests: list[Manifest] = []
    for spec in specs:
        for tag in spec.tags:
            manifests.append(
                assemble_manifest(engine, registry=registry, image=spec.image, tag=tag, arches=arches)
            )
    return manifests
