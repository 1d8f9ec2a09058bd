"""
Script: mirror_tools/platforms.py
What: Builds the list of target platforms (`os/arch`) for every publish.
Doing: Crosses the OS list with the architecture list, architectures as the inner loop.
Why: Publish and manifest steps must walk platforms in the same stable order.
Goal: Provide one deterministic platform matrix for the whole run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


DEFAULT_OSES = ("linux",)
DEFAULT_ARCHES = ("amd64", "arm64")


@dataclass(frozen=True)
class Platform:
    os: str
    arch: str

    def __str__(self) -> str:
        # Same `os/arch` form that `--platform` flags expect.
        return f"{self.os}/{self.arch}"


def build_platform_matrix(
    oses: Sequence[str] = DEFAULT_OSES,
    arches: Sequence[str] = DEFAULT_ARCHES,
) -> tuple[Platform, ...]:
    """
    Return every OS/architecture pair in a fixed order.

    Example: oses `("linux",)` and arches `("amd64", "arm64")` give
    `linux/amd64`, `linux/arm64`.
    """
    return tuple(Platform(os=os_name, arch=arch) for os_name in oses for arch in arches)


def matrix_arches(platforms: Sequence[Platform]) -> list[str]:
    """Architecture names in matrix order, without duplicates."""
    arches: list[str] = []
    for platform in platforms:
        if platform.arch not in arches:
            arches.append(platform.arch)
    return arches
