"""
Script: mirror_tools package
What: Holds Python helpers that mirror upstream container images into a private registry.
Doing: Groups CLI entrypoints, registry/engine adapters, and shared utility code in one importable package.
Why: Keeps the multi-arch publish logic readable and testable instead of spreading it across shell scripts.
Goal: Provide a clear, maintainable home for per-architecture publish and manifest assembly logic.
"""
