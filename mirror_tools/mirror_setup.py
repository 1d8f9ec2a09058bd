"""
Script: mirror_tools/mirror_setup.py
What: Prepares the runner for a mirror run.
Doing: Validates required env values, parses the image spec, logs into the registry, and selects a buildx builder.
Why: Config and login problems should fail before any image is pulled or pushed.
Goal: Leave docker logged in and a multi-platform builder ready for `build`.
"""

from __future__ import annotations

from mirror_tools.common import BuilderError, CommandError
from mirror_tools.config import load_config
from mirror_tools.image_spec import parse_image_spec
from mirror_tools.registry_auth import registry_login


def main() -> None:
    print("Checking environment variables...")
    config = load_config()
    specs = parse_image_spec(config.images_tags)
    print(f"Image spec lists {len(specs)} image(s)")

    engine = config.engine()
    registry_login(engine, registry=config.registry, region=config.region)

    print("Initializing Docker Buildx...")
    try:
        engine.ensure_builder(config.builder_name)
    except CommandError as exc:
        raise BuilderError(f"Failed to prepare buildx builder {config.builder_name}\n{exc}") from exc


if __name__ == "__main__":
    main()
