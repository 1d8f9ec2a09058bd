"""
Script: tests/test_derived_image.py
What: Tests the derived elastic-agent build preparation.
Doing: Checks the generated Dockerfile text, the written certificate, and cleanup on secret failure.
Why: A wrong COPY path would ship an agent that does not trust the cluster CA.
Goal: Keep the derived recipe predictable and the certificate off disk after the run.
"""

from __future__ import annotations

import unittest
from pathlib import Path
from unittest import mock

from mirror_tools.common import PublishError, SecretRetrievalError
from mirror_tools.config import AgentConfig
from mirror_tools.derived_image import (
    AGENT_IMAGE,
    is_derived_image,
    prepare_derived_build,
    render_recipe,
)
from mirror_tools.temp_artifacts import TempArtifacts


AGENT_CONFIG = AgentConfig(
    secret_name="/elastic/ca-cert",
    cert_file_path="/usr/share/elastic-agent/certs/ca.crt",
)


class RenderRecipeTests(unittest.TestCase):
    def test_recipe_layers_certificate_into_upstream_image(self) -> None:
        recipe = render_recipe(
            upstream_image="elastic/elastic-agent",
            cert_file_path="/usr/share/elastic-agent/certs/ca.crt",
        )
        self.assertEqual(
            recipe,
            "ARG TAG=latest\n"
            "FROM elastic/elastic-agent:${TAG}\n"
            "RUN mkdir -p /usr/share/elastic-agent/certs\n"
            "COPY client-ca.crt /usr/share/elastic-agent/certs/ca.crt\n",
        )

    def test_is_derived_image(self) -> None:
        self.assertTrue(is_derived_image(AGENT_IMAGE))
        self.assertFalse(is_derived_image("elastic/elasticsearch"))


class PrepareDerivedBuildTests(unittest.TestCase):
    def test_writes_certificate_and_recipe_then_cleans_up(self) -> None:
        requested: list[str] = []

        def fetch_secret(name: str) -> str:
            requested.append(name)
            return "CERTDATA"

        with TempArtifacts() as temp_artifacts:
            derived = prepare_derived_build(AGENT_CONFIG, temp_artifacts, fetch_secret=fetch_secret)
            cert_path = derived.context_dir / "client-ca.crt"
            self.assertEqual(cert_path.read_text(encoding="utf-8"), "CERTDATA\n")
            self.assertIn("FROM elastic/elastic-agent:${TAG}", derived.recipe_path.read_text(encoding="utf-8"))
            self.assertEqual(derived.build_args("8.10.0"), {"TAG": "8.10.0"})
            self.assertIn(cert_path, temp_artifacts.paths)
            self.assertIn(derived.recipe_path, temp_artifacts.paths)

        self.assertEqual(requested, ["/elastic/ca-cert"])
        self.assertFalse(cert_path.exists())
        self.assertFalse(derived.recipe_path.exists())
        self.assertFalse(derived.context_dir.exists())

    def test_secret_failure_writes_nothing(self) -> None:
        def fetch_secret(name: str) -> str:
            raise SecretRetrievalError(f"Failed to retrieve {name} from SSM")

        with TempArtifacts() as temp_artifacts:
            with self.assertRaises(SecretRetrievalError):
                prepare_derived_build(AGENT_CONFIG, temp_artifacts, fetch_secret=fetch_secret)
            self.assertEqual(temp_artifacts.paths, ())

    def test_local_ref_does_not_reuse_upstream_tag(self) -> None:
        with TempArtifacts() as temp_artifacts:
            derived = prepare_derived_build(AGENT_CONFIG, temp_artifacts, fetch_secret=lambda _name: "x")
            self.assertNotEqual(derived.local_ref("8.10.0"), "elastic/elastic-agent:8.10.0")

    def test_write_failure_is_publish_error_and_leaves_nothing(self) -> None:
        with TempArtifacts() as temp_artifacts:
            with mock.patch.object(Path, "write_text", side_effect=OSError(28, "No space left on device")):
                with self.assertRaises(PublishError) as ctx:
                    prepare_derived_build(AGENT_CONFIG, temp_artifacts, fetch_secret=lambda _name: "CERT")
            registered = temp_artifacts.paths
        self.assertIn("No space left on device", str(ctx.exception))
        self.assertTrue(registered)
        for path in registered:
            self.assertFalse(path.exists())


if __name__ == "__main__":
    unittest.main()
