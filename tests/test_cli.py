"""
Script: tests/test_cli.py
What: Tests for the shared `mirror_tools` command dispatcher.
Doing: Checks command-map entries, parser behavior, and error-to-exit-code handling.
Why: Makes sure `setup`, `build`, and `push` still point to the right modules.
Goal: Protect the main command entry surface used by pipeline steps.
"""

from __future__ import annotations

import contextlib
import io
import unittest
from unittest import mock

from mirror_tools.cli import build_parser, command_map, main, run_command
from mirror_tools.common import ManifestError


class CliTests(unittest.TestCase):
    def test_command_map_contains_expected_entries(self) -> None:
        self.assertEqual(set(command_map().keys()), {"setup", "build", "push"})

    def test_parser_accepts_known_command(self) -> None:
        parser = build_parser({"demo-command": lambda: None})
        args = parser.parse_args(["demo-command"])
        self.assertEqual(args.command, "demo-command")

    def test_unknown_or_missing_command_is_usage_error(self) -> None:
        for argv in [[], ["deploy"]]:
            with contextlib.redirect_stderr(io.StringIO()):
                with self.assertRaises(SystemExit) as ctx:
                    main(argv)
            self.assertNotEqual(ctx.exception.code, 0)

    def test_run_command_calls_target_function(self) -> None:
        called = {"value": False}

        def _target() -> None:
            called["value"] = True

        run_command("demo", {"demo": _target})
        self.assertTrue(called["value"])

    def test_tool_error_exits_non_zero_and_names_stage(self) -> None:
        def _failing() -> None:
            raise ManifestError("tags missing")

        stderr = io.StringIO()
        with mock.patch("mirror_tools.cli.command_map", return_value={"push": _failing}):
            with contextlib.redirect_stderr(stderr):
                with self.assertRaises(SystemExit) as ctx:
                    main(["push"])
        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("manifest failed: tags missing", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
