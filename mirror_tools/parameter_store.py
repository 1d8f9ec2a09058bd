"""
Script: mirror_tools/parameter_store.py
What: Reads decrypted values from AWS SSM Parameter Store.
Doing: Runs `aws ssm get-parameter --with-decryption` and returns the plain value.
Why: The derived agent image needs a CA certificate that is not stored in this repository.
Goal: Return the value or fail the run with a `SecretRetrievalError`, never a partial result.
"""

from __future__ import annotations

from mirror_tools.common import (
    DEFAULT_COMMAND_TIMEOUT,
    CommandError,
    SecretRetrievalError,
    run_cmd,
)


def fetch_parameter(
    name: str,
    *,
    profile: str = "",
    timeout: float = DEFAULT_COMMAND_TIMEOUT,
) -> str:
    command = ["aws"]
    if profile:
        command.append(f"--profile={profile}")
    command.extend(
        [
            "ssm",
            "get-parameter",
            "--name",
            name,
            "--with-decryption",
            "--query",
            "Parameter.Value",
            "--output",
            "text",
        ]
    )
    try:
        output = run_cmd(command, timeout=timeout)
    except CommandError as exc:
        # Do not echo the command output: it may include part of the secret.
        raise SecretRetrievalError(f"Failed to retrieve {name} from SSM") from exc

    # `--output text` adds one trailing newline; keep everything else as-is.
    value = output[:-1] if output.endswith("\n") else output
    if not value.strip():
        raise SecretRetrievalError(f"SSM parameter {name} is empty")
    return value
