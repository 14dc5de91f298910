# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Entry point for the typed_storage runner.

Usage:
    python -m typed_storage.runner < input.json > output.json

The runner reads JSON input from stdin, applies the storage operations,
and writes JSON output to stdout.  Diagnostics go to stderr.

Exit codes:
    0: Every operation succeeded
    1: At least one operation fell back, or the run failed (details in JSON output)
"""

from __future__ import annotations

import logging
import sys

from typed_storage.config import load_settings

from .executor import Executor
from .schema import RunnerInput, RunnerOutput


def main() -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        # Read input from stdin
        input_json = sys.stdin.read()

        # Validate input against schema
        input_data = RunnerInput.model_validate_json(input_json)

        settings = load_settings(input_data.config_path, input_data.settings)
        logging.basicConfig(
            stream=sys.stderr,
            level=settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        output = Executor().execute(input_data)

        # Write output to stdout
        print(output.model_dump_json())

        return 0 if output.success else 1

    except Exception as e:
        # Ensure we always output valid JSON, even on unexpected errors
        error_output = RunnerOutput(
            success=False,
            error=str(e),
            error_type=type(e).__name__,
        )
        print(error_output.model_dump_json())
        return 1


if __name__ == "__main__":
    sys.exit(main())
