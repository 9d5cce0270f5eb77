#!/usr/bin/env python3
"""
Resolve a poll environment from a snapshot file.

Reads a JSON snapshot of a server and job (the same document the
``/poll-environment`` endpoint accepts) and prints the resolved variables.
"""

import argparse
import json
import sys
from pathlib import Path

# Add the src directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pydantic import ValidationError

from scm_poll_env.config import get_settings
from scm_poll_env.exceptions import PollEnvironmentError
from scm_poll_env.model.memory import StringLogSink
from scm_poll_env.resolver import PollEnvironmentResolver
from scm_poll_env.snapshot import PollRequest


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("snapshot", type=Path, help="Path to the JSON snapshot")
    reuse = parser.add_mutually_exclusive_group()
    reuse.add_argument(
        "--reuse-last-build",
        dest="reuse",
        action="store_true",
        default=None,
        help="Start from the last build's node environment",
    )
    reuse.add_argument(
        "--no-reuse-last-build",
        dest="reuse",
        action="store_false",
        help="Start from the job's generic environment",
    )
    parser.add_argument(
        "--json", action="store_true", help="Print the environment as JSON"
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()

    try:
        request = PollRequest.model_validate_json(args.snapshot.read_text())
    except (OSError, ValidationError) as e:
        print(f"❌ Cannot read snapshot: {e}", file=sys.stderr)
        return 1

    reuse = args.reuse
    if reuse is None:
        reuse = request.reuse_last_build_environment
    if reuse is None:
        reuse = get_settings().reuse_last_build_environment

    try:
        model = request.build()
        env = PollEnvironmentResolver(model.server).resolve(
            model.job,
            model.workspace,
            StringLogSink(),
            reuse_last_build_environment=reuse,
        )
    except PollEnvironmentError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(env.to_dict(), indent=2))
    else:
        for key, value in env.items():
            print(f"{key}={value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
