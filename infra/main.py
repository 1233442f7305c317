"""
CDKTF entrypoint for the AKS + WAF Application Gateway infrastructure.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

from cdktf import App, TerraformOutput

from stacks.azure_stack import STACK_ID, AksGatewayStack, synth_config_json
from utils.config_loader import load_tfvars_config
from utils.validation import missing_env, format_missing_env_message

REQUIRED_ENV = ["ARM_SUBSCRIPTION_ID"]


def main() -> None:
    repo_root = Path(__file__).resolve().parents[1]

    # Preflight: ensure required env vars are present before synthesizing
    missing = missing_env(env=os.environ, keys=REQUIRED_ENV)
    if missing:
        msg = format_missing_env_message(missing)
        print(msg, file=sys.stderr)
        sys.exit(2)

    try:
        cfg = load_tfvars_config(repo_root=repo_root)
    except (FileNotFoundError, KeyError, ValueError) as ex:
        print(f"Error: {ex}", file=sys.stderr)
        sys.exit(1)

    app = App()
    try:
        AksGatewayStack(app, STACK_ID, cfg)
    except ValueError as ex:
        # Surface a concise, friendly message instead of a long traceback
        print(f"Error: {ex}", file=sys.stderr)
        sys.exit(1)

    # Surface a copy of the config used for traceability
    TerraformOutput(
        app.node.try_find_child(STACK_ID),
        "config_json",
        value=json.dumps(synth_config_json(cfg)),
    )

    try:
        app.synth()
    except Exception as ex:  # noqa: BLE001 - present actionable error
        print("Synthesis failed.", file=sys.stderr)
        print(str(ex), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
