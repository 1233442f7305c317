from __future__ import annotations

import argparse
import json
import sys
import tempfile
from pathlib import Path
from typing import Dict

from .utils import (
    CmdError,
    aks_status,
    app_gateway_backend_health,
    app_gateway_status,
    cdktf,
)


NAMED_OUTPUTS = ("aks_cluster_name", "app_gateway_public_ip")


def _require_project(project_dir: str) -> Path:
    project = Path(project_dir)
    if not project.exists():
        raise CmdError(f"Project directory not found: {project}")
    return project


def _use_infra_modules(repo_root: Path) -> None:
    """Make the CDKTF app modules under infra/ importable, as `python main.py` sees them."""
    infra_dir = repo_root / "infra"
    if not (infra_dir / "iac_types.py").exists():
        raise CmdError(f"CDKTF app directory not found: {infra_dir}")
    if str(infra_dir) not in sys.path:
        sys.path.insert(0, str(infra_dir))


def validate(args: argparse.Namespace) -> int:
    repo_root = Path(args.repo_root).resolve()
    _use_infra_modules(repo_root)

    from utils.config_loader import load_tfvars_config
    from utils.validation import validate_config

    try:
        cfg = load_tfvars_config(repo_root=repo_root, tfvars_file=args.tfvars_file)
    except (FileNotFoundError, KeyError, ValueError) as ex:
        raise CmdError(f"Failed to load config: {ex}") from ex

    problems = validate_config(cfg)
    if problems:
        print(f"Config for {cfg.resource_group_name} has {len(problems)} problem(s):")
        for p in problems:
            print(f"  - {p}")
        return 1
    print(f"Config for {cfg.resource_group_name} ({cfg.location}) is valid.")
    return 0


def infra_plan(args: argparse.Namespace) -> int:
    project = _require_project(args.project_dir)
    print("Synthesizing CDKTF...")
    cdktf(project, ["get"])  # ensure providers
    cdktf(project, ["synth"])  # generate JSON tf
    print("Planning CDKTF...")
    cdktf(project, ["diff"])
    return 0


def infra_deploy(args: argparse.Namespace) -> int:
    project = _require_project(args.project_dir)
    print("Synthesizing CDKTF...")
    cdktf(project, ["get"])  # ensure providers
    cdktf(project, ["synth"])  # generate JSON tf
    print("Deploying CDKTF...")
    cdktf(project, ["deploy", "--auto-approve"])
    print("CDKTF deploy completed.")
    return 0


def infra_destroy(args: argparse.Namespace) -> int:
    project = _require_project(args.project_dir)
    print("Destroying CDKTF-managed infrastructure...")
    cdktf(project, ["destroy", "--auto-approve"])
    print("Destroy completed.")
    return 0


def read_named_outputs(outputs_file: Path) -> Dict[str, str]:
    """Pick the exported values out of a `cdktf output --outputs-file` document.

    The file maps stack name -> output name -> value.
    """
    data = json.loads(outputs_file.read_text(encoding="utf-8") or "{}")
    found: Dict[str, str] = {}
    for stack_outputs in data.values():
        if not isinstance(stack_outputs, dict):
            continue
        for key in NAMED_OUTPUTS:
            if key in stack_outputs:
                found[key] = str(stack_outputs[key])
    return found


def outputs(args: argparse.Namespace) -> int:
    project = _require_project(args.project_dir)
    with tempfile.TemporaryDirectory() as t:
        out_file = Path(t) / "outputs.json"
        cdktf(project, ["output", "--outputs-file", str(out_file)])
        if not out_file.exists():
            raise CmdError("cdktf did not write an outputs file; has the stack been deployed?")
        found = read_named_outputs(out_file)
    for key in NAMED_OUTPUTS:
        print(f"{key}: {found.get(key, '<not available>')}")
    return 0 if len(found) == len(NAMED_OUTPUTS) else 1


def diagnose(args: argparse.Namespace) -> int:
    rg = args.resource_group
    print("=== AKS / Application Gateway Diagnostics ===")
    failures = 0
    # cluster status
    try:
        info = json.loads(aks_status(rg, args.cluster_name))
        print(
            f"AKS: {info['name']} | Power: {info['powerState']} | State: {info['provisioningState']} | K8s: {info['kubernetesVersion']}"
        )
    except (CmdError, ValueError, KeyError) as e:
        failures += 1
        print(f"AKS info error: {e}")
    # gateway status
    try:
        gw = json.loads(app_gateway_status(rg, args.gateway_name))
        print(
            f"App Gateway: {gw['name']} | SKU: {gw['sku']} | Operational: {gw['operationalState']} | State: {gw['provisioningState']}"
        )
    except (CmdError, ValueError, KeyError) as e:
        failures += 1
        print(f"App Gateway info error: {e}")
    # backend health
    try:
        servers = json.loads(app_gateway_backend_health(rg, args.gateway_name) or "[]")
        if not isinstance(servers, list):
            servers = [servers]
        print(f"Backend servers: {len(servers)}")
        for s in servers:
            if not isinstance(s, dict):
                print(f"  unexpected entry: {s!r}")
                continue
            print(f"  {s.get('address')}: {s.get('health')}")
    except (CmdError, ValueError) as e:
        failures += 1
        print(f"Backend health error: {e}")
    return 1 if failures else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aks-appgw", description="AKS + WAF Application Gateway infrastructure CLI"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    val = sub.add_parser("validate", help="Load and validate the tfvars config")
    val.add_argument("--repo-root", default=".")
    val.add_argument("--tfvars-file", help="Relative to --repo-root (default vars/dev.tfvars)")
    val.set_defaults(func=validate)

    plan = sub.add_parser("infra-plan", help="Show the CDKTF diff against deployed state")
    plan.add_argument("--project-dir", default="infra")
    plan.set_defaults(func=infra_plan)

    idep = sub.add_parser("infra-deploy", help="Deploy infrastructure via CDKTF")
    idep.add_argument("--project-dir", default="infra")
    idep.set_defaults(func=infra_deploy)

    ides = sub.add_parser("infra-destroy", help="Destroy infrastructure via CDKTF")
    ides.add_argument("--project-dir", default="infra")
    ides.set_defaults(func=infra_destroy)

    outs = sub.add_parser(
        "outputs", help="Print the cluster name and gateway public IP"
    )
    outs.add_argument("--project-dir", default="infra")
    outs.set_defaults(func=outputs)

    diag = sub.add_parser("diagnose", help="Diagnose cluster and gateway status")
    diag.add_argument("--resource-group", required=True)
    diag.add_argument("--cluster-name", required=True)
    diag.add_argument("--gateway-name", required=True)
    diag.set_defaults(func=diagnose)

    return parser


def main(argv=None) -> None:
    args = build_parser().parse_args(argv)
    try:
        rc = args.func(args)
    except CmdError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(rc)


if __name__ == "__main__":
    main()
