"""Entrypoint behaviour: preflight, friendly errors and exit codes."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from cdktf import Testing

import main as entrypoint
from stacks.azure_stack import STACK_ID


@pytest.fixture
def arm_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARM_SUBSCRIPTION_ID", "00000000-0000-0000-0000-000000000000")
    monkeypatch.delenv("TFVARS_FILE", raising=False)


def _exit_code() -> int:
    with pytest.raises(SystemExit) as exc:
        entrypoint.main()
    return exc.value.code


def test_missing_subscription_fails_preflight(monkeypatch, capsys) -> None:
    monkeypatch.delenv("ARM_SUBSCRIPTION_ID", raising=False)
    assert _exit_code() == 2
    err = capsys.readouterr().err
    assert "Preflight check failed" in err
    assert "  - ARM_SUBSCRIPTION_ID" in err


def test_missing_tfvars_file_is_reported(arm_env, tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.setenv("TFVARS_FILE", str(tmp_path / "nope.tfvars"))
    assert _exit_code() == 1
    assert capsys.readouterr().err.startswith("Error: tfvars file not found")


def test_invalid_config_is_reported(arm_env, repo_root: Path, tmp_path: Path, monkeypatch, capsys) -> None:
    content = (repo_root / "vars" / "dev.tfvars").read_text(encoding="utf-8")
    bad = tmp_path / "bad.tfvars"
    bad.write_text(content.replace("aks_node_count         = 3", "aks_node_count         = 0"), encoding="utf-8")
    monkeypatch.setenv("TFVARS_FILE", str(bad))

    assert _exit_code() == 1
    err = capsys.readouterr().err
    assert err.startswith("Error: Invalid infrastructure config:")
    assert "count must be a positive integer" in err


def test_synth_failure_is_reported(arm_env, monkeypatch, capsys) -> None:
    def failing_synth(self) -> None:
        raise RuntimeError("provider bindings missing")

    monkeypatch.setattr(entrypoint.App, "synth", failing_synth)

    assert _exit_code() == 1
    err = capsys.readouterr().err
    assert "Synthesis failed." in err
    assert "provider bindings missing" in err


def test_synthesizes_stack_with_config_output(arm_env, monkeypatch) -> None:
    synthesized = []

    def capture_synth(self) -> None:
        synthesized.append(Testing.synth(self.node.try_find_child(STACK_ID)))

    # Keep synth output in memory instead of cdktf.out/
    monkeypatch.setattr(entrypoint.App, "synth", capture_synth)

    entrypoint.main()

    assert len(synthesized) == 1
    outputs = json.loads(synthesized[0])["output"]
    assert {"aks_cluster_name", "app_gateway_public_ip", "config_json"} <= set(outputs)
    config = json.loads(outputs["config_json"]["value"])
    assert config["resource_group_name"] == "s6-dev-rg"
    assert config["waf_config"]["policy_name"] == "s6-dev-waf"
