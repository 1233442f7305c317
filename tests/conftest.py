from __future__ import annotations

from pathlib import Path

import pytest

from iac_types import AzureInfrastructureConfig
from utils.config_loader import _parse_tfvars, build_config

REPO_ROOT = Path(__file__).resolve().parents[1]


def load_vars(name: str) -> AzureInfrastructureConfig:
    content = (REPO_ROOT / "vars" / name).read_text(encoding="utf-8")
    return build_config(_parse_tfvars(content))


@pytest.fixture
def repo_root() -> Path:
    return REPO_ROOT


@pytest.fixture
def dev_config() -> AzureInfrastructureConfig:
    return load_vars("dev.tfvars")


@pytest.fixture
def staging_config() -> AzureInfrastructureConfig:
    return load_vars("staging.tfvars")
