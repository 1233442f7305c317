"""Tests for the tfvars parser and the typed config it produces."""

from __future__ import annotations

from pathlib import Path

import pytest

from utils.config_loader import (
    GW_BACKEND_POOL,
    GW_HTTP_SETTINGS,
    GW_URL_PATH_MAP,
    _parse_tfvars,
    _strip_quotes,
    _to_bool,
    _to_int,
    _to_list,
    build_config,
    load_tfvars_config,
)

MINIMAL_TFVARS = """
env = "test"
location = "uaenorth"
name_prefix = "demo"
vnet_cidr = "10.0.0.0/16"
subnet_aks_cidr = "10.0.1.0/24"
subnet_appgw_cidr = "10.0.2.0/24"
waf_rule_set_version = "3.2"
aks_node_count = 3
aks_vm_size = "Standard_DS2_v2"
appgw_backend_ip_addresses = ["10.0.1.250"]
"""


def test_parse_tfvars_skips_comments_and_blank_lines() -> None:
    content = """
# a comment
env = "dev"   # trailing comment

not a pair
count = 3
"""
    assert _parse_tfvars(content) == {"env": '"dev"', "count": "3"}


def test_strip_quotes_handles_both_quote_styles() -> None:
    assert _strip_quotes('"abc"') == "abc"
    assert _strip_quotes("'abc'") == "abc"
    assert _strip_quotes("abc") == "abc"


def test_scalar_conversions() -> None:
    assert _to_bool("true") is True
    assert _to_bool("0") is False
    assert _to_int("42") == 42
    with pytest.raises(ValueError):
        _to_bool("maybe")
    with pytest.raises(ValueError, match="Invalid int value"):
        _to_int("three")


def test_to_list_parses_single_line_lists() -> None:
    assert _to_list('["10.0.1.4", "10.0.1.5"]') == ["10.0.1.4", "10.0.1.5"]
    assert _to_list('["/api/*",]') == ["/api/*"]
    assert _to_list("[]") == []
    with pytest.raises(ValueError, match="Invalid list value"):
        _to_list('"10.0.1.4"')


def test_build_config_applies_reference_defaults() -> None:
    cfg = build_config(_parse_tfvars(MINIMAL_TFVARS))

    assert cfg.resource_group_name == "demo-test-rg"
    assert cfg.location == "uaenorth"
    assert cfg.vnet_config.name == "demo-test-vnet"
    assert cfg.vnet_config.address_space == ["10.0.0.0/16"]
    assert cfg.vnet_config.subnets["aks"].address_prefix == "10.0.1.0/24"
    assert cfg.vnet_config.subnets["appgw"].address_prefix == "10.0.2.0/24"

    assert cfg.waf_config.rule_set_type == "OWASP"
    assert cfg.waf_config.mode == "Prevention"
    assert cfg.waf_config.policy_name == "demo-test-waf"

    aks = cfg.aks_config
    assert aks.cluster_name == "demo-test-aks"
    assert aks.kubernetes_version is None
    assert aks.default_node_pool.node_count == 3
    assert aks.default_node_pool.os_sku == "Ubuntu"
    assert aks.rbac_enabled is True
    assert (aks.network_plugin, aks.network_policy) == ("azure", "calico")
    assert aks.identity_type == "SystemAssigned"

    assert cfg.public_ip_config.sku == "Standard"
    assert cfg.public_ip_config.allocation_method == "Static"

    gw = cfg.app_gateway_config
    assert (gw.sku_name, gw.sku_tier) == ("WAF_v2", "WAF_v2")
    assert gw.frontend_ports[0].port == 80
    assert gw.backend_pools[0].ip_addresses == ["10.0.1.250"]
    path_map = gw.url_path_maps[0]
    assert path_map.default_backend_pool_name == GW_BACKEND_POOL
    assert path_map.default_backend_http_settings_name == GW_HTTP_SETTINGS
    assert path_map.path_rules[0].paths == ["/*"]
    assert gw.request_routing_rules[0].url_path_map_name == GW_URL_PATH_MAP


def test_build_config_reports_missing_var() -> None:
    vars_map = _parse_tfvars(MINIMAL_TFVARS)
    del vars_map["aks_vm_size"]
    with pytest.raises(KeyError, match="aks_vm_size"):
        build_config(vars_map)


def test_load_tfvars_config_honours_env_override(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "custom.tfvars").write_text(MINIMAL_TFVARS, encoding="utf-8")
    monkeypatch.setenv("TFVARS_FILE", "custom.tfvars")

    cfg = load_tfvars_config(repo_root=tmp_path)

    assert cfg.resource_group_name == "demo-test-rg"


def test_load_tfvars_config_missing_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("TFVARS_FILE", raising=False)
    with pytest.raises(FileNotFoundError, match="dev.tfvars"):
        load_tfvars_config(repo_root=tmp_path)


def test_shipped_environments_load(dev_config, staging_config) -> None:
    assert dev_config.location == "uaenorth"
    assert dev_config.aks_config.default_node_pool.vm_size == "Standard_DS2_v2"
    assert staging_config.waf_config.mode == "Detection"
    assert staging_config.app_gateway_config.url_path_maps[0].path_rules[0].paths == [
        "/api/*",
        "/healthz",
    ]
