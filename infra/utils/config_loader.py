"""
Config loader for tfvars -> typed config used by the CDKTF stack.

Functional, pure helpers that parse a minimal subset of .tfvars syntax
for the variables used by this repo. No external dependencies.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Optional

from iac_types import (
    AKSConfig,
    AppGatewayConfig,
    AzureInfrastructureConfig,
    BackendHttpSettingsConfig,
    BackendPoolConfig,
    FrontendPortConfig,
    HttpListenerConfig,
    NodePoolConfig,
    PathRuleConfig,
    PublicIpConfig,
    RequestRoutingRuleConfig,
    SubnetConfig,
    UrlPathMapConfig,
    VNetConfig,
    WafPolicyConfig,
)

DEFAULT_TFVARS_FILE = "vars/dev.tfvars"

# Child resource names inside the Application Gateway. The gateway wires its
# listeners, pools and path maps together by these names.
GW_IP_CONFIG = "appGwIpConfig"
GW_FRONTEND_IP = "appGwFrontendIP"
GW_FRONTEND_PORT = "appGwFrontendPort"
GW_BACKEND_POOL = "appGwBackendPool"
GW_HTTP_SETTINGS = "appGwBackendHttpSettings"
GW_LISTENER = "appGwHttpListener"
GW_URL_PATH_MAP = "appGwUrlPathMap"
GW_PATH_RULE = "appGwPathRule"
GW_ROUTING_RULE = "appGwRoutingRule"


def _strip_quotes(value: str) -> str:
    if value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    if value.startswith("'") and value.endswith("'"):
        return value[1:-1]
    return value


def _parse_tfvars(content: str) -> Dict[str, str]:
    """Very small tfvars parser for simple key = value pairs.

    Supports strings, integers, booleans and single-line string lists.
    Lines starting with '#' are ignored.
    """
    vars_map: Dict[str, str] = {}
    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, val = line.split("=", 1)
        key = key.strip()
        val = val.strip()
        # Remove potential trailing comments
        if " #" in val:
            val = val.split(" #", 1)[0].strip()
        vars_map[key] = val
    return vars_map


def _to_bool(value: str) -> bool:
    if value.lower() in ("true", "1"):
        return True
    if value.lower() in ("false", "0"):
        return False
    raise ValueError(f"Invalid boolean value: {value}")


def _to_int(value: str) -> int:
    try:
        return int(value)
    except Exception as ex:  # noqa: BLE001 - rethrow with context
        raise ValueError(f"Invalid int value: {value}") from ex


def _to_list(value: str) -> List[str]:
    """Parse a single-line list such as ["10.0.1.4", "10.0.1.5"]."""
    if not (value.startswith("[") and value.endswith("]")):
        raise ValueError(f"Invalid list value: {value}")
    inner = value[1:-1].strip()
    if not inner:
        return []
    items = [_strip_quotes(item.strip()) for item in inner.split(",")]
    # Tolerate a trailing comma
    return [item for item in items if item]


def _required(vars_map: Dict[str, str], key: str) -> str:
    if key not in vars_map:
        raise KeyError(f"Missing required var: {key}")
    return vars_map[key]


def _optional(vars_map: Dict[str, str], key: str, default: str) -> str:
    return vars_map.get(key, default)


def _build_vnet_config(
    name: str, vnet_cidr: str, aks_cidr: str, appgw_cidr: str
) -> VNetConfig:
    subnets = {
        "aks": SubnetConfig(name=f"{name}-aks", address_prefix=aks_cidr),
        "appgw": SubnetConfig(name=f"{name}-appgw", address_prefix=appgw_cidr),
    }
    return VNetConfig(name=name, address_space=[vnet_cidr], subnets=subnets)


def _build_waf_config(vars_map: Dict[str, str], base: str) -> WafPolicyConfig:
    return WafPolicyConfig(
        policy_name=f"{base}-waf",
        rule_set_type=_strip_quotes(_optional(vars_map, "waf_rule_set_type", "OWASP")),
        rule_set_version=_strip_quotes(_required(vars_map, "waf_rule_set_version")),
        enabled=_to_bool(_optional(vars_map, "waf_enabled", "true")),
        mode=_strip_quotes(_optional(vars_map, "waf_mode", '"Prevention"')),
    )


def _build_aks_config(aks_name: str, vars_map: Dict[str, str]) -> AKSConfig:
    version: Optional[str] = _strip_quotes(
        _optional(vars_map, "aks_kubernetes_version", '""')
    )
    return AKSConfig(
        cluster_name=aks_name,
        dns_prefix=f"{aks_name}-dns",
        kubernetes_version=version or None,
        default_node_pool=NodePoolConfig(
            name="default",
            vm_size=_strip_quotes(_required(vars_map, "aks_vm_size")),
            node_count=_to_int(_required(vars_map, "aks_node_count")),
            os_sku=_strip_quotes(_optional(vars_map, "aks_os_sku", '"Ubuntu"')),
        ),
        rbac_enabled=_to_bool(_optional(vars_map, "aks_rbac_enabled", "true")),
        network_plugin=_strip_quotes(
            _optional(vars_map, "aks_network_plugin", '"azure"')
        ),
        network_policy=_strip_quotes(
            _optional(vars_map, "aks_network_policy", '"calico"')
        ),
        identity_type="SystemAssigned",
        service_cidr=_strip_quotes(
            _optional(vars_map, "aks_service_cidr", '"10.96.0.0/16"')
        ),
        dns_service_ip=_strip_quotes(
            _optional(vars_map, "aks_dns_service_ip", '"10.96.0.10"')
        ),
    )


def _build_public_ip_config(vars_map: Dict[str, str], base: str) -> PublicIpConfig:
    return PublicIpConfig(
        name=f"{base}-appgw-pip",
        allocation_method=_strip_quotes(
            _optional(vars_map, "pip_allocation_method", '"Static"')
        ),
        sku=_strip_quotes(_optional(vars_map, "pip_sku", '"Standard"')),
    )


def _build_app_gateway_config(
    vars_map: Dict[str, str], base: str
) -> AppGatewayConfig:
    sku = _strip_quotes(_optional(vars_map, "appgw_sku", '"WAF_v2"'))
    backend_protocol = _strip_quotes(
        _optional(vars_map, "appgw_backend_protocol", '"Http"')
    )
    frontend_protocol = _strip_quotes(
        _optional(vars_map, "appgw_frontend_protocol", '"Http"')
    )
    paths = _to_list(_optional(vars_map, "appgw_path_rule_paths", '["/*"]'))

    # Single listener -> path map -> pool chain, mirroring the reference layout
    return AppGatewayConfig(
        name=f"{base}-appgw",
        sku_name=sku,
        sku_tier=_strip_quotes(_optional(vars_map, "appgw_tier", f'"{sku}"')),
        capacity=_to_int(_optional(vars_map, "appgw_capacity", "2")),
        gateway_ip_config_name=GW_IP_CONFIG,
        frontend_ip_config_name=GW_FRONTEND_IP,
        frontend_ports=[
            FrontendPortConfig(
                name=GW_FRONTEND_PORT,
                port=_to_int(_optional(vars_map, "appgw_frontend_port", "80")),
            )
        ],
        backend_pools=[
            BackendPoolConfig(
                name=GW_BACKEND_POOL,
                ip_addresses=_to_list(
                    _required(vars_map, "appgw_backend_ip_addresses")
                ),
            )
        ],
        backend_http_settings=[
            BackendHttpSettingsConfig(
                name=GW_HTTP_SETTINGS,
                port=_to_int(_optional(vars_map, "appgw_backend_port", "80")),
                protocol=backend_protocol,
                request_timeout=_to_int(
                    _optional(vars_map, "appgw_request_timeout", "30")
                ),
            )
        ],
        http_listeners=[
            HttpListenerConfig(
                name=GW_LISTENER,
                frontend_port_name=GW_FRONTEND_PORT,
                protocol=frontend_protocol,
            )
        ],
        url_path_maps=[
            UrlPathMapConfig(
                name=GW_URL_PATH_MAP,
                default_backend_pool_name=GW_BACKEND_POOL,
                default_backend_http_settings_name=GW_HTTP_SETTINGS,
                path_rules=[
                    PathRuleConfig(
                        name=GW_PATH_RULE,
                        paths=paths,
                        backend_pool_name=GW_BACKEND_POOL,
                        backend_http_settings_name=GW_HTTP_SETTINGS,
                    )
                ],
            )
        ],
        request_routing_rules=[
            RequestRoutingRuleConfig(
                name=GW_ROUTING_RULE,
                rule_type="PathBasedRouting",
                http_listener_name=GW_LISTENER,
                priority=100,
                url_path_map_name=GW_URL_PATH_MAP,
            )
        ],
    )


def resolve_tfvars_path(*, repo_root: Path, tfvars_file: Optional[str] = None) -> Path:
    if not tfvars_file:
        # Use default if env var is missing or empty
        tfvars_file_env = os.getenv("TFVARS_FILE")
        tfvars_file = (
            tfvars_file_env
            if (tfvars_file_env and tfvars_file_env.strip())
            else DEFAULT_TFVARS_FILE
        )
    return (repo_root / tfvars_file).resolve()


def build_config(vars_map: Dict[str, str]) -> AzureInfrastructureConfig:
    """Turn a parsed tfvars map into the typed stack config."""
    env = _strip_quotes(_required(vars_map, "env"))
    location = _strip_quotes(_required(vars_map, "location"))
    prefix = _strip_quotes(_required(vars_map, "name_prefix"))
    base = f"{prefix}-{env}"

    vnet_cfg = _build_vnet_config(
        name=f"{base}-vnet",
        vnet_cidr=_strip_quotes(_required(vars_map, "vnet_cidr")),
        aks_cidr=_strip_quotes(_required(vars_map, "subnet_aks_cidr")),
        appgw_cidr=_strip_quotes(_required(vars_map, "subnet_appgw_cidr")),
    )

    return AzureInfrastructureConfig(
        resource_group_name=f"{base}-rg",
        location=location,
        vnet_config=vnet_cfg,
        waf_config=_build_waf_config(vars_map, base),
        aks_config=_build_aks_config(aks_name=f"{base}-aks", vars_map=vars_map),
        public_ip_config=_build_public_ip_config(vars_map, base),
        app_gateway_config=_build_app_gateway_config(vars_map, base),
    )


def load_tfvars_config(
    *, repo_root: Path, tfvars_file: Optional[str] = None
) -> AzureInfrastructureConfig:
    vars_path = resolve_tfvars_path(repo_root=repo_root, tfvars_file=tfvars_file)
    if not vars_path.exists():
        raise FileNotFoundError(f"tfvars file not found: {vars_path}")

    content = vars_path.read_text(encoding="utf-8")
    return build_config(_parse_tfvars(content))
