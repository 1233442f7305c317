"""
Preflight validation helpers.

Pure, minimal functions to validate required environment variables and the
shape of the typed stack config, and to format actionable error messages for
users. Anything these checks cannot see (quotas, permissions, unsupported
Kubernetes versions) is reported by Terraform / Azure at apply time.
"""

from __future__ import annotations

import ipaddress
from typing import List, Mapping

from iac_types import AppGatewayConfig, AzureInfrastructureConfig

WAF_MODES = ("Detection", "Prevention")
V2_GATEWAY_SKUS = ("Standard_v2", "WAF_v2")


def missing_env(env: Mapping[str, str], keys: List[str]) -> List[str]:
    """Return the list of keys missing in the provided environment mapping."""
    return [k for k in keys if not env.get(k)]


def format_missing_env_message(missing: List[str]) -> str:
    """Format a friendly, actionable message for missing env vars (PowerShell)."""
    if not missing:
        return ""
    lines: List[str] = []
    lines.append("Preflight check failed: missing environment variables")
    lines.append("")
    lines.append("Missing:")
    for k in missing:
        lines.append(f"  - {k}")
    lines.append("")
    lines.append("How to set them in PowerShell (current session):")
    for k in missing:
        lines.append(f"  $env:{k} = \"<value>\"")
    lines.append("")
    lines.append("Then re-run: python -m scripts.cli infra-deploy --project-dir infra")
    return "\n".join(lines)


def _parse_network(cidr: str, label: str, problems: List[str]):
    try:
        return ipaddress.ip_network(cidr, strict=True)
    except ValueError:
        problems.append(f"{label}: invalid CIDR '{cidr}'")
        return None


def _check_network(cfg: AzureInfrastructureConfig, problems: List[str]) -> None:
    vnet_nets = [
        n
        for n in (
            _parse_network(c, f"vnet {cfg.vnet_config.name}", problems)
            for c in cfg.vnet_config.address_space
        )
        if n is not None
    ]
    if not cfg.vnet_config.address_space:
        problems.append(f"vnet {cfg.vnet_config.name}: address space is empty")

    subnet_nets = []
    for key, subnet in cfg.vnet_config.subnets.items():
        net = _parse_network(subnet.address_prefix, f"subnet {key}", problems)
        if net is None:
            continue
        if vnet_nets and not any(
            net.version == v.version and net.subnet_of(v) for v in vnet_nets
        ):
            problems.append(
                f"subnet {key}: {subnet.address_prefix} is outside the vnet address space"
            )
        for other_key, other in subnet_nets:
            if net.overlaps(other):
                problems.append(f"subnet {key} overlaps subnet {other_key}")
        subnet_nets.append((key, net))

    aks = cfg.aks_config
    service_net = _parse_network(aks.service_cidr, "aks service cidr", problems)
    if service_net is not None:
        if any(service_net.overlaps(v) for v in vnet_nets):
            problems.append(
                f"aks service cidr {aks.service_cidr} overlaps the vnet address space"
            )
        try:
            dns_ip = ipaddress.ip_address(aks.dns_service_ip)
        except ValueError:
            problems.append(f"aks dns service ip: invalid address '{aks.dns_service_ip}'")
        else:
            if dns_ip not in service_net:
                problems.append(
                    f"aks dns service ip {aks.dns_service_ip} is outside {aks.service_cidr}"
                )


def _check_aks(cfg: AzureInfrastructureConfig, problems: List[str]) -> None:
    pool = cfg.aks_config.default_node_pool
    if not isinstance(pool.node_count, int) or pool.node_count < 1:
        problems.append(
            f"aks node pool {pool.name}: count must be a positive integer, got {pool.node_count}"
        )
    if not pool.vm_size.strip():
        problems.append(f"aks node pool {pool.name}: vm size is empty")


def _check_waf(cfg: AzureInfrastructureConfig, problems: List[str]) -> None:
    waf = cfg.waf_config
    if waf.mode not in WAF_MODES:
        problems.append(f"waf policy: mode must be one of {WAF_MODES}, got '{waf.mode}'")
    if not waf.rule_set_type or not waf.rule_set_version:
        problems.append("waf policy: managed rule set type and version are required")


def _check_public_ip(cfg: AzureInfrastructureConfig, problems: List[str]) -> None:
    pip = cfg.public_ip_config
    if pip.sku == "Standard" and pip.allocation_method != "Static":
        problems.append(
            f"public ip {pip.name}: Standard SKU requires Static allocation, got {pip.allocation_method}"
        )
    if cfg.app_gateway_config.sku_name in V2_GATEWAY_SKUS and pip.sku != "Standard":
        problems.append(
            f"public ip {pip.name}: {cfg.app_gateway_config.sku_name} gateways need a Standard SKU public ip"
        )


def check_gateway_references(gw: AppGatewayConfig) -> List[str]:
    """Check that every by-name reference inside the gateway resolves."""
    problems: List[str] = []
    ports = {p.name for p in gw.frontend_ports}
    pools = {p.name for p in gw.backend_pools}
    settings = {s.name for s in gw.backend_http_settings}
    listeners = {listener.name for listener in gw.http_listeners}
    path_maps = {m.name for m in gw.url_path_maps}

    for listener in gw.http_listeners:
        if listener.frontend_port_name not in ports:
            problems.append(
                f"listener {listener.name}: unknown frontend port '{listener.frontend_port_name}'"
            )

    for path_map in gw.url_path_maps:
        if path_map.default_backend_pool_name not in pools:
            problems.append(
                f"url path map {path_map.name}: unknown backend pool '{path_map.default_backend_pool_name}'"
            )
        if path_map.default_backend_http_settings_name not in settings:
            problems.append(
                f"url path map {path_map.name}: unknown http settings '{path_map.default_backend_http_settings_name}'"
            )
        if not path_map.path_rules:
            problems.append(f"url path map {path_map.name}: at least one path rule is required")
        for rule in path_map.path_rules:
            if not rule.paths:
                problems.append(f"path rule {rule.name}: no paths")
            if rule.backend_pool_name not in pools:
                problems.append(
                    f"path rule {rule.name}: unknown backend pool '{rule.backend_pool_name}'"
                )
            if rule.backend_http_settings_name not in settings:
                problems.append(
                    f"path rule {rule.name}: unknown http settings '{rule.backend_http_settings_name}'"
                )

    priorities = set()
    for rule in gw.request_routing_rules:
        if rule.http_listener_name not in listeners:
            problems.append(
                f"routing rule {rule.name}: unknown listener '{rule.http_listener_name}'"
            )
        if rule.rule_type == "PathBasedRouting":
            if rule.url_path_map_name not in path_maps:
                problems.append(
                    f"routing rule {rule.name}: unknown url path map '{rule.url_path_map_name}'"
                )
        elif rule.rule_type == "Basic":
            if rule.backend_pool_name not in pools:
                problems.append(
                    f"routing rule {rule.name}: unknown backend pool '{rule.backend_pool_name}'"
                )
            if rule.backend_http_settings_name not in settings:
                problems.append(
                    f"routing rule {rule.name}: unknown http settings '{rule.backend_http_settings_name}'"
                )
        else:
            problems.append(f"routing rule {rule.name}: unknown rule type '{rule.rule_type}'")
        if rule.priority in priorities:
            problems.append(f"routing rule {rule.name}: duplicate priority {rule.priority}")
        priorities.add(rule.priority)

    if gw.capacity < 1:
        problems.append(f"gateway {gw.name}: capacity must be at least 1")
    return problems


def validate_config(cfg: AzureInfrastructureConfig) -> List[str]:
    """Return every problem found in cfg; an empty list means it looks sane."""
    problems: List[str] = []
    _check_network(cfg, problems)
    _check_aks(cfg, problems)
    _check_waf(cfg, problems)
    _check_public_ip(cfg, problems)
    problems.extend(check_gateway_references(cfg.app_gateway_config))
    return problems


def ensure_valid_config(cfg: AzureInfrastructureConfig) -> None:
    problems = validate_config(cfg)
    if problems:
        raise ValueError(
            "Invalid infrastructure config:\n" + "\n".join(f"  - {p}" for p in problems)
        )
