"""
Application Gateway module.

Creates the gateway public IP and a WAF-enabled Application Gateway. The
gateway is bound to the created subnet, public IP and WAF policy by resource
id; its own child blocks (ports, pools, listeners, path maps) reference each
other by name and the provider resolves them to ids.
"""

from __future__ import annotations

from constructs import Construct

from cdktf_cdktf_provider_azurerm.public_ip import PublicIp
from cdktf_cdktf_provider_azurerm.application_gateway import (
    ApplicationGateway,
    ApplicationGatewayBackendAddressPool,
    ApplicationGatewayBackendHttpSettings,
    ApplicationGatewayFrontendIpConfiguration,
    ApplicationGatewayFrontendPort,
    ApplicationGatewayGatewayIpConfiguration,
    ApplicationGatewayHttpListener,
    ApplicationGatewayRequestRoutingRule,
    ApplicationGatewaySku,
    ApplicationGatewayUrlPathMap,
    ApplicationGatewayUrlPathMapPathRule,
)

from iac_types import AzureInfrastructureConfig


def provision_public_ip(
    *, scope: Construct, cfg: AzureInfrastructureConfig, rg_name: str
) -> PublicIp:
    """Provision the gateway frontend public IP and return it."""
    return PublicIp(
        scope,
        "appGwPip",
        name=cfg.public_ip_config.name,
        location=cfg.location,
        resource_group_name=rg_name,
        allocation_method=cfg.public_ip_config.allocation_method,
        sku=cfg.public_ip_config.sku,
    )


def provision_app_gateway(
    *,
    scope: Construct,
    cfg: AzureInfrastructureConfig,
    rg_name: str,
    subnet_appgw,
    public_ip: PublicIp,
    waf_policy,
) -> ApplicationGateway:
    """Provision the Application Gateway and return it."""
    gw = cfg.app_gateway_config

    return ApplicationGateway(
        scope,
        "appGw",
        name=gw.name,
        location=cfg.location,
        resource_group_name=rg_name,
        sku=ApplicationGatewaySku(
            name=gw.sku_name, tier=gw.sku_tier, capacity=gw.capacity
        ),
        firewall_policy_id=waf_policy.id,
        gateway_ip_configuration=[
            ApplicationGatewayGatewayIpConfiguration(
                name=gw.gateway_ip_config_name, subnet_id=subnet_appgw.id
            )
        ],
        frontend_ip_configuration=[
            ApplicationGatewayFrontendIpConfiguration(
                name=gw.frontend_ip_config_name, public_ip_address_id=public_ip.id
            )
        ],
        frontend_port=[
            ApplicationGatewayFrontendPort(name=p.name, port=p.port)
            for p in gw.frontend_ports
        ],
        backend_address_pool=[
            ApplicationGatewayBackendAddressPool(
                name=p.name, ip_addresses=list(p.ip_addresses)
            )
            for p in gw.backend_pools
        ],
        backend_http_settings=[
            ApplicationGatewayBackendHttpSettings(
                name=s.name,
                port=s.port,
                protocol=s.protocol,
                cookie_based_affinity=s.cookie_based_affinity,
                request_timeout=s.request_timeout,
            )
            for s in gw.backend_http_settings
        ],
        http_listener=[
            ApplicationGatewayHttpListener(
                name=listener.name,
                frontend_ip_configuration_name=gw.frontend_ip_config_name,
                frontend_port_name=listener.frontend_port_name,
                protocol=listener.protocol,
            )
            for listener in gw.http_listeners
        ],
        url_path_map=[
            ApplicationGatewayUrlPathMap(
                name=m.name,
                default_backend_address_pool_name=m.default_backend_pool_name,
                default_backend_http_settings_name=m.default_backend_http_settings_name,
                path_rule=[
                    ApplicationGatewayUrlPathMapPathRule(
                        name=r.name,
                        paths=list(r.paths),
                        backend_address_pool_name=r.backend_pool_name,
                        backend_http_settings_name=r.backend_http_settings_name,
                    )
                    for r in m.path_rules
                ],
            )
            for m in gw.url_path_maps
        ],
        request_routing_rule=[
            ApplicationGatewayRequestRoutingRule(
                name=r.name,
                rule_type=r.rule_type,
                http_listener_name=r.http_listener_name,
                priority=r.priority,
                url_path_map_name=r.url_path_map_name,
                backend_address_pool_name=r.backend_pool_name,
                backend_http_settings_name=r.backend_http_settings_name,
            )
            for r in gw.request_routing_rules
        ],
    )
