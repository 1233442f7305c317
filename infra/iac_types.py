from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class SubnetConfig:
    name: str
    address_prefix: str


@dataclass(frozen=True)
class VNetConfig:
    name: str
    address_space: List[str]
    subnets: Dict[str, SubnetConfig]  # keys: "aks", "appgw"


@dataclass(frozen=True)
class WafPolicyConfig:
    policy_name: str
    rule_set_type: str  # e.g., "OWASP"
    rule_set_version: str  # e.g., "3.2"
    enabled: bool
    mode: str  # Detection or Prevention


@dataclass(frozen=True)
class NodePoolConfig:
    name: str
    vm_size: str
    node_count: int
    os_sku: str  # Ubuntu or AzureLinux; default pool is always Linux


@dataclass(frozen=True)
class AKSConfig:
    cluster_name: str
    dns_prefix: str
    kubernetes_version: Optional[str]  # None lets AKS pick its default
    default_node_pool: NodePoolConfig
    rbac_enabled: bool
    network_plugin: str  # e.g., "azure"
    network_policy: str  # e.g., "calico"
    identity_type: str  # e.g., "SystemAssigned"
    service_cidr: str
    dns_service_ip: str


@dataclass(frozen=True)
class PublicIpConfig:
    name: str
    allocation_method: str  # Static or Dynamic
    sku: str  # Basic or Standard


@dataclass(frozen=True)
class FrontendPortConfig:
    name: str
    port: int


@dataclass(frozen=True)
class BackendPoolConfig:
    name: str
    ip_addresses: List[str]


@dataclass(frozen=True)
class BackendHttpSettingsConfig:
    name: str
    port: int
    protocol: str  # Http or Https
    cookie_based_affinity: str = "Disabled"
    request_timeout: int = 30


@dataclass(frozen=True)
class HttpListenerConfig:
    name: str
    frontend_port_name: str
    protocol: str


@dataclass(frozen=True)
class PathRuleConfig:
    name: str
    paths: List[str]
    backend_pool_name: str
    backend_http_settings_name: str


@dataclass(frozen=True)
class UrlPathMapConfig:
    name: str
    default_backend_pool_name: str
    default_backend_http_settings_name: str
    path_rules: List[PathRuleConfig] = field(default_factory=list)


@dataclass(frozen=True)
class RequestRoutingRuleConfig:
    name: str
    rule_type: str  # Basic or PathBasedRouting
    http_listener_name: str
    priority: int
    url_path_map_name: Optional[str] = None
    backend_pool_name: Optional[str] = None
    backend_http_settings_name: Optional[str] = None


@dataclass(frozen=True)
class AppGatewayConfig:
    name: str
    sku_name: str  # e.g., "WAF_v2"
    sku_tier: str  # e.g., "WAF_v2"
    capacity: int
    gateway_ip_config_name: str
    frontend_ip_config_name: str
    frontend_ports: List[FrontendPortConfig]
    backend_pools: List[BackendPoolConfig]
    backend_http_settings: List[BackendHttpSettingsConfig]
    http_listeners: List[HttpListenerConfig]
    url_path_maps: List[UrlPathMapConfig]
    request_routing_rules: List[RequestRoutingRuleConfig]


@dataclass(frozen=True)
class AzureInfrastructureConfig:
    resource_group_name: str
    location: str
    vnet_config: VNetConfig
    waf_config: WafPolicyConfig
    aks_config: AKSConfig
    public_ip_config: PublicIpConfig
    app_gateway_config: AppGatewayConfig
