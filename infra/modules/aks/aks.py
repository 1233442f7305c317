"""
AKS module.

Creates the AKS cluster with a single Linux system pool placed in the AKS
subnet. The function is pure with respect to inputs and returns the created
cluster.
"""

from __future__ import annotations

from constructs import Construct

from cdktf_cdktf_provider_azurerm.kubernetes_cluster import KubernetesCluster

from iac_types import AzureInfrastructureConfig


def provision_aks(
    *, scope: Construct, cfg: AzureInfrastructureConfig, rg_name: str, subnet_aks
) -> KubernetesCluster:
    """Provision AKS using settings from cfg and return the cluster."""
    aks_cfg = cfg.aks_config
    pool = aks_cfg.default_node_pool

    return KubernetesCluster(
        scope,
        "aks",
        name=aks_cfg.cluster_name,
        location=cfg.location,
        resource_group_name=rg_name,
        dns_prefix=aks_cfg.dns_prefix,
        kubernetes_version=aks_cfg.kubernetes_version,
        default_node_pool={
            "name": pool.name,
            "vm_size": pool.vm_size,
            "node_count": pool.node_count,
            "os_sku": pool.os_sku,
            "vnet_subnet_id": subnet_aks.id,
            "type": "VirtualMachineScaleSets",
        },
        identity={"type": aks_cfg.identity_type},
        network_profile={
            "network_plugin": aks_cfg.network_plugin,
            "network_policy": aks_cfg.network_policy,
            "load_balancer_sku": "standard",
            "service_cidr": aks_cfg.service_cidr,
            "dns_service_ip": aks_cfg.dns_service_ip,
        },
        role_based_access_control_enabled=aks_cfg.rbac_enabled,
    )
