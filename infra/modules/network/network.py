"""
Network module.

Creates RG, VNet and the two subnets (aks/appgw).
"""

from __future__ import annotations

from typing import Tuple

from constructs import Construct

from cdktf import TerraformOutput
from cdktf_cdktf_provider_azurerm.resource_group import ResourceGroup
from cdktf_cdktf_provider_azurerm.virtual_network import VirtualNetwork
from cdktf_cdktf_provider_azurerm.subnet import Subnet

from iac_types import AzureInfrastructureConfig


def provision_network(
    *, scope: Construct, cfg: AzureInfrastructureConfig
) -> Tuple[ResourceGroup, VirtualNetwork, Subnet, Subnet]:
    """Provision networking and return (rg, vnet, subnet_aks, subnet_appgw)."""
    rg = ResourceGroup(scope, "rg", name=cfg.resource_group_name, location=cfg.location)

    vnet = VirtualNetwork(
        scope,
        "vnet",
        name=cfg.vnet_config.name,
        location=cfg.location,
        resource_group_name=rg.name,
        address_space=cfg.vnet_config.address_space,
    )

    subnet_aks = Subnet(
        scope,
        "subnetAks",
        name=cfg.vnet_config.subnets["aks"].name,
        resource_group_name=rg.name,
        virtual_network_name=vnet.name,
        address_prefixes=[cfg.vnet_config.subnets["aks"].address_prefix],
        depends_on=[vnet],
    )

    # Application Gateway v2 needs a subnet of its own
    subnet_appgw = Subnet(
        scope,
        "subnetAppGw",
        name=cfg.vnet_config.subnets["appgw"].name,
        resource_group_name=rg.name,
        virtual_network_name=vnet.name,
        address_prefixes=[cfg.vnet_config.subnets["appgw"].address_prefix],
        depends_on=[vnet],
    )

    TerraformOutput(scope, "resource_group", value=rg.name)
    TerraformOutput(scope, "virtual_network", value=vnet.name)

    return rg, vnet, subnet_aks, subnet_appgw
