"""
Azure stack for the AKS cluster fronted by a WAF Application Gateway.

Resources are declared once in dependency order; Terraform derives the apply
order from the references between them.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

from constructs import Construct
from cdktf import TerraformOutput, TerraformStack

from cdktf_cdktf_provider_azurerm.provider import (
    AzurermProvider,
    AzurermProviderFeatures,
)

from iac_types import AzureInfrastructureConfig
from modules.network.network import provision_network
from modules.waf.waf import provision_waf_policy
from modules.aks.aks import provision_aks
from modules.appgw.appgw import provision_app_gateway, provision_public_ip
from utils.validation import ensure_valid_config

STACK_ID = "aks-appgw"


class AksGatewayStack(TerraformStack):
    """TerraformStack that wires Azure resources based on typed config."""

    def __init__(
        self, scope: Construct, id: str, config: AzureInfrastructureConfig
    ) -> None:
        super().__init__(scope, id)

        # Fail at synth on shape errors instead of at apply
        ensure_valid_config(config)

        # Provider
        AzurermProvider(self, "azurerm", features=[AzurermProviderFeatures()])

        # Networking
        rg, _vnet, subnet_aks, subnet_appgw = provision_network(scope=self, cfg=config)

        # WAF policy
        waf = provision_waf_policy(scope=self, cfg=config, rg_name=rg.name)
        TerraformOutput(self, "waf_policy_id", value=waf.id)

        # AKS
        aks = provision_aks(
            scope=self, cfg=config, rg_name=rg.name, subnet_aks=subnet_aks
        )
        TerraformOutput(self, "aks_cluster_name", value=aks.name)

        # Application Gateway
        pip = provision_public_ip(scope=self, cfg=config, rg_name=rg.name)
        appgw = provision_app_gateway(
            scope=self,
            cfg=config,
            rg_name=rg.name,
            subnet_appgw=subnet_appgw,
            public_ip=pip,
            waf_policy=waf,
        )
        TerraformOutput(self, "app_gateway_name", value=appgw.name)
        TerraformOutput(self, "app_gateway_public_ip", value=pip.ip_address)


def synth_config_json(config: AzureInfrastructureConfig) -> Dict[str, Any]:
    """Convert dataclasses to plain dict for diagnostics or outputs."""
    return asdict(config)
