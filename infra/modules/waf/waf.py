"""
WAF module.

Creates the Web Application Firewall policy attached to the Application Gateway.
"""

from __future__ import annotations

from constructs import Construct

from cdktf_cdktf_provider_azurerm.web_application_firewall_policy import (
    WebApplicationFirewallPolicy,
    WebApplicationFirewallPolicyManagedRules,
    WebApplicationFirewallPolicyManagedRulesManagedRuleSet,
    WebApplicationFirewallPolicyPolicySettings,
)

from iac_types import AzureInfrastructureConfig


def provision_waf_policy(
    *, scope: Construct, cfg: AzureInfrastructureConfig, rg_name: str
) -> WebApplicationFirewallPolicy:
    """Provision the WAF policy with a single managed rule set and return it."""
    waf = cfg.waf_config
    return WebApplicationFirewallPolicy(
        scope,
        "wafPolicy",
        name=waf.policy_name,
        location=cfg.location,
        resource_group_name=rg_name,
        managed_rules=WebApplicationFirewallPolicyManagedRules(
            managed_rule_set=[
                WebApplicationFirewallPolicyManagedRulesManagedRuleSet(
                    type=waf.rule_set_type,
                    version=waf.rule_set_version,
                )
            ],
        ),
        policy_settings=WebApplicationFirewallPolicyPolicySettings(
            enabled=waf.enabled,
            mode=waf.mode,
        ),
    )
