"""
lxd-kitchen - disposable LXD test containers.

Provisions and tears down containers through the lxc command-line client,
leaving them running, network configured and reachable over SSH.
"""

__version__ = "0.3.0"

# Re-export key components for easier access
from lxdkitchen.driver.lxd_cli import LxdCliDriver
from lxdkitchen.models.instance import InstanceDescriptor, ProvisioningOptions, RunState

__all__ = [
    "LxdCliDriver",
    "InstanceDescriptor",
    "ProvisioningOptions",
    "RunState",
]
