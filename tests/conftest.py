"""Shared fixtures, including an in-memory stand-in for the lxc client."""

import shlex
from pathlib import Path
from typing import Dict, List, Optional
from unittest.mock import patch

import pytest
import pytest_asyncio

from lxdkitchen.exceptions import CommandError
from lxdkitchen.models.config import KitchenConfig, WaitConfig
from lxdkitchen.models.instance import InstanceDescriptor, ProvisioningOptions
from lxdkitchen.providers.registry import ProviderRegistry
from lxdkitchen.utils.commands import CommandResult


DEFAULT_FILES = {
    "/etc/hosts": "127.0.0.1\tlocalhost\n",
    "/etc/resolvconf/resolv.conf.d/base": "",
    "/etc/network/interfaces.d/eth0.cfg": "auto eth0\niface eth0 inet dhcp\n",
    "/root/.ssh": "",
}


class FakeHypervisor:
    """Answers lxc and lxd-images command lines from in-memory state."""
    
    def __init__(self, address: str = "10.0.3.42"):
        self.address = address
        self.address_delay = 0
        self.images: set = set()
        self.containers: Dict[str, dict] = {}
        self.calls: List[List[str]] = []
        self.push_failures = 0
        
    def add_container(self, name: str, running: bool = False):
        self.containers[name] = {
            "running": running,
            "files": dict(DEFAULT_FILES),
            "raw": {},
            "info_calls": 0,
        }
        
    def verbs(self, name: Optional[str] = None) -> List[str]:
        """Top-level lxc verbs issued, optionally for one container."""
        verbs = []
        for cmd in self.calls:
            if cmd[0] != "lxc":
                continue
            if name is None or name in cmd[2:4]:
                verbs.append(cmd[1])
        return verbs
        
    @property
    def imports(self) -> List[List[str]]:
        return [cmd for cmd in self.calls if cmd[0] == "lxd-images"]
        
    def execs(self, name: str) -> List[List[str]]:
        return [cmd[4:] for cmd in self.calls if cmd[:3] == ["lxc", "exec", name]]
        
    async def run(self, cmd, check=True, capture_output=True, timeout=None, input=None, **kwargs):
        self.calls.append(list(cmd))
        result = self._dispatch(list(cmd), input)
        if check and result.returncode != 0:
            raise CommandError(list(cmd), result.returncode, result.stdout, result.stderr)
        return result
        
    def _dispatch(self, cmd: List[str], input: Optional[str]) -> CommandResult:
        if cmd[0] == "lxd-images":
            self.images.add(cmd[cmd.index("--alias") + 1])
            return CommandResult(0)
            
        verb, args = cmd[1], cmd[2:]
        
        if verb == "info":
            container = self.containers.get(args[0])
            if container is None:
                return CommandResult(1, "", "error: not found")
            return CommandResult(0, self._info(args[0], container))
            
        if verb == "image":
            return CommandResult(0 if args[1] in self.images else 1)
            
        if verb == "init":
            image, name = args[0], args[1]
            if image not in self.images or name in self.containers:
                return CommandResult(1, "", "error: cannot init")
            self.add_container(name)
            return CommandResult(0)
            
        if verb == "config":
            self.containers[args[1]]["raw"][args[2]] = input
            return CommandResult(0)
            
        if verb == "file":
            local, target = args[1], args[2]
            name, _, path = target.partition("/")
            if self.push_failures:
                self.push_failures -= 1
                return CommandResult(1, "", "error: not ready")
            self.containers[name]["files"]["/" + path] = Path(local).read_text()
            return CommandResult(0)
            
        container = self.containers.get(args[0])
        if container is None:
            return CommandResult(1, "", "error: not found")
            
        if verb == "start":
            container["running"] = True
            container["info_calls"] = 0
            return CommandResult(0)
            
        if verb == "stop":
            container["running"] = False
            return CommandResult(0)
            
        if verb == "delete":
            if container["running"]:
                return CommandResult(1, "", "error: container is running")
            del self.containers[args[0]]
            return CommandResult(0)
            
        if verb == "exec":
            if not container["running"]:
                return CommandResult(1, "", "error: container is not running")
            return self._exec(container, args[2:], input)
            
        raise AssertionError(f"Unexpected command: {cmd}")
        
    def _exec(self, container: dict, argv: List[str], input: Optional[str]) -> CommandResult:
        files = container["files"]
        if argv[0] == "ls":
            return CommandResult(0 if argv[1] in files else 2)
        if argv[0] == "cat":
            if argv[1] not in files:
                return CommandResult(1, "", "No such file or directory")
            return CommandResult(0, files[argv[1]])
        if argv[:2] == ["sh", "-c"]:
            path = shlex.split(argv[2])[-1]
            files[path] = input
            return CommandResult(0)
        if argv[0] == "sed":
            path = argv[-1]
            if path not in files:
                return CommandResult(2, "", f"sed: can't read {path}: No such file or directory")
            files[path] = files[path].replace("dhcp", "manual")
            return CommandResult(0)
        if argv[0] == "resolvconf":
            return CommandResult(0)
        raise AssertionError(f"Unexpected exec: {argv}")
        
    def _info(self, name: str, container: dict) -> str:
        status = "Running" if container["running"] else "Stopped"
        lines = [f"Name: {name}", f"Status: {status}"]
        if container["running"]:
            container["info_calls"] += 1
            lines.append("Ips:")
            if container["info_calls"] > self.address_delay:
                lines.append(f"  eth0:\tIPV4\t{self.address}\tveth4RX2KB")
            lines.append("  lo:\tIPV4\t127.0.0.1")
        return "\n".join(lines) + "\n"


@pytest.fixture
def hypervisor():
    """Fake hypervisor wired in place of process execution."""
    fake = FakeHypervisor()
    with patch("lxdkitchen.utils.lxc.run_command", new=fake.run):
        yield fake


@pytest.fixture
def kitchen_config():
    """Configuration with a fast convergence loop."""
    return KitchenConfig(wait=WaitConfig(interval=0, max_attempts=50))


@pytest_asyncio.fixture
async def registry(hypervisor, kitchen_config):
    """Provider registry backed by the fake hypervisor."""
    registry = ProviderRegistry()
    await registry.initialize(kitchen_config)
    return registry


@pytest.fixture
def public_key(tmp_path):
    """A public key file."""
    path = tmp_path / "id_rsa.pub"
    path.write_text("ssh-rsa AAAAB3NzaC1yc2E test@example\n")
    return path


@pytest.fixture
def options(public_key):
    """Provisioning options for an ubuntu-1404 image."""
    return ProvisioningOptions(public_key_path=str(public_key), image_name="ubuntu-1404")


@pytest.fixture
def descriptor():
    """Descriptor of a plain DHCP instance."""
    return InstanceDescriptor(name="t1", platform_name="ubuntu-1404")
