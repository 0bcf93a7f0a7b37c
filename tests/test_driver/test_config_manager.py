"""Tests for project file loading."""

import pytest

from lxdkitchen.driver.config import ConfigManager, instance_name
from lxdkitchen.exceptions import ConfigurationError


PROJECT = """
driver:
  ip_gateway: 10.0.3.1
  dns_servers: [8.8.8.8]
  domain_name: example.com
lxc:
  interface: eth0
platforms:
  - name: ubuntu-14.04
  - name: ubuntu-16.04
    driver:
      image_name: xenial-base
      domain_name: lab.example.com
suites:
  - name: default
  - name: web_server
    driver:
      ipv4: 10.0.3.99/24
      domain_name: web.example.com
"""


def write_project(tmp_path, text=PROJECT):
    path = tmp_path / ".kitchen.yml"
    path.write_text(text)
    return path


@pytest.mark.parametrize("suite,platform,expected", [
    ("default", "ubuntu-14.04", "default-ubuntu-1404"),
    ("web_server", "centos/7.2", "web-server-centos-72"),
    ("a,b", "debian-8", "a-b-debian-8"),
])
def test_instance_name(suite, platform, expected):
    """Test instance naming rules."""
    assert instance_name(suite, platform) == expected


@pytest.mark.asyncio
class TestConfigManager:
    """Test ConfigManager."""
    
    async def test_expands_suites_and_platforms(self, tmp_path):
        """Test that every suite is combined with every platform."""
        manager = ConfigManager(write_project(tmp_path))
        await manager.load()
        
        assert manager.list_instances() == [
            "default-ubuntu-1404",
            "default-ubuntu-1604",
            "web-server-ubuntu-1404",
            "web-server-ubuntu-1604",
        ]
        instance = manager.get_instance("web-server-ubuntu-1604")
        assert instance.suite == "web_server"
        assert instance.platform == "ubuntu-16.04"
        
    async def test_driver_merge_order(self, tmp_path):
        """Test that suite settings win over platform and top-level ones."""
        manager = ConfigManager(write_project(tmp_path))
        await manager.load()
        
        plain = manager.get_instance("default-ubuntu-1404").descriptor()
        assert plain.domain_name == "example.com"
        assert plain.ip_gateway == "10.0.3.1"
        assert plain.ipv4 is None
        
        platform = manager.get_instance("default-ubuntu-1604").descriptor()
        assert platform.domain_name == "lab.example.com"
        
        suite = manager.get_instance("web-server-ubuntu-1604").descriptor()
        assert suite.domain_name == "web.example.com"
        assert suite.ipv4 == "10.0.3.99/24"
        assert suite.dns_servers == ["8.8.8.8"]
        assert suite.name == "web-server-ubuntu-1604"
        
    async def test_options_defaults(self, tmp_path, public_key):
        """Test that the image alias defaults to the platform name."""
        text = PROJECT.replace(
            "driver:\n  ip_gateway", f"driver:\n  public_key_path: {public_key}\n  ip_gateway", 1
        )
        manager = ConfigManager(write_project(tmp_path, text))
        await manager.load()
        
        options = manager.get_instance("default-ubuntu-1404").options()
        assert options.image_name == "ubuntu-14.04"
        assert options.public_key_path == str(public_key)
        assert options.stop_instead_of_destroy is False
        
        assert manager.get_instance("default-ubuntu-1604").options().image_name == "xenial-base"
        
    async def test_options_missing_key(self, tmp_path):
        """Test that a configured but missing key fails when options are built."""
        text = "driver:\n  public_key_path: /nonexistent/id_rsa.pub\nplatforms:\n  - name: ubuntu-14.04\n"
        manager = ConfigManager(write_project(tmp_path, text))
        await manager.load()
        
        with pytest.raises(ConfigurationError):
            manager.get_instance("default-ubuntu-1404").options()
            
        options = manager.get_instance("default-ubuntu-1404").options(resolve_key=False)
        assert options.public_key_path == "/nonexistent/id_rsa.pub"
            
    async def test_default_suite(self, tmp_path):
        """Test that a project without suites gets a default one."""
        manager = ConfigManager(write_project(tmp_path, "platforms:\n  - name: ubuntu-16.04\n"))
        await manager.load()
        
        assert manager.list_instances() == ["default-ubuntu-1604"]
        
    async def test_state_dir(self, tmp_path):
        """Test that the state directory is relative to the project file."""
        manager = ConfigManager(write_project(tmp_path))
        await manager.load()
        
        assert manager.state_dir == tmp_path / ".kitchen"
        
    async def test_missing_file(self, tmp_path):
        manager = ConfigManager(tmp_path / "missing.yml")
        
        with pytest.raises(ConfigurationError, match="not found"):
            await manager.load()
            
    async def test_invalid_yaml(self, tmp_path):
        manager = ConfigManager(write_project(tmp_path, "platforms: [unclosed\n"))
        
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            await manager.load()
            
    async def test_not_a_mapping(self, tmp_path):
        manager = ConfigManager(write_project(tmp_path, "- ubuntu-14.04\n"))
        
        with pytest.raises(ConfigurationError, match="mapping"):
            await manager.load()
            
    async def test_invalid_driver_settings(self, tmp_path):
        """Test that invalid merged settings name the instance."""
        text = "platforms:\n  - name: ubuntu-14.04\n    driver:\n      ipv4: not-an-address\n"
        manager = ConfigManager(write_project(tmp_path, text))
        
        with pytest.raises(ConfigurationError, match="default-ubuntu-1404"):
            await manager.load()
            
    async def test_unknown_instance(self, tmp_path):
        manager = ConfigManager(write_project(tmp_path))
        await manager.load()
        
        with pytest.raises(ConfigurationError):
            manager.get_instance("nope")
