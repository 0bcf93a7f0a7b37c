"""Tests for CLI command implementations."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from lxdkitchen.cli.commands import create_instances, destroy_instances, list_instances
from lxdkitchen.exceptions import CommandError, ConfigurationError, LxdKitchenError
from lxdkitchen.models.instance import RunState


@pytest.fixture
def engine():
    """Engine with three configured instances."""
    engine = MagicMock()
    engine.config_manager.list_instances.return_value = ["a", "b", "c"]
    engine.create_instance = AsyncMock(return_value=RunState(hostname="10.0.3.5"))
    engine.destroy_instance = AsyncMock(return_value=RunState())
    return engine


@pytest.mark.asyncio
class TestInstanceCommands:
    """Tests for create and destroy over one or many instances."""
    
    async def test_create_single(self, engine):
        await create_instances(engine, name="b", all_instances=False, quiet=True)
        
        engine.config_manager.get_instance.assert_called_once_with("b")
        engine.create_instance.assert_awaited_once_with("b")
        
    async def test_create_unknown_instance(self, engine):
        engine.config_manager.get_instance.side_effect = ConfigurationError("not found")
        
        with pytest.raises(ConfigurationError):
            await create_instances(engine, name="zz", all_instances=False, quiet=True)
        engine.create_instance.assert_not_awaited()
        
    async def test_single_failure_is_reraised(self, engine):
        """Test that a single instance's error surfaces unchanged."""
        error = CommandError(["lxc", "start", "b"], 1, stderr="boom")
        engine.create_instance.side_effect = error
        
        with pytest.raises(CommandError) as exc_info:
            await create_instances(engine, name="b", all_instances=False, quiet=True)
        assert exc_info.value is error
        
    async def test_all_continues_after_failure(self, engine):
        """Test that one failing instance does not stop the others."""
        engine.destroy_instance.side_effect = [
            RunState(),
            CommandError(["lxc", "delete", "b"], 1),
            RunState(),
        ]
        
        with pytest.raises(LxdKitchenError, match="1/3"):
            await destroy_instances(engine, name=None, all_instances=True, quiet=True)
            
        assert [c.args[0] for c in engine.destroy_instance.await_args_list] == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_list_instances(engine, capsys):
    """Test that the table shows each instance with its hostname."""
    engine.get_all_instance_statuses = AsyncMock(return_value={
        "a": {"platform": "ubuntu-14.04", "state": "running",
              "hostname": "10.0.3.5", "last_action": "create"},
        "b": {"platform": "ubuntu-16.04", "state": "absent",
              "hostname": None, "last_action": None},
    })
    
    await list_instances(engine)
    
    output = capsys.readouterr().out
    assert "10.0.3.5" in output
    assert "ubuntu-16.04" in output
    assert "absent" in output
