"""Unit tests for DependencyChecker."""

from unittest.mock import AsyncMock, patch

import pytest

from toolmind_core.config import RuntimeRequirements, ServerDescriptor
from toolmind_core.mcp import DependencyChecker, sort_by_priority
from toolmind_core.types import RuntimeRequirement, ServerPriority


class TestCheck:
    """Requirement checks."""

    @pytest.mark.asyncio
    async def test_no_requirements(self):
        """Test a descriptor without requirements passes."""
        checker = DependencyChecker()
        assert await checker.check(ServerDescriptor(name="plain")) == []

    @pytest.mark.asyncio
    async def test_missing_env_var(self, monkeypatch):
        """Test an unset or blank env var is reported."""
        monkeypatch.setenv("TOOLMIND_BLANK", "  ")
        checker = DependencyChecker()
        descriptor = ServerDescriptor(
            name="x", requires=RuntimeRequirements(env_var="TOOLMIND_BLANK")
        )
        assert await checker.check(descriptor) == ["environment variable TOOLMIND_BLANK"]

    @pytest.mark.asyncio
    async def test_runtime_checks_are_memoized(self):
        """Test each runtime is checked once per checker."""
        checker = DependencyChecker()
        with patch.object(
            checker, "_command_succeeds", AsyncMock(return_value=False)
        ) as command_check:
            assert not await checker.is_available(RuntimeRequirement.NODEJS)
            assert not await checker.is_available(RuntimeRequirement.NODEJS)
        command_check.assert_awaited_once_with("npx", "--version")

    @pytest.mark.asyncio
    async def test_missing_binary(self):
        """Test a command that cannot be spawned counts as unavailable."""
        checker = DependencyChecker()
        assert not await checker._command_succeeds("toolmind-no-such-binary-xyz")


class TestApply:
    """The dependency-check pass."""

    @pytest.mark.asyncio
    async def test_disables_unmet_and_sorts(self):
        """Test unmet servers are disabled and the result is priority ordered."""
        node = ServerDescriptor(
            name="node",
            priority=ServerPriority.LOW,
            requires=RuntimeRequirements(nodejs=True),
        )
        online = ServerDescriptor(
            name="online",
            priority=ServerPriority.HIGH,
            requires=RuntimeRequirements(online=True),
        )
        plain = ServerDescriptor(name="plain", priority=ServerPriority.MEDIUM)

        checker = DependencyChecker()

        async def available(requirement):
            return requirement == RuntimeRequirement.ONLINE

        with patch.object(checker, "is_available", side_effect=available):
            ordered = await checker.apply([node, online, plain])

        assert [d.name for d in ordered] == ["online", "plain", "node"]
        assert node.enabled is False
        assert online.enabled is True
        assert plain.enabled is True

    def test_sort_is_stable(self):
        """Test equal priorities keep configuration order."""
        descriptors = [
            ServerDescriptor(name="b"),
            ServerDescriptor(name="a"),
            ServerDescriptor(name="top", priority=ServerPriority.HIGH),
        ]
        assert [d.name for d in sort_by_priority(descriptors)] == ["top", "b", "a"]
