"""Runtime requirement checks for tool servers.

Run once before connecting: servers whose requirements are missing are
disabled, and the remaining order follows server priority.
"""

import asyncio
import os
from typing import Any

import httpx

from toolmind_core.config.models import ServerDescriptor
from toolmind_core.logging.logger import EngineLogger
from toolmind_core.types import LogLevel, RuntimeRequirement


class DependencyChecker:
    """Checks the runtime requirements declared by server descriptors.

    Check results are memoized per checker instance, so a checker covers one
    dependency-check pass.
    """

    def __init__(
        self,
        network_check_url: str = "https://www.google.com",
        check_timeout: float = 5.0,
        logger: EngineLogger | None = None,
    ):
        self._network_check_url = network_check_url
        self._check_timeout = check_timeout
        self._logger = logger
        self._checked: dict[RuntimeRequirement, bool] = {}

    def _log(self, level: LogLevel, message: str, context: dict[str, Any] | None = None) -> None:
        if self._logger:
            self._logger._log(level, "catalog", message, context)

    async def check(self, descriptor: ServerDescriptor) -> list[str]:
        """List the requirements of a descriptor that are not met.

        Args:
            descriptor: Server descriptor to check

        Returns:
            Human-readable names of missing requirements, empty when all are met
        """
        missing: list[str] = []
        for requirement in descriptor.requires.required():
            if requirement == RuntimeRequirement.ENV:
                env_var = descriptor.requires.env_var or ""
                if not self.env_available(env_var):
                    missing.append(f"environment variable {env_var}")
            elif not await self.is_available(requirement):
                missing.append(_REQUIREMENT_LABELS[requirement])
        return missing

    async def apply(self, descriptors: list[ServerDescriptor]) -> list[ServerDescriptor]:
        """Run the dependency-check pass.

        Disables every enabled descriptor with missing requirements.

        Args:
            descriptors: Descriptors from configuration

        Returns:
            The same descriptors sorted by priority, highest first
        """
        for descriptor in descriptors:
            if not descriptor.enabled:
                continue
            missing = await self.check(descriptor)
            if missing:
                descriptor.enabled = False
                self._log(
                    LogLevel.WARN,
                    f"Server '{descriptor.name}' disabled, missing: {', '.join(missing)}",
                    {"server_name": descriptor.name, "missing": missing},
                )

        return sort_by_priority(descriptors)

    @staticmethod
    def env_available(name: str) -> bool:
        return bool(name) and bool(os.environ.get(name, "").strip())

    async def is_available(self, requirement: RuntimeRequirement) -> bool:
        """Check a runtime once and remember the answer."""
        if requirement not in self._checked:
            if requirement == RuntimeRequirement.NODEJS:
                self._checked[requirement] = await self._command_succeeds("npx", "--version")
            elif requirement == RuntimeRequirement.DOCKER:
                self._checked[requirement] = await self._command_succeeds("docker", "--version")
            elif requirement == RuntimeRequirement.ONLINE:
                self._checked[requirement] = await self._network_reachable()
            else:
                return True
            self._log(
                LogLevel.DEBUG,
                f"Runtime '{requirement.value}' available: {self._checked[requirement]}",
            )
        return self._checked[requirement]

    async def _command_succeeds(self, *command: str) -> bool:
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError:
            return False
        try:
            return await asyncio.wait_for(process.wait(), timeout=self._check_timeout) == 0
        except TimeoutError:
            process.kill()
            await process.wait()
            return False

    async def _network_reachable(self) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self._check_timeout) as client:
                response = await client.head(self._network_check_url)
                return response.status_code < 500
        except httpx.HTTPError:
            return False


_REQUIREMENT_LABELS = {
    RuntimeRequirement.NODEJS: "Node.js (npx)",
    RuntimeRequirement.ONLINE: "network access",
    RuntimeRequirement.DOCKER: "Docker",
}


def sort_by_priority(descriptors: list[ServerDescriptor]) -> list[ServerDescriptor]:
    """Order descriptors by priority weight, highest first.

    The sort is stable, so equal priorities keep configuration order.
    """
    return sorted(descriptors, key=lambda d: d.priority.weight, reverse=True)
