"""Concurrent status checks over a set of dependencies."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Dict, List

from jetwatch.registry.health import ServiceStatusChecker
from jetwatch.registry.models import ServiceState, ServiceStatus, StatusSummary

logger = logging.getLogger(__name__)


def _distinct(names: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(names))


class ServiceStatusAggregator:
    """Fans a checker out over many dependencies and buckets the results."""

    def __init__(self, checker: ServiceStatusChecker) -> None:
        self._checker = checker

    async def check_all(self, names: Iterable[str]) -> Dict[str, ServiceStatus]:
        """Run every check concurrently; one failing check never aborts the batch."""
        keys = _distinct(names)
        results = await asyncio.gather(
            *(self._checker.check(name) for name in keys),
            return_exceptions=True,
        )
        out: Dict[str, ServiceStatus] = {}
        for key, result in zip(keys, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error("Error checking API status for %s: %s", key, result)
                out[key] = ServiceStatus(
                    name=key,
                    state=ServiceState.UNKNOWN,
                    message="error during verification",
                )
            else:
                out[key] = result
        return out

    async def summarize(self, names: Iterable[str]) -> StatusSummary:
        """Partition *names* by state; each name lands in exactly one bucket."""
        return StatusSummary.from_statuses(await self.check_all(names))
