"""Flag client health checks for /health/detailed."""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

import structlog

from toggle_demo.core.features import FlagProvider

logger = structlog.get_logger()


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Cache state of one project's flag client."""

    name: str
    status: HealthStatus
    latency_ms: Optional[float] = None
    message: Optional[str] = None
    details: dict = field(default_factory=dict)


@dataclass
class SystemHealth:
    version: str
    environment: str
    components: list[ComponentHealth] = field(default_factory=list)

    @property
    def status(self) -> HealthStatus:
        """Worst component status wins."""
        statuses = {c.status for c in self.components}
        for status in (HealthStatus.UNHEALTHY, HealthStatus.DEGRADED):
            if status in statuses:
                return status
        return HealthStatus.HEALTHY

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "version": self.version,
            "environment": self.environment,
            "components": {
                c.name: {
                    "status": c.status.value,
                    "latency_ms": c.latency_ms,
                    "message": c.message,
                    **c.details,
                }
                for c in self.components
            },
        }


async def check_flag_client(name: str, provider: FlagProvider) -> ComponentHealth:
    """
    Check a flag client's local cache.

    Reads cached keys only; never triggers a fetch. A provider that raises
    is unhealthy. An empty cache means every lookup is falling back to
    defaults, which is reported as degraded. The ConfigCat SDK answers an
    empty key list before its first successful download, so an unreachable
    ConfigCat project shows up here as degraded.
    """
    start = time.perf_counter()
    try:
        keys = provider.get_all_keys()
    except Exception as e:
        logger.error("Flag client health check failed", project=name, error=str(e))
        return ComponentHealth(
            name=name,
            status=HealthStatus.UNHEALTHY,
            message=str(e)[:100],
            details={"backend": provider.backend_name},
        )
    latency_ms = round((time.perf_counter() - start) * 1000, 2)

    details = {"backend": provider.backend_name, "flags": len(keys)}
    if not keys:
        return ComponentHealth(
            name=name,
            status=HealthStatus.DEGRADED,
            latency_ms=latency_ms,
            message="No flag definitions cached",
            details=details,
        )

    return ComponentHealth(
        name=name,
        status=HealthStatus.HEALTHY,
        latency_ms=latency_ms,
        message="Flag definitions cached",
        details=details,
    )


async def check_flag_clients(
    clients: Iterable[tuple[str, FlagProvider]],
    version: str,
    environment: str,
) -> SystemHealth:
    """Check every project's flag client concurrently."""
    components = await asyncio.gather(
        *[check_flag_client(name, provider) for name, provider in clients]
    )
    return SystemHealth(version=version, environment=environment, components=list(components))
