"""Periodic HTTP/DNS/TLS health probes with threshold alerting.

Each run performs five checks (health endpoint, generation API, website,
DNS resolution, TLS certificate), derives an overall status, appends the
result to a JSON log and raises alerts into a JSON alerts file. Both files
are capped (oldest entries evicted first).
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import ssl
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional
from urllib.parse import urlparse

import httpx

from designetica.settings import (
    MONITOR_ALERT_LIMIT,
    MONITOR_DATA_DIR,
    MONITOR_LOG_LIMIT,
    MONITOR_PROBE_TIMEOUT,
    MONITOR_SSL_WARNING_DAYS,
)

logger = logging.getLogger("designetica.monitor")

CRITICAL_CHECKS = ("apiEndpoint", "website")

API_PROBE_PAYLOAD = {"description": "health check test layout"}


class CheckStatus(str, Enum):
    HEALTHY = "HEALTHY"
    UNHEALTHY = "UNHEALTHY"


class OverallStatus(str, Enum):
    HEALTHY = "HEALTHY"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"


class AlertType(str, Enum):
    STATUS_CHANGE = "STATUS_CHANGE"
    CRITICAL_ISSUE = "CRITICAL_ISSUE"
    SSL_EXPIRY_WARNING = "SSL_EXPIRY_WARNING"
    HEALTH_CHECK_FAILED = "HEALTH_CHECK_FAILED"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class MonitorTargets:
    health_url: str
    api_url: str
    website_url: str

    @classmethod
    def from_base(cls, api_base: str, website_url: Optional[str] = None) -> "MonitorTargets":
        api_base = api_base.rstrip("/")
        return cls(
            health_url=f"{api_base}/api/health",
            api_url=f"{api_base}/api/generate-wireframe",
            website_url=website_url or api_base,
        )

    @property
    def website_host(self) -> str:
        return urlparse(self.website_url).hostname or ""


class JsonRingFile:
    """A JSON array file that keeps only the newest ``limit`` entries."""

    def __init__(self, path: str, limit: int):
        self.path = path
        self.limit = limit

    def read(self) -> List[Dict[str, Any]]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logger.warning(f"JsonRingFile: cannot read {self.path}: {e}")
            return []
        return data if isinstance(data, list) else []

    def append(self, entry: Dict[str, Any]) -> None:
        entries = self.read()
        entries.append(entry)
        if len(entries) > self.limit:
            entries = entries[-self.limit:]
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp = f"{self.path}.tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(entries, f, indent=2)
        os.replace(tmp, self.path)


# --- Default network probes ---


async def resolve_host(host: str) -> str:
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(host, None)
    return infos[0][4][0]


async def fetch_certificate(host: str, timeout: float) -> Dict[str, Any]:
    ctx = ssl.create_default_context()
    _, writer = await asyncio.wait_for(
        asyncio.open_connection(host, 443, ssl=ctx, server_hostname=host), timeout
    )
    try:
        return writer.get_extra_info("peercert") or {}
    finally:
        writer.close()


class HealthMonitor:
    """Run health checks against one deployment.

    Args:
        targets: URLs to probe.
        data_dir: Directory holding ``health-log.json`` and ``alerts.json``.
        transport: Optional httpx transport for the HTTP checks.
        resolver / cert_fetcher: Injectable DNS and TLS probes.
    """

    def __init__(
        self,
        targets: MonitorTargets,
        data_dir: str = MONITOR_DATA_DIR,
        timeout: float = MONITOR_PROBE_TIMEOUT,
        ssl_warning_days: int = MONITOR_SSL_WARNING_DAYS,
        log_limit: int = MONITOR_LOG_LIMIT,
        alert_limit: int = MONITOR_ALERT_LIMIT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        resolver: Callable[[str], Awaitable[str]] = resolve_host,
        cert_fetcher: Optional[Callable[[str, float], Awaitable[Dict[str, Any]]]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.targets = targets
        self.timeout = timeout
        self.ssl_warning_days = ssl_warning_days
        self.logs = JsonRingFile(os.path.join(data_dir, "health-log.json"), log_limit)
        self.alerts = JsonRingFile(os.path.join(data_dir, "alerts.json"), alert_limit)
        self._transport = transport
        self._resolver = resolver
        self._cert_fetcher = cert_fetcher or fetch_certificate
        self._clock = clock
        self.last_status: Optional[str] = None

    # ------------------------------------------------------------------
    # Individual checks
    # ------------------------------------------------------------------

    async def check_endpoint(
        self, client: httpx.AsyncClient, url: str, method: str = "GET", payload: Any = None
    ) -> Dict[str, Any]:
        started = time.monotonic()
        try:
            resp = await client.request(method, url, json=payload)
        except httpx.HTTPError as e:
            return {
                "status": CheckStatus.UNHEALTHY.value,
                "statusCode": None,
                "responseTime": int((time.monotonic() - started) * 1000),
                "error": str(e) or type(e).__name__,
            }
        healthy = resp.status_code < 400
        return {
            "status": (CheckStatus.HEALTHY if healthy else CheckStatus.UNHEALTHY).value,
            "statusCode": resp.status_code,
            "responseTime": int((time.monotonic() - started) * 1000),
            "responseSize": len(resp.content),
            "error": None if healthy else f"HTTP {resp.status_code}",
        }

    async def check_api_endpoint(self, client: httpx.AsyncClient) -> Dict[str, Any]:
        result = await self.check_endpoint(client, self.targets.api_url, "POST", API_PROBE_PAYLOAD)
        if result["status"] == CheckStatus.HEALTHY.value and result.get("responseSize", 0) > 0:
            result["apiValidation"] = "PASSED"
        else:
            result["apiValidation"] = "FAILED"
            result["status"] = CheckStatus.UNHEALTHY.value
        return result

    async def check_dns(self) -> Dict[str, Any]:
        started = time.monotonic()
        host = self.targets.website_host
        try:
            address = await asyncio.wait_for(self._resolver(host), self.timeout)
        except (OSError, asyncio.TimeoutError) as e:
            return {
                "status": CheckStatus.UNHEALTHY.value,
                "error": str(e) or "DNS lookup timeout",
                "responseTime": int((time.monotonic() - started) * 1000),
            }
        return {
            "status": CheckStatus.HEALTHY.value,
            "address": address,
            "responseTime": int((time.monotonic() - started) * 1000),
        }

    async def check_ssl(self) -> Dict[str, Any]:
        started = time.monotonic()
        host = self.targets.website_host
        try:
            cert = await self._cert_fetcher(host, self.timeout)
            not_before = ssl.cert_time_to_seconds(cert["notBefore"])
            not_after = ssl.cert_time_to_seconds(cert["notAfter"])
        except (OSError, asyncio.TimeoutError, KeyError, ValueError) as e:
            return {
                "status": CheckStatus.UNHEALTHY.value,
                "error": str(e) or "SSL check timeout",
                "responseTime": int((time.monotonic() - started) * 1000),
            }

        now = self._clock()
        days = int((not_after - now) // 86400)
        valid = not_before <= now <= not_after
        return {
            "status": (CheckStatus.HEALTHY if valid else CheckStatus.UNHEALTHY).value,
            "validFrom": cert["notBefore"],
            "validTo": cert["notAfter"],
            "daysUntilExpiry": days,
            "responseTime": int((time.monotonic() - started) * 1000),
            "warning": (
                f"Certificate expires in {days} days" if days < self.ssl_warning_days else None
            ),
        }

    # ------------------------------------------------------------------
    # Aggregation and alerting
    # ------------------------------------------------------------------

    @staticmethod
    def determine_overall_status(checks: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
        for name in CRITICAL_CHECKS:
            if (checks.get(name) or {}).get("status") != CheckStatus.HEALTHY.value:
                return {
                    "status": OverallStatus.CRITICAL.value,
                    "message": f"Critical service {name} is unhealthy",
                }

        warnings: List[str] = []
        for name, result in checks.items():
            if result.get("status") == CheckStatus.UNHEALTHY.value:
                warnings.append(name)
            if result.get("warning"):
                warnings.append(f"{name}: {result['warning']}")
        if warnings:
            return {
                "status": OverallStatus.WARNING.value,
                "message": f"Some services have issues: {', '.join(warnings)}",
                "warnings": warnings,
            }
        return {
            "status": OverallStatus.HEALTHY.value,
            "message": "All services are operating normally",
        }

    def trigger_alert(self, alert_type: AlertType, message: str) -> Dict[str, Any]:
        alert = {
            "timestamp": _now_iso(),
            "type": alert_type.value,
            "message": message,
            "resolved": False,
        }
        logger.warning(f"ALERT [{alert_type.value}]: {message}")
        try:
            self.alerts.append(alert)
        except OSError as e:
            logger.error(f"trigger_alert: failed to persist alert: {e}")
        return alert

    def check_for_alerts(self, results: Dict[str, Any]) -> List[Dict[str, Any]]:
        raised = []
        current = results["overall"]["status"]
        if self.last_status and self.last_status != current:
            raised.append(self.trigger_alert(
                AlertType.STATUS_CHANGE, f"Status changed from {self.last_status} to {current}"
            ))
        if current == OverallStatus.CRITICAL.value:
            raised.append(self.trigger_alert(AlertType.CRITICAL_ISSUE, results["overall"]["message"]))
        days = (results["checks"].get("ssl") or {}).get("daysUntilExpiry")
        if days is not None and days < self.ssl_warning_days:
            raised.append(self.trigger_alert(
                AlertType.SSL_EXPIRY_WARNING, f"SSL certificate expires in {days} days"
            ))
        self.last_status = current
        return raised

    async def check_health(self) -> Dict[str, Any]:
        """Run every check once, log the result, and raise alerts."""
        results: Dict[str, Any] = {"timestamp": _now_iso(), "checks": {}}
        logger.info(f"check_health: starting at {results['timestamp']}")
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport, follow_redirects=True
            ) as client:
                checks = results["checks"]
                checks["healthEndpoint"] = await self.check_endpoint(client, self.targets.health_url)
                checks["apiEndpoint"] = await self.check_api_endpoint(client)
                checks["website"] = await self.check_endpoint(client, self.targets.website_url)
            results["checks"]["dns"] = await self.check_dns()
            results["checks"]["ssl"] = await self.check_ssl()
            results["overall"] = self.determine_overall_status(results["checks"])
        except Exception as e:
            logger.error(f"check_health: failed: {e}")
            results["overall"] = {"status": OverallStatus.ERROR.value, "error": str(e)}
            self.trigger_alert(AlertType.HEALTH_CHECK_FAILED, str(e))
            self._log(results)
            return results

        self._log(results)
        self.check_for_alerts(results)
        logger.info(f"check_health: completed, status={results['overall']['status']}")
        return results

    def _log(self, results: Dict[str, Any]) -> None:
        try:
            self.logs.append(results)
        except OSError as e:
            logger.error(f"check_health: failed to log results: {e}")

    def get_health_summary(self) -> Dict[str, Any]:
        logs = self.logs.read()
        alerts = self.alerts.read()
        recent = logs[-10:]
        healthy = sum(
            1 for entry in logs
            if (entry.get("overall") or {}).get("status") == OverallStatus.HEALTHY.value
        )
        return {
            "lastCheck": recent[-1] if recent else None,
            "lastStatus": (recent[-1].get("overall") or {}).get("status") if recent else None,
            "uptimePercent": round(100.0 * healthy / len(logs), 1) if logs else None,
            "recentHistory": recent,
            "unresolvedAlerts": [a for a in alerts if not a.get("resolved")],
            "recentAlerts": alerts[-5:],
            "totalChecks": len(logs),
            "totalAlerts": len(alerts),
        }

    async def run_forever(self, interval_seconds: float) -> None:
        logger.info(f"run_forever: monitoring every {interval_seconds:g}s")
        while True:
            await self.check_health()
            await asyncio.sleep(interval_seconds)
