"""
Remote scan logging service client.

The logging service is a single HTTP endpoint:
    GET  ?getMap=true  -> {"status": "OK", "part_map": {...}}
    GET  ?ping=1       -> any 2xx when reachable
    POST <json text>   -> {"status": "OK" | "DUPLICATE" | ...}

Submissions are retried a couple of times before giving up. Failures are
reported as ERROR / OFFLINE statuses rather than exceptions so the caller can
still record the scan.
"""

import json
import threading
import time
from typing import Callable, Optional
import requests
import structlog

from config import settings as app_settings, Settings
from models.scan import ScanStatus

logger = structlog.get_logger(__name__)


class ScanLoggerClient:
    """
    HTTP client for the scan logging service.

    Tracks consecutive failed submissions; after max_failures_before_offline
    the service is reported offline until a request succeeds again.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or app_settings
        self.url = self.config.scan_logger_url
        self.session = session or requests.Session()
        self._sleep = sleep
        self._lock = threading.Lock()
        self._consecutive_failures = 0
        self._online = True

    # ===================
    # STATE
    # ===================

    @property
    def configured(self) -> bool:
        return bool(self.url)

    @property
    def online(self) -> bool:
        return self._online

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def _mark_success(self) -> None:
        with self._lock:
            self._consecutive_failures = 0
            if not self._online:
                logger.info("scan_logger_back_online")
            self._online = True

    def _mark_failure(self) -> None:
        with self._lock:
            self._consecutive_failures += 1
            if self._consecutive_failures >= self.config.max_failures_before_offline:
                if self._online:
                    logger.warning(
                        "scan_logger_offline",
                        consecutive_failures=self._consecutive_failures
                    )
                self._online = False

    # ===================
    # REQUESTS
    # ===================

    def send(self, payload: dict) -> str:
        """
        Post a payload to the logging service.

        Args:
            payload: Scan or correction payload (JSON-serializable)

        Returns:
            Status from the service, or ERROR / OFFLINE
        """
        if not self.configured:
            logger.warning("scan_logger_not_configured_skipping_send")
            return ScanStatus.ERROR.value

        body = json.dumps(payload)
        max_retries = self.config.send_max_retries

        for attempt in range(max_retries + 1):
            retries_left = attempt < max_retries

            try:
                response = self.session.post(
                    self.url,
                    data=body,
                    allow_redirects=True,
                    timeout=self.config.request_timeout_seconds,
                )
            except requests.exceptions.RequestException as e:
                logger.warning(
                    "scan_logger_network_error",
                    error=str(e),
                    attempt=attempt + 1,
                    max_retries=max_retries
                )
                if retries_left:
                    self._sleep(self.config.network_retry_delay_seconds)
                    continue
                self._mark_failure()
                return ScanStatus.OFFLINE.value

            if not response.ok:
                logger.warning(
                    "scan_logger_server_error",
                    status_code=response.status_code,
                    attempt=attempt + 1,
                    max_retries=max_retries
                )
                if retries_left:
                    self._sleep(self.config.retry_delay_seconds)
                    continue
                self._mark_failure()
                return ScanStatus.ERROR.value

            try:
                data = json.loads(response.text)
            except ValueError:
                logger.warning("scan_logger_invalid_json", attempt=attempt + 1)
                if retries_left:
                    continue
                return ScanStatus.ERROR.value

            self._mark_success()
            status = data.get("status") if isinstance(data, dict) else None
            logger.info("scan_logger_response", status=status)
            if not isinstance(status, str) or not status:
                return ScanStatus.ERROR.value
            return status

        return ScanStatus.ERROR.value

    def ping(self) -> bool:
        """
        Check the logging service is reachable.

        A network failure does not flip the client offline; it returns the
        current online state instead, since slow pings are common on tablets
        waking from sleep.
        """
        if not self.configured:
            logger.warning("scan_logger_not_configured_skipping_ping")
            return False

        try:
            response = self.session.get(
                self.url,
                params={"ping": "1"},
                timeout=self.config.ping_timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            logger.info("scan_logger_ping_failed", error=str(e), online=self._online)
            return self._online

        if response.ok:
            self._mark_success()
        logger.debug("scan_logger_ping", status_code=response.status_code)
        return response.ok

    def fetch_part_map(self) -> dict[str, str]:
        """
        Download the part number map.

        Returns:
            Prefix -> part mapping; empty on any failure
        """
        if not self.configured:
            logger.warning("scan_logger_not_configured_skipping_part_map")
            return {}

        logger.info("fetching_part_map")

        try:
            response = self.session.get(
                self.url,
                params={"getMap": "true"},
                headers={"Cache-Control": "no-cache"},
                timeout=self.config.request_timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            logger.error("part_map_request_failed", error=str(e))
            return {}

        if not response.ok:
            logger.error(
                "part_map_server_error",
                status_code=response.status_code,
                reason=response.reason
            )
            return {}

        try:
            data = response.json()
        except ValueError as e:
            logger.error("part_map_invalid_json", error=str(e))
            return {}

        if not isinstance(data, dict):
            logger.error("part_map_rejected", status=None)
            return {}

        part_map = data.get("part_map")
        if data.get("status") != "OK" or not isinstance(part_map, dict):
            logger.error("part_map_rejected", status=data.get("status"))
            return {}

        # Null or blank parts stay unmapped so those prefixes decode as UNKNOWN
        return {
            str(k): str(v)
            for k, v in part_map.items()
            if v is not None and str(v).strip()
        }


# Singleton instance
_scan_logger_client: Optional[ScanLoggerClient] = None


def get_scan_logger_client() -> ScanLoggerClient:
    """Get or create ScanLoggerClient instance."""
    global _scan_logger_client
    if _scan_logger_client is None:
        _scan_logger_client = ScanLoggerClient()
    return _scan_logger_client
