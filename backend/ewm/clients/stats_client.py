"""Client for the external stats service (endpoint hits and view counts).

The stats service is a separate deployment; every call here crosses a
network boundary and may fail or time out. Callers decide how to degrade.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from functools import lru_cache
from typing import Optional

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError

from ewm.config import settings

logger = logging.getLogger(__name__)

STATS_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class ViewStats(BaseModel):
    """One row of the stats service's ``GET /stats`` response."""

    app: Optional[str] = None
    uri: str
    hits: Optional[int] = 0


_view_stats_list = TypeAdapter(list[ViewStats])


class StatsGateway(ABC):
    """Interface for the view-count collaborator."""

    @abstractmethod
    def record_hit(self, app: str, uri: str, ip: str, timestamp: datetime) -> None:
        """Record a single endpoint hit."""
        ...

    @abstractmethod
    def query_views(
        self,
        uris: list[str],
        start: datetime,
        end: datetime,
        unique: bool = False,
    ) -> dict[str, int]:
        """Return hit counts per URI for the window. URIs with no hits may be absent."""
        ...


class StatsClient(StatsGateway):
    """HTTP implementation backed by ``requests``."""

    def __init__(self, base_url: str, timeout: float = 3.0, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = session or requests.Session()

    def record_hit(self, app: str, uri: str, ip: str, timestamp: datetime) -> None:
        payload = {
            "app": app,
            "uri": uri,
            "ip": ip,
            "timestamp": timestamp.strftime(STATS_DATETIME_FORMAT),
        }
        response = self._http.post(f"{self.base_url}/hit", json=payload, timeout=self.timeout)
        response.raise_for_status()
        logger.debug("Recorded hit %s from %s", uri, ip)

    def query_views(
        self,
        uris: list[str],
        start: datetime,
        end: datetime,
        unique: bool = False,
    ) -> dict[str, int]:
        params = {
            "start": start.strftime(STATS_DATETIME_FORMAT),
            "end": end.strftime(STATS_DATETIME_FORMAT),
            "uris": uris,
            "unique": str(unique).lower(),
        }
        response = self._http.get(f"{self.base_url}/stats", params=params, timeout=self.timeout)
        response.raise_for_status()

        try:
            rows = _view_stats_list.validate_python(response.json())
        except ValidationError as exc:
            raise ValueError(f"Malformed stats response: {exc.error_count()} invalid field(s)") from exc

        views: dict[str, int] = {}
        for row in rows:
            views[row.uri] = views.get(row.uri, 0) + (row.hits or 0)
        return views


@lru_cache
def get_stats_client() -> StatsGateway:
    """FastAPI dependency: one shared client per process."""
    return StatsClient(settings.STATS_SERVER_URL, timeout=settings.STATS_TIMEOUT_SECONDS)
