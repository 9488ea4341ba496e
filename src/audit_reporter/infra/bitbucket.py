from __future__ import annotations

from typing import Optional
from urllib.parse import quote

import requests

from ..core.domain.models import PublishResult
from ..core.ports import LoggerPort


API_BASE = "http://api.bitbucket.org/2.0/repositories"

# The pipelines auth proxy; "pipe" is how it is reached from inside a pipe container.
RELAY_TARGETS = {
    "local": "http://localhost:29418",
    "pipe": "http://host.docker.internal:29418",
}


class BitbucketReportsClient:
    """Client for the Bitbucket Code Insights reports API.

    Requests go through the pipelines relay proxy, which injects credentials,
    so no token is handled here. Transport failures are returned as a
    ``PublishResult`` without status code rather than raised.
    """

    def __init__(
        self,
        *,
        owner: str,
        slug: str,
        commit: str,
        proxy_url: Optional[str],
        logger: LoggerPort,
        timeout: float = 30.0,
        api_base: str = API_BASE,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._owner = owner
        self._slug = slug
        self._commit = commit
        self._logger = logger
        self._timeout = timeout
        self._api_base = api_base.rstrip("/")
        self._session = session or requests.Session()
        if proxy_url:
            self._session.proxies.update({"http": proxy_url, "https": proxy_url})

    def report_url(self, report_id: str) -> str:
        return (
            f"{self._api_base}/{quote(self._owner, safe='')}/{quote(self._slug, safe='')}"
            f"/commit/{quote(self._commit, safe='')}/reports/{quote(report_id, safe='')}"
        )

    def annotation_url(self, report_id: str, annotation_id: str) -> str:
        return f"{self.report_url(report_id)}/annotations/{quote(annotation_id, safe='')}"

    def put_report(self, report_id: str, payload: dict[str, object]) -> PublishResult:
        return self._put(self.report_url(report_id), payload)

    def put_annotation(self, report_id: str, annotation_id: str, payload: dict[str, object]) -> PublishResult:
        return self._put(self.annotation_url(report_id, annotation_id), payload)

    def _put(self, url: str, payload: dict[str, object]) -> PublishResult:
        try:
            response = self._session.put(url, json=payload, timeout=self._timeout)
        except requests.RequestException as e:
            self._logger.warning("http_error", url=url, error=str(e))
            return PublishResult(url=url, status_code=None, body=str(e))

        self._logger.debug("http_put", url=url, status_code=response.status_code)
        body = "" if response.status_code == 200 else response.text
        return PublishResult(url=url, status_code=response.status_code, body=body)
