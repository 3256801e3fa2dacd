"""Client for the external copyright (plagiarism) analysis service."""

import logging
from dataclasses import dataclass, field
from typing import Any

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    article_id: str
    score: float
    matches: list[dict[str, Any]] = field(default_factory=list)

    def as_report(self) -> dict[str, Any]:
        return {"score": self.score, "matches": list(self.matches)}


class CopyrightClient:
    """POST an article's text to ``COPYRIGHT_API_URL`` and read back a similarity score.

    Unset ``url`` and ``timeout`` are read from settings on every use, so one
    long-lived client follows ``override_settings`` and env changes.
    """

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self._url = url
        self._timeout = timeout
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return self._url if self._url is not None else settings.COPYRIGHT_API_URL

    @property
    def timeout(self) -> float:
        return self._timeout if self._timeout is not None else settings.COPYRIGHT_TIMEOUT

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def analyse(self, article_id, text: str) -> AnalysisResult:
        response = self.session.post(
            self.url,
            json={"article_id": str(article_id), "text": text},
            timeout=self.timeout,
        )
        response.raise_for_status()
        body = response.json()
        result = AnalysisResult(
            article_id=str(article_id),
            score=float(body.get("score", 0.0)),
            matches=body.get("matches") or [],
        )
        logger.info("Copyright analysis for %s scored %.3f", article_id, result.score)
        return result


_client: CopyrightClient | None = None


def get_copyright_client() -> CopyrightClient:
    """Process-wide client so every analysis reuses one pooled HTTP session."""
    global _client
    if _client is None:
        _client = CopyrightClient()
    return _client


__all__ = ["AnalysisResult", "CopyrightClient", "get_copyright_client"]
