"""WordPress REST API (v2) client for publishing finished articles as posts."""

import logging
from typing import Any

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class WordPressClient:
    """Create and read posts using an application password."""

    def __init__(
        self,
        base_url: str | None = None,
        user: str | None = None,
        app_password: str | None = None,
        post_status: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or settings.WORDPRESS_URL).rstrip("/")
        self.post_status = post_status or settings.WORDPRESS_POST_STATUS
        self.timeout = timeout if timeout is not None else settings.WORDPRESS_TIMEOUT
        self.session = session or requests.Session()
        self.session.auth = (user or settings.WORDPRESS_USER, app_password or settings.WORDPRESS_APP_PASSWORD)

    def _posts_url(self, post_id: int | None = None) -> str:
        url = f"{self.base_url}/wp-json/wp/v2/posts"
        return f"{url}/{post_id}" if post_id is not None else url

    def publish_article(self, article, content: str = "") -> dict[str, Any]:
        """Create a new post for ``article``. Every call creates another post."""
        payload = {"title": article.title, "content": content, "status": self.post_status}
        response = self.session.post(self._posts_url(), json=payload, timeout=self.timeout)
        response.raise_for_status()
        post = response.json()
        logger.info("Published article %s as WordPress post %s", article.id, post.get("id"))
        return post

    def get_article(self, article) -> dict[str, Any] | None:
        """Fetch the post behind ``article``.

        Returns None when the article was never published. A post deleted on
        the WordPress side comes back as WordPress' own 404 body.
        """
        if article.wordpress_id is None:
            return None
        response = self.session.get(self._posts_url(article.wordpress_id), timeout=self.timeout)
        if response.status_code == 404:
            logger.warning("WordPress post %s for article %s is gone", article.wordpress_id, article.id)
            return response.json()
        response.raise_for_status()
        return response.json()


__all__ = ["WordPressClient"]
