"""Listeners for article lifecycle events."""

import logging
from typing import Any

from django.conf import settings
from django.core.mail import send_mail
from django.dispatch import receiver

from integrations.copyright import get_copyright_client
from .events import article_assigned, article_created

logger = logging.getLogger(__name__)


@receiver(article_created, dispatch_uid="articles.notify_authors")
def notify_authors(sender: str, payload, **kwargs: Any) -> None:
    """Send every author a receipt for the submission."""
    article = payload
    recipients = [author.email for author in article.authors.all()]
    if not recipients:
        return
    send_mail(
        subject=f"Submission received: {article.title}",
        message=(
            f'Thank you for submitting "{article.title}". '
            "You have been given edit access to the manuscript in Google Drive."
        ),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=recipients,
    )
    logger.info("Sent submission receipt for %s to %d author(s)", article.id, len(recipients))


@receiver(article_created, dispatch_uid="articles.analyse_copyright")
def analyse_copyright(sender: str, payload, **kwargs: Any) -> None:
    """Run the copyright analysis on the new manuscript when a service is configured.

    The call is synchronous: it runs on the dispatching thread, so article
    creation waits for it, bounded by ``COPYRIGHT_TIMEOUT``. The article
    service passed as ``service`` by the dispatcher is used when present.
    """
    client = get_copyright_client()
    if not client.enabled:
        return

    service = kwargs.get("service")
    if service is None:
        from .services import get_article_service

        service = get_article_service()
    result = client.analyse(payload.id, service.get_text(payload))
    service.update_copyright(result)


@receiver(article_assigned, dispatch_uid="articles.notify_editor")
def notify_editor(sender: str, payload, **kwargs: Any) -> None:
    """Tell an editor which article they were just assigned."""
    article, editor = payload["article"], payload["editor"]
    send_mail(
        subject=f"New assignment: {article.title}",
        message=f'Hi {editor.name}, you have been assigned "{article.title}".',
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[editor.email],
    )
    logger.info("Notified %s of assignment to %s", editor.email, article.id)
