"""Article lifecycle events and the dispatcher that announces them."""

from django.dispatch import Signal

from core.events import EventDispatcher

ARTICLE_CREATED = "article.created"
ARTICLE_ASSIGNED = "article.assigned"

# payload: the persisted Article
article_created = Signal()
# payload: {"article": Article, "editor": User}
article_assigned = Signal()


def build_dispatcher() -> EventDispatcher:
    dispatcher = EventDispatcher()
    dispatcher.register(ARTICLE_CREATED, article_created)
    dispatcher.register(ARTICLE_ASSIGNED, article_assigned)
    return dispatcher


__all__ = ["ARTICLE_CREATED", "ARTICLE_ASSIGNED", "article_created", "article_assigned", "build_dispatcher"]
