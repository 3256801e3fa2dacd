"""System checks for level-gated views."""

from django.core.checks import Error, register

from access_control.permissions import LevelPermission


@register()
def level_views_declare_rules(app_configs, **kwargs):
    """Ensure views guarded by LevelPermission declare non-empty ``level_rules``.

    Only the project's known viewsets are inspected; new guarded views must
    be added to the list below.
    """
    errors: list[Error] = []

    # Import here to avoid circular imports at module load time.
    from articles.views import ArticleViewSet
    from people.views import EditorViewSet

    for view_cls in (ArticleViewSet, EditorViewSet):
        if LevelPermission not in getattr(view_cls, "permission_classes", []):
            continue
        if not getattr(view_cls, "level_rules", None):
            errors.append(
                Error(
                    f"{view_cls.__name__} uses LevelPermission but does not define level_rules.",
                    obj=view_cls,
                    id="access_control.E001",
                )
            )

    return errors
