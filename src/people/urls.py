"""URL patterns for authentication endpoints and the editor directory."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import EditorViewSet, LoginView, LogoutView, MeView, RefreshView

router = SimpleRouter()
router.register(r"editors", EditorViewSet, basename="editor")

urlpatterns = [
    path("auth/login/", LoginView.as_view(), name="auth-login"),
    path("auth/refresh/", RefreshView.as_view(), name="auth-refresh"),
    path("auth/logout/", LogoutView.as_view(), name="auth-logout"),
    path("auth/me/", MeView.as_view(), name="auth-me"),
    path("", include(router.urls)),
]
