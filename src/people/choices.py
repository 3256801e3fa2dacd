from django.db import models


class Level(models.TextChoices):
    AUTHOR = "author", "Author"
    EDITOR = "editor", "Editor"
    ADMIN = "admin", "Admin"


EDITORIAL_LEVELS = (Level.EDITOR, Level.ADMIN)
ALL_LEVELS = tuple(Level)
