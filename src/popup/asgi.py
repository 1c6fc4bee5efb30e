"""ASGI config for the PopUp POS backend."""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "popup.settings")

application = get_asgi_application()
