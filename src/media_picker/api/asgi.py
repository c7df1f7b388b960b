"""ASGI entrypoint for the media picker API."""

from media_picker.api.app import create_app
from media_picker.containers import build_container

app = create_app(build_container())
