"""ASGI entrypoint for the baby tracker API."""

from baby_tracker.api.app import create_app
from baby_tracker.containers import build_container

app = create_app(build_container())
