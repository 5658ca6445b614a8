"""Guard workforce platform.

Feature modules (attendance, gps, patrols, registration, ...) each pair a thin
Flask controller with service and repository layers; `main.create_app` wires
them together.
"""
from .main import create_app

__all__ = ["create_app"]
