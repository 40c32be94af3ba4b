"""REST API consumed by the dashboard front end."""

from finz.api.app import create_app

__all__ = ["create_app"]
