"""REST API for the workflow service."""

from taskrep.api.app import create_api_app

__all__ = ["create_api_app"]
