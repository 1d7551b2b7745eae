"""Live status page."""

from mifigps.web.status import create_status_app, render_status_page

__all__ = ["create_status_app", "render_status_page"]
