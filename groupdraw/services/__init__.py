"""Services for the group draw application."""

from groupdraw.services.draw_service import DrawService

__all__ = ["DrawService"]
