"""API clients for the group draw application."""

from groupdraw.clients.gemini import CommentaryClient, CommentaryFailure, get_commentary_client

__all__ = ["CommentaryClient", "CommentaryFailure", "get_commentary_client"]
