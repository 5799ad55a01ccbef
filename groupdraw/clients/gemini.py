"""Gemini client producing commentary on finished draws."""

import logging
from typing import Optional
from functools import lru_cache

import httpx

from groupdraw import config
from groupdraw.models import Group

logger = logging.getLogger(__name__)

NO_API_KEY_MESSAGE = "Commentary is unavailable: no API key is configured."
FAILURE_MESSAGE = "Commentary failed. Please try again later."
EMPTY_MESSAGE = "No commentary available."

DRAW_PROMPT = """\
The 2026 FIFA World Cup draw is complete! These are the groups:
{groups}

Analyse the draw:
1. The group of death (the toughest group)
2. The easiest group
3. A dark horse (a team likely to cause an upset)

Answer as a short markdown list. Be energetic, like a commentator talking to
excited football fans!
"""

GROUP_PROMPT = """\
World Cup 2026, group {name}: {teams}.

In three or four sentences, preview this group: who should go through, which
match is the one to watch, and who could surprise.
"""


class CommentaryFailure(Exception):
    """The commentary model could not produce a summary."""
    pass


def _group_line(group: Group) -> str:
    return f"Group {group.name}: {', '.join(team.name for team in group.teams)}"


class CommentaryClient:
    """Async client for the Gemini generateContent API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the API client.

        Args:
            api_key: Gemini API key (default GEMINI_API_KEY)
            model: Model name (default GEMINI_MODEL)
            base_url: API root (default GEMINI_BASE_URL)
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        self.api_key = config.GEMINI_API_KEY if api_key is None else api_key
        self.model = model or config.GEMINI_MODEL
        self.base_url = (base_url or config.GEMINI_BASE_URL).rstrip("/")
        self.timeout = timeout or config.COMMENTARY_TIMEOUT_SECONDS
        self._transport = transport

    async def _generate(self, prompt: str) -> str:
        """Send a prompt and return the generated text.

        Raises:
            CommentaryFailure: On HTTP errors or an unexpected response
        """
        url = f"{self.base_url}/models/{self.model}:generateContent"
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        headers = {"x-goog-api-key": self.api_key}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(url, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise CommentaryFailure(f"Gemini request failed: {e}") from e

        try:
            candidates = data.get("candidates") or []
            if not candidates:
                return ""
            parts = (candidates[0].get("content") or {}).get("parts") or []
            return "".join(part.get("text", "") for part in parts).strip()
        except (AttributeError, TypeError, KeyError) as e:
            raise CommentaryFailure(f"Unexpected Gemini response: {e}") from e

    async def _summarize(self, prompt: str) -> str:
        if not self.api_key:
            return NO_API_KEY_MESSAGE
        try:
            text = await self._generate(prompt)
        except CommentaryFailure as e:
            logger.error(f"Commentary failed: {e}")
            return FAILURE_MESSAGE
        return text or EMPTY_MESSAGE

    async def summarize_draw(self, groups: list[Group]) -> str:
        """Commentary on the whole draw.

        Args:
            groups: The finished groups

        Returns:
            Markdown text, or a fallback message if the model is unavailable
        """
        logger.info("Requesting commentary for %d groups", len(groups))
        summary = "\n".join(_group_line(group) for group in groups)
        return await self._summarize(DRAW_PROMPT.format(groups=summary))

    async def summarize_group(self, group: Group) -> str:
        """Preview of a single group."""
        logger.info(f"Requesting commentary for group {group.name}")
        teams = ", ".join(team.name for team in group.teams)
        return await self._summarize(GROUP_PROMPT.format(name=group.name, teams=teams))


# Global client instance
_client: Optional[CommentaryClient] = None


@lru_cache
def get_commentary_client() -> CommentaryClient:
    """Get the global commentary client instance."""
    global _client
    if _client is None:
        _client = CommentaryClient()
    return _client
