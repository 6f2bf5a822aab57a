"""
Scorecard exporter

Delivers a finished quiz: saves the scorecard image, builds share text and
the share link, and copies a summary with a short-lived "copied"
acknowledgement.
"""

import asyncio
import logging
import re
import webbrowser
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import quote

import httpx

from .config import config
from .quiz.schema import QuizState

logger = logging.getLogger(__name__)

TWITTER_INTENT_URL = "https://twitter.com/intent/tweet?text={text}"


def scorecard_filename(topic: Optional[str]) -> str:
    """nichenerd-<topic>.png, whitespace runs replaced by dashes."""
    slug = re.sub(r"\s+", "-", (topic or "score").strip()).lower() or "score"
    return f"nichenerd-{slug}.png"


class ScorecardExporter:
    """
    Download, share and copy a scorecard.

    Side effects go through injected callables so the presentation layer
    decides what "open" and "clipboard" mean.
    """

    def __init__(
        self,
        download_dir: Optional[str] = None,
        opener: Callable[[str], Any] = webbrowser.open,
        clipboard: Optional[Callable[[str], Any]] = None,
        ack_seconds: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            download_dir: Where downloaded scorecards are written
            opener: Opens a URL (browser tab, by default)
            clipboard: Writes text to the clipboard; copy_text only acknowledges when set
            ack_seconds: How long ``copied`` stays True
            client: HTTP client for downloads
        """
        self.download_dir = Path(download_dir or config.export.download_dir)
        self.opener = opener
        self.clipboard = clipboard
        self.ack_seconds = config.export.copied_ack_seconds if ack_seconds is None else ack_seconds
        self._client = client
        self.copied = False
        self._ack_handle: Optional[asyncio.TimerHandle] = None

    # ---------- Download ----------

    async def download(self, artifact_url: str, topic: Optional[str] = None) -> Optional[Path]:
        """
        Save the scorecard image locally.

        Falls back to opening the URL when the fetch or the write fails.

        Returns:
            Path of the saved file, or None when the fallback was used
        """
        if not artifact_url:
            return None

        target = self.download_dir / scorecard_filename(topic)
        try:
            if self._client is not None:
                response = await self._client.get(artifact_url)
            else:
                async with httpx.AsyncClient(follow_redirects=True) as client:
                    response = await client.get(artifact_url)
            response.raise_for_status()
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(response.content)
        except (httpx.HTTPError, OSError) as e:
            logger.warning(f"Scorecard download failed, opening in browser instead: {e}")
            self.opener(artifact_url)
            return None

        logger.debug(f"Scorecard saved to {target}")
        return target

    # ---------- Share ----------

    def share_text(self, final: Optional[QuizState], topic: Optional[str] = None) -> str:
        if final is None:
            return "Check out my NicheNerd score!"
        return (
            f"I scored {final.score}/{final.total} on {final.topic or topic or ''} "
            f"and earned the title \"{final.level_name}\"!"
        )

    def share_url(self, final: Optional[QuizState], topic: Optional[str] = None) -> str:
        text = f"{self.share_text(final, topic)}\n\n{config.export.share_hashtag_line}"
        return TWITTER_INTENT_URL.format(text=quote(text, safe=""))

    def share(self, final: Optional[QuizState], topic: Optional[str] = None) -> str:
        """Open the share link and return it."""
        url = self.share_url(final, topic)
        self.opener(url)
        return url

    # ---------- Copy ----------

    def copy_summary(self, final: Optional[QuizState], topic: Optional[str] = None) -> str:
        if final is None:
            return "Check out NicheNerd!"
        return (
            f"NicheNerd: I scored {final.score}/{final.total} on {final.topic or topic or ''}! "
            f"Level: {final.level_name} - \"{final.tagline}\""
        )

    async def copy_text(self, final: Optional[QuizState], topic: Optional[str] = None) -> str:
        """
        Copy the summary and raise the ``copied`` flag for ``ack_seconds``.

        Must be awaited inside a running event loop, which owns the reset timer.
        """
        text = self.copy_summary(final, topic)
        if self.clipboard is None:
            self.copied = False
            return text

        try:
            self.clipboard(text)
        except Exception as e:
            logger.warning(f"Clipboard write failed: {e}")
            self.copied = False
            return text

        self.copied = True
        if self._ack_handle is not None:
            self._ack_handle.cancel()
        self._ack_handle = asyncio.get_running_loop().call_later(self.ack_seconds, self._clear_copied)
        return text

    def _clear_copied(self):
        self.copied = False
        self._ack_handle = None
