"""
Tests for scorecard download, share and copy.
"""

import asyncio
from urllib.parse import unquote

import httpx
import pytest

from nichenerd.exporter import ScorecardExporter, scorecard_filename
from nichenerd.quiz.schema import QuizState, SAMPLE_FINAL


CARD_URL = "https://cdn.example/card.png"


def stub_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestDownload:
    """Tests for saving the scorecard image."""

    def test_filename(self):
        assert scorecard_filename("Mechanical Keyboards") == "nichenerd-mechanical-keyboards.png"
        assert scorecard_filename("  Deep   Sea  ") == "nichenerd-deep-sea.png"
        assert scorecard_filename(None) == "nichenerd-score.png"

    @pytest.mark.asyncio
    async def test_download_saves_file(self, tmp_path):
        opened = []
        exporter = ScorecardExporter(
            download_dir=str(tmp_path),
            opener=opened.append,
            client=stub_client(lambda request: httpx.Response(200, content=b"\x89PNG fake")),
        )

        path = await exporter.download(CARD_URL, "Mechanical Keyboards")

        assert path == tmp_path / "nichenerd-mechanical-keyboards.png"
        assert path.read_bytes() == b"\x89PNG fake"
        assert opened == []

    @pytest.mark.asyncio
    async def test_download_falls_back_to_opener(self, tmp_path):
        """Test a failed fetch opens the image URL instead."""
        opened = []
        exporter = ScorecardExporter(
            download_dir=str(tmp_path),
            opener=opened.append,
            client=stub_client(lambda request: httpx.Response(403)),
        )

        path = await exporter.download(CARD_URL, "Mechanical Keyboards")

        assert path is None
        assert opened == [CARD_URL]
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_connection_error_falls_back(self, tmp_path):
        def handler(request):
            raise httpx.ConnectError("offline", request=request)

        opened = []
        exporter = ScorecardExporter(download_dir=str(tmp_path), opener=opened.append, client=stub_client(handler))

        assert await exporter.download(CARD_URL) is None
        assert opened == [CARD_URL]

    @pytest.mark.asyncio
    async def test_empty_url(self, tmp_path):
        opened = []
        exporter = ScorecardExporter(download_dir=str(tmp_path), opener=opened.append)

        assert await exporter.download("") is None
        assert opened == []


class TestShare:
    """Tests for share text and link."""

    def test_share_text(self):
        exporter = ScorecardExporter()

        assert exporter.share_text(SAMPLE_FINAL) == (
            'I scored 8/10 on Mechanical Keyboards and earned the title "Keeb Sensei"!'
        )

    def test_share_text_uses_chosen_topic(self):
        final = QuizState(message="done", is_complete=True, score=3, total=10, level_name="Novice")

        assert "on Opera Trivia" in ScorecardExporter().share_text(final, "Opera Trivia")

    def test_share_text_without_result(self):
        assert ScorecardExporter().share_text(None) == "Check out my NicheNerd score!"

    def test_share_url(self):
        url = ScorecardExporter().share_url(SAMPLE_FINAL)

        assert url.startswith("https://twitter.com/intent/tweet?text=")
        text = unquote(url.split("text=", 1)[1])
        assert text == (
            'I scored 8/10 on Mechanical Keyboards and earned the title "Keeb Sensei"!'
            "\n\nHow deep does YOUR knowledge go? #NicheNerd"
        )
        assert " " not in url
        assert "#" not in url

    def test_share_opens_link(self):
        opened = []
        exporter = ScorecardExporter(opener=opened.append)

        url = exporter.share(SAMPLE_FINAL)

        assert opened == [url]


class TestCopy:
    """Tests for copying the summary."""

    def test_copy_summary(self):
        summary = ScorecardExporter().copy_summary(SAMPLE_FINAL)

        assert summary == (
            f'NicheNerd: I scored 8/10 on Mechanical Keyboards! Level: Keeb Sensei - "{SAMPLE_FINAL.tagline}"'
        )

    def test_copy_summary_without_result(self):
        assert ScorecardExporter().copy_summary(None) == "Check out NicheNerd!"

    @pytest.mark.asyncio
    async def test_copied_flag_resets(self):
        """Test the acknowledgement clears itself after the delay."""
        clipboard = []
        exporter = ScorecardExporter(clipboard=clipboard.append, ack_seconds=0.02)

        text = await exporter.copy_text(SAMPLE_FINAL)

        assert clipboard == [text]
        assert exporter.copied is True

        await asyncio.sleep(0.1)
        assert exporter.copied is False

    @pytest.mark.asyncio
    async def test_repeat_copy_restarts_timer(self):
        exporter = ScorecardExporter(clipboard=lambda text: None, ack_seconds=0.1)

        await exporter.copy_text(SAMPLE_FINAL)
        await asyncio.sleep(0.06)
        await exporter.copy_text(SAMPLE_FINAL)
        await asyncio.sleep(0.06)

        assert exporter.copied is True

        await asyncio.sleep(0.1)
        assert exporter.copied is False

    @pytest.mark.asyncio
    async def test_no_clipboard(self):
        exporter = ScorecardExporter()

        text = await exporter.copy_text(SAMPLE_FINAL)

        assert text.startswith("NicheNerd:")
        assert exporter.copied is False

    @pytest.mark.asyncio
    async def test_clipboard_failure(self):
        def broken(text):
            raise RuntimeError("no display")

        exporter = ScorecardExporter(clipboard=broken)

        await exporter.copy_text(SAMPLE_FINAL)

        assert exporter.copied is False
