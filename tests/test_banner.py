"""Tests for folio.banner — producer startup output."""

from pathlib import Path

import pytest

from folio.banner import print_banner
from folio.config import FolioConfig


class TestPrintBanner:
    """print_banner writes a summary to stderr."""

    def test_counts_and_snapshot_path(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = FolioConfig(root=tmp_path, live_update=False)
        print_banner(config, 3, record_count=10)
        err = capsys.readouterr().err
        assert "Folio" in err
        assert "3 pages from 10 records" in err
        assert str(tmp_path / ".snapshot-cache.json") in err
        assert "live updates off" in err

    def test_singular_labels(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        print_banner(FolioConfig(root=tmp_path, live_update=False), 1, record_count=1)
        assert "1 page from 1 record" in capsys.readouterr().err

    def test_live_url(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = FolioConfig(root=tmp_path, live_update=True, live_update_ws_port=9100)
        print_banner(config, 0)
        assert "ws://127.0.0.1:9100/live-updates" in capsys.readouterr().err

    def test_watching_and_warnings(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = FolioConfig(root=tmp_path, live_update=False)
        print_banner(config, 0, watching=True, warnings=["2 records dropped"])
        err = capsys.readouterr().err
        assert "Watching for changes..." in err
        assert "2 records dropped" in err

    def test_nothing_on_stdout(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        print_banner(FolioConfig(root=tmp_path, live_update=False), 0)
        assert capsys.readouterr().out == ""
