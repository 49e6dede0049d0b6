import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from enrollment_ingest.main import main
from enrollment_ingest.ocr.orchestrator import OcrOrchestrator


@pytest.fixture(autouse=True)
def _quiet_memory_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.setenv("LOG_LEVEL", "CRITICAL")


class TestStressCommand:
    def test_prints_json_report(
        self, tmp_path: Path, receipt_text: str, capsys: pytest.CaptureFixture[str]
    ) -> None:
        (tmp_path / "a.png").write_bytes(b"img-a")
        (tmp_path / "b.jpg").write_bytes(b"img-b")
        ocr = MagicMock(spec=OcrOrchestrator)
        ocr.extract_text.return_value = receipt_text
        with patch(
            "enrollment_ingest.processor.processor.OcrOrchestratorFactory.create",
            return_value=ocr,
        ):
            code = main(["stress", str(tmp_path), "--mode", "batch", "--batch-size", "1"])

        report = json.loads(capsys.readouterr().out)
        assert code == 0
        assert report["mode"] == "batch"
        assert report["total_files"] == 2
        assert report["successful_files"] == 2
        assert [r["file_name"] for r in report["results"]] == ["a.png", "b.jpg"]

    def test_no_detailed_metrics_drops_results(
        self, tmp_path: Path, receipt_text: str, capsys: pytest.CaptureFixture[str]
    ) -> None:
        (tmp_path / "a.png").write_bytes(b"img-a")
        ocr = MagicMock(spec=OcrOrchestrator)
        ocr.extract_text.return_value = receipt_text
        with patch(
            "enrollment_ingest.processor.processor.OcrOrchestratorFactory.create",
            return_value=ocr,
        ):
            main(["stress", str(tmp_path), "--no-detailed-metrics"])

        report = json.loads(capsys.readouterr().out)
        assert report["mode"] == "parallel"
        assert report["results"] == []

    def test_rejects_directory_with_unsupported_files(self, tmp_path: Path) -> None:
        (tmp_path / "notes.txt").write_text("x")
        assert main(["stress", str(tmp_path)]) == 2

    def test_rejects_empty_directory(self, tmp_path: Path) -> None:
        assert main(["stress", str(tmp_path)]) == 2


class TestStatsCommand:
    def test_prints_process_stats(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["stats"]) == 0
        stats = json.loads(capsys.readouterr().out)
        assert stats["rss"].endswith("MB")
        assert "python_version" in stats
