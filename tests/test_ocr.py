from __future__ import annotations

import logging
from pathlib import Path
from types import SimpleNamespace

import pytest

from conftest import FakeOcr
from pdfsanitizex import ocr as ocr_module
from pdfsanitizex.config import SanitizerConfig
from pdfsanitizex.exceptions import DocumentIOError, OcrDegradedError
from pdfsanitizex.ocr import (
    OcrMyPdf,
    OcrPostProcessor,
    PdfKitOcr,
    apply_ocr,
    default_ocr_strategies,
)


def test_fallback_copies_input_unchanged(monkeypatch: pytest.MonkeyPatch, sample_pdf: Path, tmp_path: Path) -> None:
    monkeypatch.setattr(ocr_module, "which", lambda executables: None)
    output = tmp_path / "out.pdf"

    outcome = OcrPostProcessor([OcrMyPdf()]).run(sample_pdf, output)

    assert outcome.degraded
    assert outcome.strategy == "copy"
    assert output.read_bytes() == sample_pdf.read_bytes()
    assert "pip install ocrmypdf" in outcome.warnings[0]


def test_apply_ocr_without_engines(monkeypatch: pytest.MonkeyPatch, sample_pdf: Path, tmp_path: Path) -> None:
    monkeypatch.setattr(ocr_module, "which", lambda executables: None)
    missing_helper = tmp_path / "missing.swift"
    config = SanitizerConfig(pdfkit_helper=missing_helper)
    output = tmp_path / "out.pdf"

    outcome = apply_ocr(sample_pdf, output, config=config)

    assert outcome.degraded
    assert output.read_bytes() == sample_pdf.read_bytes()


def test_first_successful_strategy_wins(sample_pdf: Path, tmp_path: Path) -> None:
    first = FakeOcr("first", fail=OcrDegradedError("engine crashed"))
    second = FakeOcr("second")
    third = FakeOcr("third")
    output = tmp_path / "out.pdf"

    outcome = OcrPostProcessor([first, second, third]).run(sample_pdf, output)

    assert outcome.strategy == "second"
    assert not outcome.degraded
    assert outcome.warnings == ["first: engine crashed"]
    assert output.read_bytes() == second.payload
    assert third.calls == []


def test_strategy_without_output_is_degraded(sample_pdf: Path, tmp_path: Path) -> None:
    class SilentOcr:
        name = "silent"

        def attempt(self, input_pdf: Path, output_pdf: Path) -> None:
            return None

    output = tmp_path / "out.pdf"

    outcome = OcrPostProcessor([SilentOcr()]).run(sample_pdf, output)

    assert outcome.degraded
    assert "no output" in outcome.warnings[0]


def test_strategy_with_empty_output_is_degraded(sample_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "out.pdf"

    outcome = OcrPostProcessor([FakeOcr("empty", payload=b"")]).run(sample_pdf, output)

    assert outcome.degraded
    assert output.read_bytes() == sample_pdf.read_bytes()


def test_failures_are_logged_as_warnings(
    caplog: pytest.LogCaptureFixture, sample_pdf: Path, tmp_path: Path
) -> None:
    failing = FakeOcr("broken", fail=OcrDegradedError("boom"))

    with caplog.at_level(logging.WARNING, logger="pdfsanitizex"):
        OcrPostProcessor([failing]).run(sample_pdf, tmp_path / "out.pdf")

    assert "broken" in caplog.text
    assert "Falling back to PDF without OCR" in caplog.text


def test_copy_failure_is_fatal(sample_pdf: Path, tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")

    with pytest.raises(DocumentIOError) as excinfo:
        OcrPostProcessor([]).run(sample_pdf, blocker / "out.pdf")

    assert excinfo.value.stage == "ocr"


def test_ocrmypdf_command(monkeypatch: pytest.MonkeyPatch, sample_pdf: Path, tmp_path: Path) -> None:
    called: list[list[str]] = []

    def fake_run(command: list[str], **_: object) -> SimpleNamespace:
        called.append(list(command))
        Path(command[-1]).write_bytes(b"%PDF-1.4 ocr")
        return SimpleNamespace(returncode=0, stdout=b"", stderr=b"")

    monkeypatch.setattr(ocr_module, "which", lambda executables: "/usr/bin/ocrmypdf")
    monkeypatch.setattr(ocr_module, "run_subprocess", fake_run)
    output = tmp_path / "out.pdf"

    outcome = OcrPostProcessor([OcrMyPdf()]).run(sample_pdf, output)

    assert outcome.strategy == "ocrmypdf"
    assert called == [["/usr/bin/ocrmypdf", "--redo-ocr", str(sample_pdf.resolve()), str(output.resolve())]]


def test_ocrmypdf_non_zero_exit(monkeypatch: pytest.MonkeyPatch, sample_pdf: Path, tmp_path: Path) -> None:
    def fake_run(command: list[str], **_: object) -> SimpleNamespace:
        return SimpleNamespace(returncode=2, stdout=b"", stderr=b"PriorOcrFoundError")

    monkeypatch.setattr(ocr_module, "which", lambda executables: "/usr/bin/ocrmypdf")
    monkeypatch.setattr(ocr_module, "run_subprocess", fake_run)

    with pytest.raises(OcrDegradedError) as excinfo:
        OcrMyPdf().attempt(sample_pdf, tmp_path / "out.pdf")

    assert "status 2" in str(excinfo.value)
    assert "PriorOcrFoundError" in str(excinfo.value)


def test_ocrmypdf_spawn_error(monkeypatch: pytest.MonkeyPatch, sample_pdf: Path, tmp_path: Path) -> None:
    def fake_run(command: list[str], **_: object) -> SimpleNamespace:
        raise PermissionError("not executable")

    monkeypatch.setattr(ocr_module, "which", lambda executables: "/usr/bin/ocrmypdf")
    monkeypatch.setattr(ocr_module, "run_subprocess", fake_run)

    with pytest.raises(OcrDegradedError):
        OcrMyPdf().attempt(sample_pdf, tmp_path / "out.pdf")


def test_pdfkit_uses_absolute_paths(monkeypatch: pytest.MonkeyPatch, sample_pdf: Path, tmp_path: Path) -> None:
    helper = tmp_path / "macos_ocr.swift"
    helper.write_text("// helper")
    called: list[list[str]] = []

    def fake_run(command: list[str], **_: object) -> SimpleNamespace:
        called.append(list(command))
        return SimpleNamespace(returncode=0, stdout=b"", stderr=b"")

    monkeypatch.setattr(ocr_module, "run_subprocess", fake_run)
    output = tmp_path / "out.pdf"

    PdfKitOcr(helper).attempt(sample_pdf, output)

    assert called == [["swift", str(helper), str(sample_pdf.resolve()), str(output.resolve())]]


def test_pdfkit_missing_helper(sample_pdf: Path, tmp_path: Path) -> None:
    with pytest.raises(OcrDegradedError):
        PdfKitOcr(tmp_path / "missing.swift").attempt(sample_pdf, tmp_path / "out.pdf")


def test_default_strategies_depend_on_platform() -> None:
    config = SanitizerConfig(ocrmypdf_args=("--force-ocr",))

    mac = default_ocr_strategies(config, platform="darwin")
    linux = default_ocr_strategies(config, platform="linux")

    assert [strategy.name for strategy in mac] == ["pdfkit", "ocrmypdf"]
    assert [strategy.name for strategy in linux] == ["ocrmypdf"]
    assert linux[0].args == ("--force-ocr",)


def test_stale_output_is_not_taken_for_ocr_result(sample_pdf: Path, tmp_path: Path) -> None:
    class SilentOcr:
        name = "silent"

        def attempt(self, input_pdf: Path, output_pdf: Path) -> None:
            return None

    output = tmp_path / "out.pdf"
    output.write_bytes(b"%PDF-1.4 previous conversion")

    outcome = OcrPostProcessor([SilentOcr()]).run(sample_pdf, output)

    assert outcome.degraded
    assert output.read_bytes() == sample_pdf.read_bytes()


def test_unexpected_strategy_error_is_contained(sample_pdf: Path, tmp_path: Path) -> None:
    crashing = FakeOcr("crashing", fail=RuntimeError("helper crashed"))
    working = FakeOcr("working")
    output = tmp_path / "out.pdf"

    outcome = OcrPostProcessor([crashing, working]).run(sample_pdf, output)

    assert outcome.strategy == "working"
    assert outcome.warnings == ["crashing: helper crashed"]


def test_unexpected_error_in_last_strategy_falls_back_to_copy(sample_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "out.pdf"

    outcome = OcrPostProcessor([FakeOcr("crashing", fail=RuntimeError("boom"))]).run(sample_pdf, output)

    assert outcome.degraded
    assert output.read_bytes() == sample_pdf.read_bytes()
