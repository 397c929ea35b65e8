from __future__ import annotations

import tempfile
from pathlib import Path
from types import SimpleNamespace

from docrender.pipeline.render_preview import render_previews


class DummyPixmap:
    def save(self, path: str) -> None:
        Path(path).write_text("preview", encoding="utf-8")


class DummyPage:
    rect = SimpleNamespace(width=595.0, height=842.0)

    def get_pixmap(self, matrix=None, alpha=True) -> DummyPixmap:  # noqa: ARG002 - signature matches fitz
        return DummyPixmap()


class DummyDoc:
    def __init__(self, page_count: int = 5) -> None:
        self.page_count = page_count
        self.closed = False

    def __enter__(self) -> "DummyDoc":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001 - test helper
        self.closed = True

    def load_page(self, index: int) -> DummyPage:  # noqa: ARG002 - test helper
        return DummyPage()


def test_render_previews_closes_document(monkeypatch) -> None:
    doc = DummyDoc()
    opened = []

    def fake_open(*args, **kwargs) -> DummyDoc:
        opened.append((args, kwargs))
        return doc

    with tempfile.TemporaryDirectory() as temp_dir:
        monkeypatch.setattr("docrender.pipeline.render_preview.fitz.open", fake_open)
        previews = render_previews(b"%PDF-1.4", "sample", base_dir=Path(temp_dir))
        assert doc.closed is True
        assert len(previews) == 3
        assert all(path.exists() for path in previews)
        assert previews[0] == Path(temp_dir) / "sample" / "preview_1.png"
    assert opened[0][1]["filetype"] == "pdf"


def test_render_previews_stops_at_last_page(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr("docrender.pipeline.render_preview.fitz.open", lambda *args, **kwargs: DummyDoc(1))
    previews = render_previews(tmp_path / "sample.pdf", "sample", base_dir=tmp_path, include_slug=False)
    assert previews == [tmp_path / "preview_1.png"]
