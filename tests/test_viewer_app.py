import json
from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

APP = Path(__file__).resolve().parents[1] / "xlsx_gallery" / "viewer_app.py"


@pytest.fixture
def data_file(tmp_path, monkeypatch):
	path = tmp_path / "data.json"
	path.write_text(json.dumps([
		{"name": "Acme", "type": "Tool", "website": "https://acme.example", "description": "", "image": "data:image/png;base64,AAA="},
		{"name": "Globex", "type": "Service", "website": "", "description": "Consulting", "image": ""},
		{"name": "Initech", "type": "", "website": "", "description": "", "image": ""},
	]), encoding="utf-8")
	monkeypatch.setenv("XLSX_GALLERY_DATA", str(path))
	return path


def _app() -> AppTest:
	at = AppTest.from_file(str(APP), default_timeout=30)
	at.run()
	return at


def test_renders_controls_and_cards(data_file):
	at = _app()
	assert not at.exception
	assert not at.error
	labels = [b.label for b in at.button if b.key.startswith("filter-")]
	assert labels == ["All", "Tool", "Service"]
	assert [s.value for s in at.subheader] == ["Acme", "Globex", "Initech"]
	assert [c.value for c in at.caption].count("No image") == 2


def test_filter_button_narrows_grid(data_file):
	at = _app()
	at.button(key="filter-1").click().run()
	assert [s.value for s in at.subheader] == ["Acme"]
	at.button(key="filter-0").click().run()
	assert len(at.subheader) == 3


def test_detail_panel_navigation(data_file):
	at = _app()
	at.button(key="card-0").click().run()
	assert at.header[0].value == "Acme"
	at.button(key="detail-next").click().run()
	assert at.header[0].value == "Globex"
	assert "Consulting" in [t.value for t in at.text]
	at.button(key="detail-close").click().run()
	assert len(at.header) == 0


def test_load_failure_replaces_controls(tmp_path, monkeypatch):
	monkeypatch.setenv("XLSX_GALLERY_DATA", str(tmp_path / "missing.json"))
	at = _app()
	assert len(at.error) == 1
	assert "Could not load" in at.error[0].value
	assert len(at.button) == 0
	assert len(at.subheader) == 0


def test_record_text_is_shown_as_written(tmp_path, monkeypatch):
	path = tmp_path / "data.json"
	path.write_text(json.dumps([
		{"name": "Costs $5 *new*", "type": "# 1 vendor", "description": "Costs $5 to $10, *not* italic"},
	]), encoding="utf-8")
	monkeypatch.setenv("XLSX_GALLERY_DATA", str(path))
	at = _app()
	assert at.subheader[0].value == r"Costs \$5 \*new\*"
	assert "# 1 vendor" in [t.value for t in at.text]
	at.button(key="card-0").click().run()
	assert at.header[0].value == r"Costs \$5 \*new\*"
	assert "Costs $5 to $10, *not* italic" in [t.value for t in at.text]
	assert "Costs $5 to $10, *not* italic" not in [m.value for m in at.markdown]
