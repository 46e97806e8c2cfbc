import json

import pytest

from tradie_hub.core.config import Settings
from tradie_hub.core.store import StoreNotFoundError
from tradie_hub.jobs import publish

PAGE = "<script>const tradiesData = [];</script><p>&copy; 2025 Perth Trades Hub. All rights reserved.</p>"


def _use_settings(monkeypatch, tmp_path):
    settings = Settings(
        google_places_api_key="",
        data_file=str(tmp_path / "tradies.json"),
        html_file=str(tmp_path / "index.html"),
    )
    monkeypatch.setattr(publish, "get_settings", lambda: settings)


def test_run_publish_job_embeds_store(monkeypatch, tmp_path):
    _use_settings(monkeypatch, tmp_path)
    (tmp_path / "index.html").write_text(PAGE)
    (tmp_path / "tradies.json").write_text(
        json.dumps({"tradies": [{"id": 1, "name": "Dr Sparky", "category": "electrician", "licensed": True}]})
    )

    records = publish.run_publish_job()

    html = (tmp_path / "index.html").read_text()
    assert records[0]["phone"] == "Contact via website"
    assert '"name": "Dr Sparky"' in html
    assert "Last updated:" in html


def test_run_publish_job_requires_store(monkeypatch, tmp_path):
    _use_settings(monkeypatch, tmp_path)
    (tmp_path / "index.html").write_text(PAGE)
    with pytest.raises(StoreNotFoundError):
        publish.run_publish_job()


def test_main_exits_non_zero_without_page(monkeypatch, tmp_path):
    _use_settings(monkeypatch, tmp_path)
    (tmp_path / "tradies.json").write_text(json.dumps({"tradies": []}))
    monkeypatch.setattr("sys.argv", ["tradies-publish"])

    with pytest.raises(SystemExit) as excinfo:
        publish.main()

    assert excinfo.value.code == 1
