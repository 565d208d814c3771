import json

import httpx
import pytest

from tools.coveo_export import load_results, main
from app.coveo_client import ExportError


class FakeResponse:
    def __init__(self, payload):
        self._payload = payload
        self.status_code = 200
    def raise_for_status(self):
        pass
    def json(self):
        return self._payload


def test_from_json_writes_csv(tmp_path, capsys, sample_ranking_info):
    src = tmp_path / "response.json"
    src.write_text(json.dumps({"results": [
        {"title": "Manual", "rankingInfo": sample_ranking_info},
        {"title": "Other"},
    ]}), encoding="utf-8")
    out_dir = tmp_path / "out"

    path = main(["--from-json", str(src), "--out-dir", str(out_dir)])

    assert path.parent == out_dir
    assert path.name.startswith("coveo_export_") and path.name.endswith(".csv")
    lines = path.read_text(encoding="utf-8").split("\n")
    assert len(lines) == 3
    assert lines[1].startswith('"Manual",')
    out = capsys.readouterr().out
    assert "Rows exported: 2" in out


def test_request_mode_replays_capture(tmp_path, monkeypatch):
    req = tmp_path / "request.json"
    req.write_text(json.dumps({
        "url": "https://platform.example.com/coveo/rest/search/v2",
        "headers": {"Authorization": "Bearer t"},
        "body": "q=printer",
    }), encoding="utf-8")

    seen = {}
    def fake_post(url, headers=None, content=None, timeout=None):
        seen["content"] = content
        return FakeResponse({"results": [{"title": "a"}]})

    monkeypatch.setattr(httpx, "post", fake_post)
    path = main(["--request", str(req), "--count", "7", "--out-dir", str(tmp_path)])

    assert "numberOfResults=7" in seen["content"]
    assert path.read_text(encoding="utf-8").split("\n")[1].startswith('"a",')


def test_load_results_requires_results(tmp_path):
    src = tmp_path / "bad.json"
    src.write_text(json.dumps({"totalCount": 0}), encoding="utf-8")
    with pytest.raises(ExportError):
        load_results(str(src))
