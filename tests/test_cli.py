"""Tests for the photo_picker CLI."""

from __future__ import annotations

import json

import httpx
import pytest
from typer.testing import CliRunner

from photo_picker import cli

runner = CliRunner()

PIXABAY_BODY = {
    "total": 2,
    "totalHits": 2,
    "hits": [
        {
            "id": 11,
            "tags": "eiffel tower",
            "previewURL": "https://cdn.pixabay.com/11_150.jpg",
            "webformatURL": "https://pixabay.com/get/11_640.jpg",
            "largeImageURL": "https://pixabay.com/get/11_1280.jpg",
            "imageWidth": 1920,
            "imageHeight": 1280,
        },
        {
            "id": 12,
            "tags": "seine",
            "previewURL": "https://cdn.pixabay.com/12_150.jpg",
            "webformatURL": "https://pixabay.com/get/12_640.jpg",
            "largeImageURL": "",
        },
    ],
}


def _handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/api/":
        if request.url.params.get("page") != "1":
            return httpx.Response(200, json={"total": 2, "totalHits": 2, "hits": []})
        return httpx.Response(200, json=PIXABAY_BODY)
    return httpx.Response(200, content=b"jpeg", headers={"content-type": "image/jpeg"})


@pytest.fixture
def fake_http(monkeypatch):
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return _handler(request)

    def _build_client(timeout: float = 25.0, **kwargs) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    monkeypatch.setattr(cli, "build_client", _build_client)
    return requests


class TestProviders:
    def test_lists_providers_and_credentials(self, monkeypatch):
        monkeypatch.setenv("PEXELS_API_KEY", "pk")
        result = runner.invoke(cli.app, ["providers"])
        assert result.exit_code == 0
        assert "pixabay (default): configured" in result.output
        assert "unsplash: missing key" in result.output
        assert "pexels: configured" in result.output


class TestStatus:
    def test_counts(self, write_csv):
        path = write_csv("city,country,filename\nParis,France,p.jpg\nRome,Italy,\nOslo,Norway,\nNice,France,\n")
        result = runner.invoke(cli.app, ["status", "--csv", str(path)])

        assert result.exit_code == cli.EXIT_DEGRADED
        assert "total: 4" in result.output
        assert "done: 1" in result.output
        assert "remaining: 3" in result.output
        assert "  F: 1" in result.output
        assert "  I: 1" in result.output

    def test_complete_list(self, write_csv):
        path = write_csv("city,country,filename\nParis,France,p.jpg\n")
        result = runner.invoke(cli.app, ["status", "--csv", str(path)])
        assert result.exit_code == cli.EXIT_OK

    def test_missing_file(self, tmp_path):
        result = runner.invoke(cli.app, ["status", "--csv", str(tmp_path / "nope.csv")])
        assert result.exit_code == cli.EXIT_STORE


class TestSearch:
    def test_prints_payload(self, fake_http):
        result = runner.invoke(cli.app, ["search", "Paris France", "--per-page", "80"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["total"] == 2
        assert [h["id"] for h in payload["hits"]] == ["11", "12"]
        assert payload["hits"][0]["fullUrl"] == "https://pixabay.com/get/11_1280.jpg"
        assert fake_http[0].url.params["per_page"] == "50"

    def test_missing_key(self, fake_http):
        result = runner.invoke(cli.app, ["search", "Paris", "--source", "unsplash"])
        assert result.exit_code == cli.EXIT_CONFIG
        assert fake_http == []

    def test_unknown_source(self, fake_http):
        result = runner.invoke(cli.app, ["search", "Paris", "--source", "flickr"])
        assert result.exit_code == cli.EXIT_CONFIG

    def test_upstream_failure(self, monkeypatch):
        def _build_client(timeout: float = 25.0, **kwargs) -> httpx.AsyncClient:
            return httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500)))

        monkeypatch.setattr(cli, "build_client", _build_client)
        result = runner.invoke(cli.app, ["search", "Paris"])
        assert result.exit_code == cli.EXIT_UPSTREAM


class TestPick:
    def test_pick_downloads_and_updates_csv(self, write_csv, tmp_path, fake_http):
        path = write_csv("city,country,filename\nParis,France,\n")
        output = tmp_path / "out"

        result = runner.invoke(cli.app, ["pick", "--csv", str(path), "--output", str(output)], input="1\n")

        assert result.exit_code == 0, result.output
        assert "[1/1] Paris, France" in result.output
        assert "1) eiffel tower  [1920x1280]" in result.output
        assert "All locations are complete" in result.output
        assert path.read_text(encoding="utf-8") == "city,country,filename\nParis,France,paris-france-11.jpg\n"
        assert (output / "paris-france-11.jpg").read_bytes() == b"jpeg"
        assert str(fake_http[-1].url) == "https://pixabay.com/get/11_1280.jpg"
        assert (output / "meta" / "picks.jsonl").exists()

    def test_medium_url_used_when_full_missing(self, write_csv, tmp_path, fake_http):
        path = write_csv("city,country,filename\nParis,France,\n")
        result = runner.invoke(cli.app, ["pick", "--csv", str(path), "--output", str(tmp_path)], input="2\n")

        assert result.exit_code == 0, result.output
        assert str(fake_http[-1].url) == "https://pixabay.com/get/12_640.jpg"

    def test_skip_and_quit(self, write_csv, tmp_path, fake_http):
        original = "city,country,filename\nParis,France,\nRome,Italy,\n"
        path = write_csv(original)
        result = runner.invoke(
            cli.app, ["pick", "--csv", str(path), "--output", str(tmp_path)], input="s\nq\n"
        )

        assert result.exit_code == 0, result.output
        assert "[2/2] Rome, Italy" in result.output
        assert path.read_text(encoding="utf-8") == original

    def test_filter_without_matches(self, write_csv, tmp_path, fake_http):
        path = write_csv("city,country,filename\nParis,France,\n")
        result = runner.invoke(
            cli.app, ["pick", "--csv", str(path), "--output", str(tmp_path), "--letter", "z"]
        )

        assert result.exit_code == 0, result.output
        assert "No matches for filter 'Z'" in result.output
        assert fake_http == []

    def test_missing_provider_key_is_shown(self, write_csv, tmp_path, fake_http):
        path = write_csv("city,country,filename\nParis,France,\n")
        result = runner.invoke(
            cli.app,
            ["pick", "--csv", str(path), "--output", str(tmp_path), "--provider", "pexels"],
            input="q\n",
        )

        assert result.exit_code == 0, result.output
        assert "No images available now" in result.output
        assert "PEXELS_API_KEY" in result.output

    def test_unknown_provider(self, write_csv, tmp_path):
        path = write_csv("city,country,filename\nParis,France,\n")
        result = runner.invoke(
            cli.app, ["pick", "--csv", str(path), "--output", str(tmp_path), "--provider", "flickr"]
        )
        assert result.exit_code == cli.EXIT_CONFIG

    def test_end_of_input_interrupts(self, write_csv, tmp_path, fake_http):
        path = write_csv("city,country,filename\nParis,France,\n")
        result = runner.invoke(cli.app, ["pick", "--csv", str(path), "--output", str(tmp_path)], input="")
        assert result.exit_code == cli.EXIT_DEGRADED
