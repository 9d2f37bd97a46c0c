"""Tests for the Typer CLI against a mocked MusicBrainz."""

from __future__ import annotations

import json

import httpx
import pytest
from typer.testing import CliRunner

from songfinder import cli
from songfinder.cli import ExitCode, app
from songfinder.musicbrainz import MusicBrainzClient


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fake_musicbrainz(monkeypatch):
    """Route CLI clients to a handler; returns the handler's request log."""

    def _install(handler):
        def make_client(config):
            return MusicBrainzClient(
                base_url=config.musicbrainz.base_url,
                user_agent=config.musicbrainz.user_agent,
                transport=httpx.MockTransport(handler),
            )

        monkeypatch.setattr(cli, "make_client", make_client)

    return _install


def json_handler(payload, requests=None, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(status_code, json=payload)

    return handler


# parse


def test_parse_text(runner):
    result = runner.invoke(app, ["parse", 's:"hello world" aa:cook'])
    assert result.exit_code == 0
    assert "hello world" in result.stdout
    assert "cook" in result.stdout


def test_parse_json(runner):
    result = runner.invoke(app, ["-o", "json", "parse", 's:"hello world" aa:"ag cook" al:"pop 2"'])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"song": "hello world", "artist": "ag cook", "album": "pop 2"}


def test_parse_blank(runner):
    result = runner.invoke(app, ["-o", "json", "parse", "   "])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {}


# search


def test_search_json(runner, fake_musicbrainz, recording_search):
    requests: list[httpx.Request] = []
    fake_musicbrainz(json_handler(recording_search, requests))

    result = runner.invoke(app, ["-o", "json", "search", "--limit", "3", 's:"hello world" aa:"ag cook"'])

    assert result.exit_code == ExitCode.SUCCESS, result.output
    data = json.loads(result.stdout)
    assert [item["title"] for item in data] == ["Hello World", "Hello World (live)", "Hello"]
    assert data[1]["album_title"] == "Unknown Album"
    assert requests[0].url.params["query"] == 'artist:"ag cook" AND recording:"hello world"'
    assert requests[0].url.params["limit"] == "3"


def test_search_text_table(runner, fake_musicbrainz, recording_search, monkeypatch):
    monkeypatch.setenv("COLUMNS", "200")  # keep table cells on one line
    fake_musicbrainz(json_handler(recording_search))

    result = runner.invoke(app, ["search", "hello"])

    assert result.exit_code == ExitCode.SUCCESS, result.output
    assert "Hello World" in result.stdout
    assert "Pop 2" in result.stdout


def test_search_raw_artist(runner, fake_musicbrainz, artist_search):
    requests: list[httpx.Request] = []
    fake_musicbrainz(json_handler(artist_search, requests))

    result = runner.invoke(app, ["search", "--kind", "artist", "--raw", "ag cook"])

    assert result.exit_code == ExitCode.SUCCESS, result.output
    assert "A. G. Cook" in result.stdout
    assert requests[0].url.path == "/ws/2/artist"
    assert requests[0].url.params["query"] == "ag cook"


def test_search_records(runner, fake_musicbrainz, recording_search):
    fake_musicbrainz(json_handler(recording_search))

    result = runner.invoke(app, ["search", "--records", "--month", "2024-03", "hello"])

    assert result.exit_code == ExitCode.SUCCESS, result.output
    records = json.loads(result.stdout)
    assert records[0]["addedAt"] == "2024-03-01T12:00:00.000Z"
    assert records[0]["albumArt"].endswith("/front-250")
    assert records[1]["albumArt"] == "/default-album-art.jpg"


def test_search_invalid_month(runner, fake_musicbrainz, recording_search):
    fake_musicbrainz(json_handler(recording_search))
    result = runner.invoke(app, ["search", "--records", "--month", "March", "hello"])
    assert result.exit_code == ExitCode.ERROR


def test_search_no_results(runner, fake_musicbrainz):
    fake_musicbrainz(json_handler({"recordings": []}))
    result = runner.invoke(app, ["search", "nothing at all"])
    assert result.exit_code == ExitCode.NO_RESULTS


def test_search_provider_error(runner, fake_musicbrainz):
    fake_musicbrainz(json_handler({"error": "busy"}, status_code=503))
    result = runner.invoke(app, ["search", "hello"])
    assert result.exit_code == ExitCode.ERROR
    assert "503" in result.stdout


def test_search_transport_error(runner, fake_musicbrainz):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    fake_musicbrainz(handler)
    result = runner.invoke(app, ["search", "hello"])
    assert result.exit_code == ExitCode.ERROR


def test_invalid_config_reports_error(runner, fake_musicbrainz, recording_search, tmp_path):
    requests: list[httpx.Request] = []
    fake_musicbrainz(json_handler(recording_search, requests))
    config_path = tmp_path / "config.toml"
    config_path.write_text("[cover_art]\nsize = 300\n")

    result = runner.invoke(app, ["--config", str(config_path), "search", "s:x"])

    assert result.exit_code == ExitCode.ERROR
    assert not isinstance(result.exception, ValueError)
    assert "Invalid configuration" in result.stdout
    assert requests == []


# suggest


def test_suggest_sends_only_last_value(runner, fake_musicbrainz, artist_search):
    requests: list[httpx.Request] = []
    fake_musicbrainz(json_handler(artist_search, requests))

    result = runner.invoke(
        app,
        ["--quiet-window-ms", "100", "suggest", "--interval", "0", "artist", "a", "ag", "ag c"],
    )

    assert result.exit_code == ExitCode.SUCCESS, result.output
    assert len(requests) == 1
    assert requests[0].url.path == "/ws/2/artist"
    assert requests[0].url.params["query"] == "ag c"
    assert requests[0].url.params["limit"] == "5"
    assert "A. G. Cook" in result.stdout


def test_suggest_song_json(runner, fake_musicbrainz, recording_search):
    fake_musicbrainz(json_handler(recording_search))

    result = runner.invoke(
        app, ["-o", "json", "--quiet-window-ms", "10", "suggest", "song", "hel", "hello"]
    )

    assert result.exit_code == ExitCode.SUCCESS, result.output
    assert json.loads(result.stdout)[0]["title"] == "Hello World"


def test_suggest_blank_last_value(runner, fake_musicbrainz, artist_search):
    requests: list[httpx.Request] = []
    fake_musicbrainz(json_handler(artist_search, requests))

    result = runner.invoke(
        app, ["--quiet-window-ms", "100", "suggest", "--interval", "0", "artist", "ag", ""]
    )

    assert result.exit_code == ExitCode.NO_RESULTS
    assert requests == []


def test_suggest_error(runner, fake_musicbrainz):
    fake_musicbrainz(json_handler({}, status_code=500))
    result = runner.invoke(app, ["--quiet-window-ms", "10", "suggest", "album", "pop"])
    assert result.exit_code == ExitCode.ERROR
