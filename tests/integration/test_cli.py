import json
from datetime import datetime, timedelta, timezone

import pytest

from feedguard.cli_router import CLIRouter
from feedguard.core.config import Config
from feedguard.core.container import build_container
from feedguard.core.feed_fetcher import FeedFetcher

FEED_URL = "https://feeds.example.com/ai.xml"


@pytest.fixture
def container():
    return build_container(Config())


@pytest.fixture
def router(container):
    return CLIRouter(container)


def _write_outcomes(path, records):
    path.write_text("\n".join(json.dumps(r) for r in records) + "\n", encoding="utf-8")
    return path


def _outcomes():
    start = datetime.now(timezone.utc) - timedelta(minutes=5)
    records = []
    for i in range(6):
        timestamp = (start + timedelta(seconds=i)).isoformat()
        records.append({"source_id": "steady", "latency_ms": 1200, "success": True,
                        "quality": 85, "timestamp": timestamp})
        records.append({"source_id": "flaky", "latency_ms": 9000, "success": False,
                        "error": "HTTP 502", "timestamp": timestamp})
    return records


def test_replay_reports_open_circuits(router, container, tmp_path, capsys):
    outcomes = _write_outcomes(tmp_path / "outcomes.jsonl", _outcomes())

    exit_code = router.route_command(["feeds", "replay", "--file", str(outcomes)])

    assert exit_code == 0
    output = capsys.readouterr().out
    assert "Replayed 12 outcomes" in output
    assert "Open circuits: flaky" in output
    assert "flaky: OPEN" in output

    engine = container.get("engine")
    assert len(engine.metrics.history("steady")) == 6


def test_replay_with_sources_file(router, tmp_path, capsys):
    outcomes = _write_outcomes(tmp_path / "outcomes.jsonl", _outcomes())
    sources = tmp_path / "sources.json"
    sources.write_text(json.dumps([
        {"id": "steady", "name": "Steady Feed", "priority": 2},
        {"id": "flaky", "priority": 1},
        {"id": "paused", "priority": 1, "enabled": False},
    ]), encoding="utf-8")

    exit_code = router.route_command([
        "feeds", "replay", "--file", str(outcomes), "--sources-file", str(sources), "--max", "1",
    ])

    assert exit_code == 0
    output = capsys.readouterr().out
    recommended = output.split("Recommended:")[1]
    assert "Steady Feed" in recommended
    assert "paused" not in output.split("Fetch order:")[1]


def test_replay_missing_file(router, tmp_path):
    assert router.route_command(["feeds", "replay", "--file", str(tmp_path / "absent.jsonl")]) == 2


def test_replay_bad_line(router, tmp_path):
    outcomes = tmp_path / "outcomes.jsonl"
    outcomes.write_text('{"source_id": "a", "latency_ms": 10, "success": true}\nnot json\n', encoding="utf-8")

    assert router.route_command(["feeds", "replay", "--file", str(outcomes)]) == 2


def test_fetch_rounds(container, fake_session_factory, rss_factory, tmp_path, capsys):
    session = fake_session_factory({FEED_URL: rss_factory(items=2)})
    container.register_instance("feed_fetcher", FeedFetcher(container.get("engine"), session=session))
    sources = tmp_path / "sources.json"
    sources.write_text(json.dumps([{"id": "example", "url": FEED_URL, "priority": 1}]), encoding="utf-8")

    exit_code = CLIRouter(container).route_command([
        "feeds", "fetch", "--sources-file", str(sources), "--rounds", "2",
    ])

    assert exit_code == 0
    output = capsys.readouterr().out
    assert "Round 1: 1/1 feeds successful" in output
    assert "Round 2: 1/1 feeds successful" in output
    assert "(cached)" in output
    assert len(session.calls) == 1


def test_fetch_with_bad_sources_file(router, tmp_path):
    sources = tmp_path / "sources.json"
    sources.write_text('{"id": "not-a-list"}', encoding="utf-8")

    assert router.route_command(["feeds", "fetch", "--sources-file", str(sources)]) == 2


def test_no_command_prints_help(router, capsys):
    assert router.route_command([]) == 1
    assert "feedguard" in capsys.readouterr().out


def test_missing_subcommand(router):
    assert router.route_command(["feeds"]) == 1


def test_unknown_command_exits_with_usage_error(router):
    assert router.route_command(["bogus"]) == 2
