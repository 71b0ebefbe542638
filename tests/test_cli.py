"""Tests for the command-line triggers."""

import json

import pytest

from conftest import FailingStore, seed_example
from ourarchive_stats import cli
from ourarchive_stats.aggregators import StatsAggregator


def test_run_prints_snapshot(monkeypatch, capsys, aggregator):
    monkeypatch.setattr(cli, "get_aggregator", lambda: aggregator)

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["run"])

    assert exc_info.value.code == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["userCount"] == 3
    assert printed["itemTypes"] == {"box": 2, "unknown": 1, "bin": 1}


def test_run_exits_nonzero_on_failure(monkeypatch, clock):
    store = FailingStore("count", "users")
    seed_example(store)
    monkeypatch.setattr(cli, "get_aggregator", lambda: StatsAggregator(store, clock=clock))

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["run"])

    assert exc_info.value.code == 1
    assert store.writes == []


def test_serve_defaults_from_settings():
    args = cli.build_parser().parse_args(["serve"])

    assert args.host == "0.0.0.0"
    assert args.port == 8080
    assert args.func is cli.cmd_serve
