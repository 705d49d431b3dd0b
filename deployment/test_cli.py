#!/usr/bin/env python3
"""
Tests for the command line runner, notifications and the run record
"""

import json

import pytest
import requests
from unittest.mock import MagicMock, patch

from deployment.cli import main, run_plan
from deployment.config import NetworkConfig
from deployment.models import EventRecord
from deployment.notify import send_slack_alert

REGISTRY = "0x6F48C09d171F1526Bf88fA718bbe87e307e03EaF"

PLAN = {
    "resources": [
        {"name": "CompoundRegistry", "mode": "attach", "target": REGISTRY},
        {"name": "Compound", "constructorArgs": [{"ref": "CompoundRegistry"}]},
    ],
    "calls": [
        {"instanceRef": "CompoundRegistry", "call": "addCToken", "args": ["0xAAA", "0xBBB"],
         "verify": {"call": "getCToken", "args": ["0xAAA"]}},
    ],
}


@pytest.fixture
def plan_path(tmp_path):
    path = tmp_path / "plan.json"
    path.write_text(json.dumps(PLAN))
    return str(path)


class TestRunPlan:
    def test_deploys_then_configures(self, ledger, plan_path, tmp_path):
        ledger.events["addCToken"] = [EventRecord(name="CTokenAdded")]
        ledger.values["getCToken"] = "0xBBB"
        record = tmp_path / "deployment.json"
        config = NetworkConfig(network="localhost", record_path=str(record))

        instances, results = run_plan(plan_path, config, ledger=ledger)

        assert instances["Compound"].created
        assert ledger.submissions[0] == ("create", "Compound", [REGISTRY])
        assert results[0].verified == "0xBBB"

        written = json.loads(record.read_text())
        assert written["contracts"]["CompoundRegistry"] == REGISTRY
        assert written["created"] == ["Compound"]
        assert written["calls"][0]["event"] == "CTokenAdded"

    def test_no_record_by_default(self, ledger, plan_path, tmp_path):
        ledger.events["addCToken"] = [EventRecord(name="CTokenAdded")]
        run_plan(plan_path, NetworkConfig(), ledger=ledger)
        assert not (tmp_path / "deployment.json").exists()


class TestMain:
    @pytest.fixture(autouse=True)
    def env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DEPLOY_LOG", str(tmp_path / "deployment.log"))
        monkeypatch.setenv("SLACK_WEBHOOK", "https://hooks.slack.test/x")
        monkeypatch.delenv("DEPLOYMENT_RECORD", raising=False)

    def test_exit_zero_on_success(self, ledger, plan_path):
        ledger.events["addCToken"] = [EventRecord(name="CTokenAdded")]
        with patch("deployment.cli.Ledger", return_value=ledger), \
                patch("deployment.notify.requests.post") as post:
            assert main([plan_path]) == 0
        assert "finished" in post.call_args[1]["json"]["text"]

    def test_exit_one_on_abort(self, ledger, plan_path):
        ledger.reject["Compound"] = "insufficient balance"
        with patch("deployment.cli.Ledger", return_value=ledger), \
                patch("deployment.notify.requests.post") as post:
            assert main([plan_path]) == 1
        assert "insufficient balance" in post.call_args[1]["json"]["text"]
        assert not any(s[0] == "call" for s in ledger.submissions)

    def test_exit_one_on_bad_config(self, monkeypatch, plan_path):
        monkeypatch.setenv("GAS", "lots")
        with patch("deployment.cli.Ledger") as ledger_cls:
            assert main([plan_path]) == 1
        ledger_cls.assert_not_called()

    def test_exit_one_on_bad_plan(self, tmp_path):
        with patch("deployment.notify.requests.post"):
            assert main([str(tmp_path / "missing.json")]) == 1


class TestSlackAlert:
    def test_skipped_without_webhook(self):
        with patch("deployment.notify.requests.post") as post:
            assert send_slack_alert(None, "done") is False
        post.assert_not_called()

    def test_failure_is_not_raised(self):
        with patch("deployment.notify.requests.post",
                   side_effect=requests.exceptions.ConnectionError("down")):
            assert send_slack_alert("https://hooks.slack.test/x", "done") is False

    def test_posts_message(self):
        with patch("deployment.notify.requests.post", return_value=MagicMock()) as post:
            assert send_slack_alert("https://hooks.slack.test/x", "done", "goerli") is True
        assert post.call_args[1]["json"]["text"] == "Escrow deployment (goerli): done"
