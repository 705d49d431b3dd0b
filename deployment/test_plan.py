#!/usr/bin/env python3
"""
Tests for plan loading, including the plans shipped in scripts/plans
"""

import os
import json

import pytest

from deployment.cli import PLANS_DIR
from deployment.errors import PlanError
from deployment.models import Mode, Ref
from deployment.plan import load_plan, parse_plan, parse_value


class TestParseValue:
    def test_literals_pass_through(self):
        assert parse_value("0xAAA") == "0xAAA"
        assert parse_value(10) == 10

    def test_refs(self):
        assert parse_value({"ref": "Compound"}) == Ref("Compound")
        assert parse_value({"ref": "addMapping", "field": "key"}) == Ref("addMapping", "key")
        assert parse_value([{"ref": "A"}, 1]) == [Ref("A"), 1]

    def test_unknown_object_rejected(self):
        with pytest.raises(PlanError):
            parse_value({"address": "0xAAA"})


class TestParsePlan:
    def test_attach_requires_target(self):
        with pytest.raises(PlanError, match="no target"):
            parse_plan({"resources": [{"name": "Registry", "mode": "attach"}]})

    def test_unknown_mode(self):
        with pytest.raises(PlanError, match="unknown mode"):
            parse_plan({"resources": [{"name": "Registry", "mode": "upgrade"}]})

    def test_call_requires_instance(self):
        with pytest.raises(PlanError):
            parse_plan({"calls": [{"call": "addCToken"}]})

    def test_not_an_object(self):
        with pytest.raises(PlanError):
            parse_plan([])

    def test_mode_defaults_to_create(self):
        plan = parse_plan({"resources": [{"name": "A"}]})
        assert plan.resources[0].mode is Mode.CREATE
        assert plan.calls == []


class TestLoadPlan:
    def test_missing_file(self, tmp_path):
        with pytest.raises(PlanError):
            load_plan(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "plan.json"
        path.write_text("{not json")
        with pytest.raises(PlanError):
            load_plan(str(path))

    def test_round_trip_from_file(self, tmp_path):
        path = tmp_path / "plan.json"
        path.write_text(json.dumps({"resources": [{"name": "A"}, {"name": "B", "constructorArgs": [{"ref": "A"}]}]}))
        plan = load_plan(str(path))
        assert plan.resources[1].constructor_args == [Ref("A")]


class TestShippedPlans:
    def test_deploy_plan(self):
        plan = load_plan(os.path.join(PLANS_DIR, "deploy.json"))
        names = [spec.name for spec in plan.resources]
        assert names == ["CompoundRegistry", "Compound", "LFGlobalEscrow"]
        assert plan.resources[0].mode is Mode.ATTACH
        assert plan.resources[0].probe == "owner"
        assert plan.resources[2].constructor_args == [Ref("Compound")]

    def test_fresh_registry_plan(self):
        plan = load_plan(os.path.join(PLANS_DIR, "deploy_fresh.json"))
        assert all(spec.mode is Mode.CREATE for spec in plan.resources)
        assert plan.resources[1].constructor_args == [Ref("CompoundRegistry")]

    def test_bootstrap_plan(self):
        plan = load_plan(os.path.join(PLANS_DIR, "bootstrap.json"))
        call = plan.calls[0]
        assert call.instance_ref == "CompoundRegistry"
        assert call.call == "addCToken"
        assert call.event is None
        assert call.verify.call == "getCToken"


class TestDeployScript:
    def test_known_registry_by_default(self, monkeypatch):
        from scripts.deploy import DEPLOY_PLAN, plan_path
        monkeypatch.delenv("DEPLOY_FRESH_REGISTRY", raising=False)
        assert plan_path() == DEPLOY_PLAN

    def test_fresh_registry_switch(self, monkeypatch):
        from scripts.deploy import FRESH_REGISTRY_PLAN, plan_path
        monkeypatch.setenv("DEPLOY_FRESH_REGISTRY", "true")
        assert plan_path() == FRESH_REGISTRY_PLAN
