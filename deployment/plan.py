"""
Deployment plans: JSON files listing the resources to deploy or attach and
the configuration calls to make afterwards.

    {
      "resources": [
        {"name": "CompoundRegistry", "mode": "attach", "target": "0x6F48...", "probe": "owner"},
        {"name": "Compound", "mode": "create", "constructorArgs": [{"ref": "CompoundRegistry"}]}
      ],
      "calls": [
        {"instanceRef": "CompoundRegistry", "call": "addCToken",
         "args": ["0x0000...", "0x4ddc..."], "verify": {"call": "getCToken", "args": ["0x0000..."]}}
      ]
    }
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .errors import PlanError
from .models import ConfigurationCall, Mode, ReadBack, Ref, ResourceSpec


@dataclass
class Plan:
    resources: List[ResourceSpec] = field(default_factory=list)
    calls: List[ConfigurationCall] = field(default_factory=list)


def parse_value(value: Any) -> Any:
    """Turn ``{"ref": name, "field"?: f}`` objects into Refs, recursing into lists."""
    if isinstance(value, dict):
        if set(value) - {"ref", "field"} or "ref" not in value:
            raise PlanError(f"argument objects must look like {{'ref': name}}, got {value}")
        return Ref(name=value["ref"], field=value.get("field"))
    if isinstance(value, list):
        return [parse_value(item) for item in value]
    return value


def _require(entry: Dict[str, Any], key: str, kind: str):
    if not entry.get(key):
        raise PlanError(f"{kind} entry {entry} is missing '{key}'")
    return entry[key]


def parse_resource(entry: Dict[str, Any]) -> ResourceSpec:
    name = _require(entry, "name", "resource")
    try:
        mode = Mode(entry.get("mode", "create").lower())
    except ValueError:
        raise PlanError(f"resource '{name}' has unknown mode '{entry.get('mode')}'")
    return ResourceSpec(
        name=name,
        mode=mode,
        constructor_args=[parse_value(arg) for arg in entry.get("constructorArgs", [])],
        target=entry.get("target"),
        contract=entry.get("contract"),
        probe=entry.get("probe"),
    )


def parse_call(entry: Dict[str, Any]) -> ConfigurationCall:
    verify = None
    if entry.get("verify"):
        verify = ReadBack(
            call=_require(entry["verify"], "call", "verify"),
            args=[parse_value(arg) for arg in entry["verify"].get("args", [])],
        )
    return ConfigurationCall(
        instance_ref=_require(entry, "instanceRef", "call"),
        call=_require(entry, "call", "call"),
        args=[parse_value(arg) for arg in entry.get("args", [])],
        event=entry.get("event"),
        verify=verify,
        name=entry.get("name"),
    )


def parse_plan(data: Dict[str, Any]) -> Plan:
    if not isinstance(data, dict):
        raise PlanError("a plan must be a JSON object with 'resources' and optional 'calls'")
    return Plan(
        resources=[parse_resource(entry) for entry in data.get("resources", [])],
        calls=[parse_call(entry) for entry in data.get("calls", [])],
    )


def load_plan(path: str) -> Plan:
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise PlanError(f"Could not read plan from {path}: {e}") from e
    return parse_plan(data)
