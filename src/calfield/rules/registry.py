from __future__ import annotations
from typing import Dict, List

from .base import FieldRule

_REGISTRY: Dict[str, FieldRule] = {}


def register_rule(rule: FieldRule, *, overwrite: bool = False) -> FieldRule:
    if (not overwrite) and (rule.id in _REGISTRY) and (_REGISTRY[rule.id] is not rule):
        raise KeyError(f"Rule '{rule.id}' already exists. Use overwrite=True to replace.")
    _REGISTRY[rule.id] = rule
    return rule


def rule_for_id(rule_id: str) -> FieldRule:
    if rule_id not in _REGISTRY:
        raise KeyError(f"Unknown rule '{rule_id}'. Available: {sorted(_REGISTRY)}")
    return _REGISTRY[rule_id]


def rule_for_name(name: str, *, chronology: str = "ISO") -> FieldRule:
    return rule_for_id(f"{chronology}.{name}")


def list_rules() -> List[str]:
    return sorted(_REGISTRY.keys())


def all_rules() -> List[FieldRule]:
    return sorted(_REGISTRY.values(), key=lambda r: r.order_key)
