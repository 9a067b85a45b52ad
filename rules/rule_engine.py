import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Union
from uuid import uuid4

from .coercion import MISSING, loose_equals, to_number, to_string

logger = logging.getLogger(__name__)

NO_MATCH = "No match"


class ConditionOperator(str, Enum):
    EQUALS = "=="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    LESS_THAN = "<"
    GREATER_THAN_OR_EQUAL = ">="
    LESS_THAN_OR_EQUAL = "<="
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    IN = "in"
    NOT_IN = "notIn"


class LogicalOperator(str, Enum):
    AND = "AND"
    OR = "OR"


def new_id() -> str:
    return str(uuid4())


def resolve_field(row: Mapping[str, Any], field_path: str) -> Any:
    """Look up a column by its exact key; absent keys yield MISSING."""
    return row[field_path] if field_path in row else MISSING


def _parse_operator(value: Any) -> Union[ConditionOperator, str]:
    try:
        return ConditionOperator(value)
    except ValueError:
        return value


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class ConditionResult:
    matched: bool
    error: Optional[str] = None


@dataclass
class Condition:
    field: str
    operator: Union[ConditionOperator, str]
    value: Any = None
    id: str = field(default_factory=new_id)

    def check(self, row: Mapping[str, Any]) -> ConditionResult:
        try:
            field_value = resolve_field(row, self.field)
            return ConditionResult(matched=self._apply_operator(field_value, self.value))
        except Exception as e:
            logger.warning("Condition %s on field %r failed to evaluate: %s", self.id, self.field, e)
            return ConditionResult(matched=False, error=str(e))

    def evaluate(self, row: Mapping[str, Any]) -> bool:
        return self.check(row).matched

    def _apply_operator(self, field_value: Any, compare_value: Any) -> bool:
        op = self.operator
        if op == ConditionOperator.EQUALS: return loose_equals(field_value, compare_value)
        if op == ConditionOperator.NOT_EQUALS: return not loose_equals(field_value, compare_value)
        if op == ConditionOperator.GREATER_THAN: return to_number(field_value) > to_number(compare_value)
        if op == ConditionOperator.LESS_THAN: return to_number(field_value) < to_number(compare_value)
        if op == ConditionOperator.GREATER_THAN_OR_EQUAL: return to_number(field_value) >= to_number(compare_value)
        if op == ConditionOperator.LESS_THAN_OR_EQUAL: return to_number(field_value) <= to_number(compare_value)
        if op == ConditionOperator.CONTAINS: return to_string(compare_value).lower() in to_string(field_value).lower()
        if op == ConditionOperator.STARTS_WITH: return to_string(field_value).lower().startswith(to_string(compare_value).lower())
        if op == ConditionOperator.ENDS_WITH: return to_string(field_value).lower().endswith(to_string(compare_value).lower())
        if op == ConditionOperator.IN: return self._is_member(field_value, compare_value)
        if op == ConditionOperator.NOT_IN: return not self._is_member(field_value, compare_value)
        return False

    @staticmethod
    def _is_member(field_value: Any, compare_value: Any) -> bool:
        candidates = compare_value if isinstance(compare_value, (list, tuple)) else [compare_value]
        return any(loose_equals(field_value, candidate) for candidate in candidates)

    def to_dict(self) -> dict:
        return {"id": self.id, "field": self.field, "operator": _enum_value(self.operator), "value": self.value}

    @classmethod
    def from_dict(cls, data: dict) -> "Condition":
        return cls(
            id=data.get("id") or new_id(), field=data["field"],
            operator=_parse_operator(data["operator"]), value=data.get("value"),
        )


@dataclass
class Action:
    value: Any = None
    type: str = "custom"
    target_field: Optional[str] = None
    description: Optional[str] = None
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id, "type": _enum_value(self.type), "value": self.value,
            "target_field": self.target_field, "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Action":
        return cls(
            id=data.get("id") or new_id(), value=data.get("value"), type=data.get("type") or "custom",
            target_field=data.get("target_field"), description=data.get("description"),
        )


@dataclass
class RuleItem:
    name: str
    conditions: list[Condition] = field(default_factory=list)
    actions: list[Action] = field(default_factory=list)
    priority: Union[int, float] = 0
    logic_operator: LogicalOperator = LogicalOperator.AND
    id: str = field(default_factory=new_id)

    def matches(self, row: Mapping[str, Any]) -> bool:
        if not self.conditions:
            return True
        results = (condition.evaluate(row) for condition in self.conditions)
        return all(results) if self.logic_operator == LogicalOperator.AND else any(results)

    @classmethod
    def from_dict(cls, data: dict) -> "RuleItem":
        return cls(
            id=data.get("id") or new_id(), name=data["name"],
            conditions=[Condition.from_dict(c) for c in data.get("conditions") or []],
            actions=[Action.from_dict(a) for a in data.get("actions") or []],
            priority=data.get("priority") or 0,
            logic_operator=LogicalOperator(data.get("logic_operator") or LogicalOperator.AND),
        )


@dataclass
class RuleSet:
    id: str
    name: str
    items: list[RuleItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "RuleSet":
        return cls(id=data["id"], name=data["name"], items=[RuleItem.from_dict(r) for r in data.get("rules") or []])


@dataclass
class RuleMatch:
    rule_set_id: str
    rule_set_name: str
    rule_item_name: str
    conditions: list[Condition]
    actions: list[Action]
    priority: Union[int, float]
    logic_operator: LogicalOperator

    def to_dict(self) -> dict:
        return {
            "rule_set_id": self.rule_set_id, "rule_set_name": self.rule_set_name,
            "rule_item_name": self.rule_item_name,
            "conditions": [c.to_dict() for c in self.conditions],
            "actions": [a.to_dict() for a in self.actions],
            "priority": self.priority, "logic_operator": self.logic_operator.value,
        }


@dataclass
class RowEvaluation:
    data: Mapping[str, Any]
    matched_rules: list[RuleMatch]
    final_action: Any

    @property
    def success(self) -> bool:
        return len(self.matched_rules) > 0

    def to_dict(self) -> dict:
        return {
            "data": dict(self.data), "matched_rules": [m.to_dict() for m in self.matched_rules],
            "final_action": self.final_action, "success": self.success,
        }


class RuleEngine:
    """Stateless evaluator: runs every rule item of every rule set against each row."""

    def evaluate_row(self, row: Mapping[str, Any], rule_sets: Iterable[RuleSet]) -> RowEvaluation:
        matches = []
        for rule_set in rule_sets:
            for item in rule_set.items:
                if item.matches(row):
                    matches.append(RuleMatch(
                        rule_set_id=rule_set.id, rule_set_name=rule_set.name, rule_item_name=item.name,
                        conditions=item.conditions, actions=item.actions,
                        priority=item.priority, logic_operator=item.logic_operator,
                    ))
        # list.sort is stable, so equal priorities keep scan order
        matches.sort(key=lambda m: m.priority, reverse=True)
        return RowEvaluation(data=row, matched_rules=matches, final_action=self.resolve_action(matches))

    def execute(self, rows: Iterable[Mapping[str, Any]], rule_sets: Iterable[RuleSet]) -> list[RowEvaluation]:
        rule_sets = list(rule_sets)
        return [self.evaluate_row(row, rule_sets) for row in rows]

    @staticmethod
    def resolve_action(matches: list[RuleMatch]) -> Any:
        if not matches:
            return NO_MATCH
        top = matches[0]
        return top.actions[0].value if top.actions else None
