"""
Decision Rules Engine Package

Provides condition evaluation with loose value coercion, AND/OR rule item
matching, and priority-ordered resolution of one action per data row.
"""

from .coercion import MISSING, loose_equals, to_number, to_string
from .rule_engine import (
    NO_MATCH,
    RuleEngine,
    RuleSet,
    RuleItem,
    Condition,
    ConditionResult,
    Action,
    ConditionOperator,
    LogicalOperator,
    RowEvaluation,
)

__all__ = [
    "MISSING",
    "NO_MATCH",
    "RuleEngine",
    "RuleSet",
    "RuleItem",
    "Condition",
    "ConditionResult",
    "Action",
    "ConditionOperator",
    "LogicalOperator",
    "RowEvaluation",
    "loose_equals",
    "to_number",
    "to_string",
]
