"""
Decision Rule Sets

This module provides:
- Owned, versioned rule sets (create / list / get / update / delete)
- Ownership checks through an injectable policy
- Batch execution of active rule sets against data rows
- FastAPI routes with JWT-based caller identity
"""

from .models import (
    RuleSetStatus,
    ActionType,
    DecisionRuleSet,
    RuleSetPayload,
    ExecuteRequest,
    ExecuteResponse,
)
from .service import DecisionRuleService

__all__ = [
    "RuleSetStatus",
    "ActionType",
    "DecisionRuleSet",
    "RuleSetPayload",
    "ExecuteRequest",
    "ExecuteResponse",
    "DecisionRuleService",
]
