from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from rules.rule_engine import ConditionOperator, LogicalOperator, new_id


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase JSON; either spelling is accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RuleSetStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class ActionType(str, Enum):
    ASSIGN = "assign"
    NOTIFY = "notify"
    APPROVE = "approve"
    REJECT = "reject"
    CUSTOM = "custom"


class ConditionModel(CamelModel):
    id: str = Field(default_factory=new_id)
    field: str = Field(..., min_length=1, description="Column key in the data row")
    operator: ConditionOperator
    value: Any = None


class ActionModel(CamelModel):
    id: str = Field(default_factory=new_id)
    type: ActionType = ActionType.CUSTOM
    value: str
    target_field: Optional[str] = None
    description: Optional[str] = None


class RuleItemModel(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str
    conditions: list[ConditionModel] = Field(default_factory=list)
    logic_operator: LogicalOperator = LogicalOperator.AND
    actions: list[ActionModel] = Field(default_factory=list)
    priority: Union[int, float] = 0


class RuleSetPayload(CamelModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    rules: list[RuleItemModel] = Field(default_factory=list)
    status: RuleSetStatus = RuleSetStatus.ACTIVE
    associated_bpmn_processes: list[str] = Field(default_factory=list)

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "name": "Invoice routing",
                "status": "active",
                "rules": [{
                    "name": "Large invoices",
                    "logicOperator": "AND",
                    "priority": 5,
                    "conditions": [{"field": "amount", "operator": ">", "value": 1000}],
                    "actions": [{"type": "assign", "value": "escalate"}],
                }],
            }
        },
    )


class DecisionRuleSet(RuleSetPayload):
    id: str
    created_by: str
    version: int = Field(default=1, ge=1)
    created_at: datetime
    updated_at: datetime


class ExecuteRequest(CamelModel):
    data: list[dict[str, Any]] = Field(..., min_length=1, description="Rows to evaluate")
    rule_ids: Optional[list[str]] = Field(None, description="Restrict evaluation to these rule sets")


class MatchedRule(CamelModel):
    rule_set_id: str
    rule_set_name: str
    rule_item_name: str
    conditions: list[ConditionModel]
    actions: list[ActionModel]
    priority: Union[int, float]
    logic_operator: LogicalOperator


class RowResult(CamelModel):
    data: dict[str, Any]
    matched_rules: list[MatchedRule]
    final_action: Optional[str] = None
    success: bool


class ExecuteResponse(CamelModel):
    results: list[RowResult]


class RuleSetResponse(CamelModel):
    rule: DecisionRuleSet


class RuleSetListResponse(CamelModel):
    rules: list[DecisionRuleSet]


class MessageResponse(CamelModel):
    message: str
