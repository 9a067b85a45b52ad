import logging
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import uuid4

from rules.rule_engine import RuleEngine, RuleSet

from .models import (
    RuleSetStatus,
    DecisionRuleSet,
    RuleSetPayload,
    ExecuteRequest,
    ExecuteResponse,
    RowResult,
)

logger = logging.getLogger(__name__)

OwnershipPolicy = Callable[[str, str], bool]


class DecisionServiceError(Exception):
    pass


class RuleSetNotFoundError(DecisionServiceError):
    pass


class RuleSetAccessDeniedError(DecisionServiceError):
    pass


class NoActiveRulesError(DecisionServiceError):
    pass


def owner_matches(caller: str, owner: str) -> bool:
    """Default ownership policy: the caller identity must equal the stored owner."""
    return caller == owner


class InMemoryStorage:
    def __init__(self):
        self.rule_sets: dict[str, dict] = {}


class DecisionRuleService:
    def __init__(
        self,
        storage: Optional[InMemoryStorage] = None,
        engine: Optional[RuleEngine] = None,
        ownership_policy: OwnershipPolicy = owner_matches,
    ):
        self.storage = storage or InMemoryStorage()
        self.engine = engine or RuleEngine()
        self.ownership_policy = ownership_policy

    def fetch_active_rule_sets(self, rule_set_ids: Optional[list[str]] = None) -> list[DecisionRuleSet]:
        wanted = set(rule_set_ids) if rule_set_ids else None
        return [
            DecisionRuleSet(**data) for data in list(self.storage.rule_sets.values())
            if data["status"] == RuleSetStatus.ACTIVE and (wanted is None or data["id"] in wanted)
        ]

    def list_rule_sets(self, owner: str) -> list[DecisionRuleSet]:
        # newest insertion first, so equal timestamps still come out newest-first
        rule_sets = [
            DecisionRuleSet(**data) for data in reversed(list(self.storage.rule_sets.values()))
            if self.ownership_policy(owner, data["created_by"])
        ]
        rule_sets.sort(key=lambda r: r.created_at, reverse=True)
        return rule_sets

    def get_rule_set(self, rule_set_id: str, owner: str) -> DecisionRuleSet:
        return DecisionRuleSet(**self._get_owned(rule_set_id, owner))

    def create_rule_set(self, payload: RuleSetPayload, owner: str) -> DecisionRuleSet:
        now = datetime.now(timezone.utc)
        rule_set = DecisionRuleSet(
            **payload.model_dump(),
            id=str(uuid4()),
            created_by=owner,
            version=1,
            created_at=now,
            updated_at=now,
        )
        self.storage.rule_sets[rule_set.id] = rule_set.model_dump()
        logger.info("Created rule set %s (%r) for %s", rule_set.id, rule_set.name, owner)
        return rule_set

    def update_rule_set(self, rule_set_id: str, payload: RuleSetPayload, caller: str) -> DecisionRuleSet:
        existing = self._get_owned(rule_set_id, caller)
        updated = {
            **existing,
            **payload.model_dump(),
            "version": existing.get("version", 1) + 1,
            "updated_at": datetime.now(timezone.utc),
        }
        self.storage.rule_sets[rule_set_id] = updated
        logger.info("Updated rule set %s to version %d", rule_set_id, updated["version"])
        return DecisionRuleSet(**updated)

    def delete_rule_set(self, rule_set_id: str, caller: str) -> None:
        self._get_owned(rule_set_id, caller)
        del self.storage.rule_sets[rule_set_id]
        logger.info("Deleted rule set %s", rule_set_id)

    def execute(self, request: ExecuteRequest) -> ExecuteResponse:
        rule_sets = [RuleSet.from_dict(r.model_dump()) for r in self.fetch_active_rule_sets(request.rule_ids)]
        if not any(rule_set.items for rule_set in rule_sets):
            raise NoActiveRulesError("No active rules found")

        evaluations = self.engine.execute(request.data, rule_sets)
        matched = sum(1 for e in evaluations if e.success)
        logger.info(
            "Evaluated %d rows against %d rule sets: %d matched, %d without match",
            len(evaluations), len(rule_sets), matched, len(evaluations) - matched,
        )
        return ExecuteResponse(results=[RowResult(**e.to_dict()) for e in evaluations])

    def _get_owned(self, rule_set_id: str, caller: str) -> dict:
        data = self.storage.rule_sets.get(rule_set_id)
        if not data:
            raise RuleSetNotFoundError(f"Rule set {rule_set_id} not found")
        if not self.ownership_policy(caller, data["created_by"]):
            logger.warning("Rejected access to rule set %s by %s", rule_set_id, caller)
            raise RuleSetAccessDeniedError(f"Access denied to rule set {rule_set_id}")
        return data
