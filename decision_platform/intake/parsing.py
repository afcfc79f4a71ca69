"""
Turns collaborator JSON payloads (camelCase, as stored by the app) into the
typed records the decision engine accepts.

This is where the input contract is enforced: the engine itself never
re-validates. Unknown intents become "attention", unknown actor types become
"unknown", and unknown secondary intents are dropped.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError as JsonSchemaValidationError

from decision_platform.errors import InputValidationError
from decision_platform.policy.types import (
    ACTOR_TYPES,
    INTENTS,
    AggregatedStats,
    DynamicState,
    EvaluationInput,
    MoneyPolicy,
    ParsedRequest,
    RequestParams,
    SupportPolicy,
    UserProfile,
)

logger = logging.getLogger("decision_platform.intake.parsing")

SCHEMA_PATH = Path(__file__).parent / "schemas" / "evaluation_input.schema.json"

with open(SCHEMA_PATH, encoding="utf-8") as f:
    EVALUATION_INPUT_SCHEMA = json.load(f)

DEFAULT_INTENT = "attention"
DEFAULT_ACTOR = "unknown"


def _validate(payload: Any, definition: Optional[str] = None) -> None:
    root = EVALUATION_INPUT_SCHEMA
    if definition is None:
        schema = root
    else:
        # Validate one sub-record against its $defs entry, keeping $refs resolvable.
        schema = {"$ref": f"#/$defs/{definition}", "$defs": root["$defs"]}

    try:
        Draft202012Validator(schema).validate(payload)
    except JsonSchemaValidationError as ve:
        raise InputValidationError(
            "Input validation failed",
            {
                "schema_id": root.get("$id"),
                "record": definition or "evaluationInput",
                "error": ve.message,
                "path": [str(p) for p in ve.path],
            },
        ) from ve


def _normalize_intent(value: Any) -> str:
    if value in INTENTS:
        return value
    logger.warning("Unrecognized intent %r; defaulting to %s", value, DEFAULT_INTENT)
    return DEFAULT_INTENT


def _normalize_actor(value: Any) -> str:
    if value in ACTOR_TYPES:
        return value
    if value is not None:
        logger.warning("Unrecognized actor type %r; defaulting to %s", value, DEFAULT_ACTOR)
    return DEFAULT_ACTOR


def _request_from_raw(raw: Dict[str, Any]) -> ParsedRequest:
    params_raw = raw.get("params") or {}
    params = RequestParams(
        amount=params_raw.get("amount"),
        return_date=params_raw.get("returnDate"),
        agenda=params_raw.get("agenda"),
        duration=params_raw.get("duration"),
        two_line_pitch=params_raw.get("twoLinePitch"),
    )

    secondary = tuple(i for i in (raw.get("secondaryIntents") or []) if i in INTENTS)

    return ParsedRequest(
        intent=_normalize_intent(raw.get("intent")),
        secondary_intents=secondary,
        actor_type=_normalize_actor(raw.get("actorType")),
        params=params,
        decision_pressure=bool(raw.get("decisionPressure") or False),
    )


def _profile_from_raw(raw: Dict[str, Any]) -> UserProfile:
    money_raw = raw.get("moneyPolicy") or {}
    support_raw = raw.get("supportPolicy") or {}

    money = MoneyPolicy(
        max_amount=money_raw.get("maxAmount"),
        require_return_date=bool(money_raw.get("requireReturnDate", True)),
        allowed_actors=frozenset(money_raw.get("allowedActors", [])),
    )
    support = SupportPolicy(
        max_weekly=int(support_raw.get("maxWeekly", 0)),
        allowed_actors=frozenset(support_raw.get("allowedActors", [])),
    )

    return UserProfile(
        user_id=raw.get("userId"),
        primary_role=raw["primaryRole"],
        secondary_role=raw.get("secondaryRole"),
        load_profile=raw["loadProfile"],
        money_policy=money,
        support_policy=support,
        hard_rules=tuple(raw.get("hardRules", [])),
        calendar_connected=bool(raw.get("calendarConnected", False)),
    )


def _state_from_raw(raw: Dict[str, Any]) -> DynamicState:
    return DynamicState(
        user_id=raw.get("userId"),
        energy_level=raw.get("energyLevel") or "green",
    )


def _stats_from_raw(raw: Dict[str, Any]) -> AggregatedStats:
    return AggregatedStats(
        daily_commitments=int(raw.get("dailyCommitments", 0)),
        weekly_money_requests=int(raw.get("weeklyMoneyRequests", 0)),
        weekly_time_blocks=int(raw.get("weeklyTimeBlocks", 0)),
        concurrent_projects=int(raw.get("concurrentProjects", 0)),
        weekly_support=int(raw.get("weeklySupport", 0)),
    )


def parse_request(payload: Dict[str, Any]) -> ParsedRequest:
    _validate(payload, "parsedRequest")
    return _request_from_raw(payload)


def parse_profile(payload: Dict[str, Any]) -> UserProfile:
    _validate(payload, "userProfile")
    return _profile_from_raw(payload)


def parse_state(payload: Dict[str, Any]) -> DynamicState:
    _validate(payload, "dynamicState")
    return _state_from_raw(payload)


def parse_stats(payload: Dict[str, Any]) -> AggregatedStats:
    _validate(payload, "aggregatedStats")
    return _stats_from_raw(payload)


def parse_evaluation_input(payload: Dict[str, Any]) -> EvaluationInput:
    """Validate a full decide payload and build the engine's input bundle."""
    _validate(payload)
    return EvaluationInput(
        request=_request_from_raw(payload["parsedRequest"]),
        profile=_profile_from_raw(payload["userProfile"]),
        state=_state_from_raw(payload.get("dynamicState") or {}),
        stats=_stats_from_raw(payload.get("aggregatedStats") or {}),
        calendar_available=payload.get("calendarAvailable"),
    )
