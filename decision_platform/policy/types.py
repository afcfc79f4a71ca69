from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Literal, Optional, Tuple


Intent = Literal[
    "money",
    "time",
    "attention",
    "work-change",
    "support",
    "intro",
    "errand",
    "decision-pressure",
    "emotional-load",
]
ActorType = Literal["friend", "client", "team", "family", "unknown"]
Role = Literal["creator", "manager", "expert", "helper", "executor"]
LoadProfile = Literal["A", "B", "C"]
EnergyLevel = Literal["green", "yellow", "red"]

DecisionType = Literal["ALLOW", "DEFER", "FORBID"]
# CONDITIONAL only exists in the role x intent matrix; it applies as DEFER.
MatrixVerdict = Literal["ALLOW", "DEFER", "FORBID", "CONDITIONAL"]

INTENTS: Tuple[str, ...] = (
    "money",
    "time",
    "attention",
    "work-change",
    "support",
    "intro",
    "errand",
    "decision-pressure",
    "emotional-load",
)
ACTOR_TYPES: Tuple[str, ...] = ("friend", "client", "team", "family", "unknown")
ROLES: Tuple[str, ...] = ("creator", "manager", "expert", "helper", "executor")
LOAD_PROFILES: Tuple[str, ...] = ("A", "B", "C")
ENERGY_LEVELS: Tuple[str, ...] = ("green", "yellow", "red")

ALLOW: DecisionType = "ALLOW"
DEFER: DecisionType = "DEFER"
FORBID: DecisionType = "FORBID"
CONDITIONAL: MatrixVerdict = "CONDITIONAL"


class ReasonCode:
    PRESSURE_DETECTED = "PRESSURE_DETECTED"
    ROLE_INTENT_FORBID = "ROLE_INTENT_FORBID"
    ROLE_INTENT_CONDITIONAL = "ROLE_INTENT_CONDITIONAL"
    ENERGY_RED = "ENERGY_RED"
    ENERGY_YELLOW = "ENERGY_YELLOW"
    DAILY_LIMIT_REACHED = "DAILY_LIMIT_REACHED"
    WEEKLY_MONEY_LIMIT = "WEEKLY_MONEY_LIMIT"
    WEEKLY_TIME_LIMIT = "WEEKLY_TIME_LIMIT"
    PROJECT_LIMIT_REACHED = "PROJECT_LIMIT_REACHED"
    ACTOR_NOT_ALLOWED_FOR_MONEY = "ACTOR_NOT_ALLOWED_FOR_MONEY"
    MISSING_RETURN_DATE = "MISSING_RETURN_DATE"
    EXCEEDS_MAX_AMOUNT = "EXCEEDS_MAX_AMOUNT"
    MISSING_DURATION = "MISSING_DURATION"
    MISSING_PITCH = "MISSING_PITCH"
    ACTOR_NOT_ALLOWED_FOR_SUPPORT = "ACTOR_NOT_ALLOWED_FOR_SUPPORT"
    CALENDAR_NOT_CONNECTED = "CALENDAR_NOT_CONNECTED"
    NO_CALENDAR_SLOT = "NO_CALENDAR_SLOT"

    @staticmethod
    def hard_rule_match(rule: str) -> str:
        return f"HARD_RULE_MATCH:{rule}"


class TemplateKey:
    ALLOW_DEFAULT = "allow_default"
    DEFER_NEED_TIME = "defer_need_time"
    DEFER_NEED_INFO = "defer_need_info"
    FORBID_POLICY = "forbid_policy"
    FORBID_ENERGY = "forbid_energy"
    FORBID_NO_CAPACITY = "forbid_no_capacity"
    MONEY_FORBID = "money_forbid"
    MONEY_DEFER = "money_defer"
    INTRO_NEED_PITCH = "intro_need_pitch"


# Every key the gate pipeline can emit; the catalog must define all of them.
REQUIRED_TEMPLATE_KEYS: Tuple[str, ...] = (
    TemplateKey.ALLOW_DEFAULT,
    TemplateKey.DEFER_NEED_TIME,
    TemplateKey.DEFER_NEED_INFO,
    TemplateKey.FORBID_POLICY,
    TemplateKey.FORBID_ENERGY,
    TemplateKey.FORBID_NO_CAPACITY,
    TemplateKey.MONEY_FORBID,
    TemplateKey.MONEY_DEFER,
    TemplateKey.INTRO_NEED_PITCH,
)


@dataclass(frozen=True)
class RequestParams:
    amount: Optional[float] = None
    return_date: Optional[str] = None      # ISO date string
    agenda: Optional[str] = None
    duration: Optional[float] = None       # minutes
    two_line_pitch: Optional[str] = None


@dataclass(frozen=True)
class ParsedRequest:
    """Structured request handed over by the parsing collaborator."""
    intent: Intent
    actor_type: ActorType = "unknown"
    params: RequestParams = field(default_factory=RequestParams)
    decision_pressure: bool = False
    secondary_intents: Tuple[Intent, ...] = ()


@dataclass(frozen=True)
class MoneyPolicy:
    allowed_actors: FrozenSet[ActorType] = frozenset()
    require_return_date: bool = True
    max_amount: Optional[float] = None


@dataclass(frozen=True)
class SupportPolicy:
    allowed_actors: FrozenSet[ActorType] = frozenset()
    max_weekly: int = 0


@dataclass(frozen=True)
class UserProfile:
    primary_role: Role
    load_profile: LoadProfile
    money_policy: MoneyPolicy = field(default_factory=MoneyPolicy)
    support_policy: SupportPolicy = field(default_factory=SupportPolicy)
    hard_rules: Tuple[str, ...] = ()       # case-insensitive substring blockers, in order
    calendar_connected: bool = False
    secondary_role: Optional[Role] = None
    user_id: Optional[str] = None


@dataclass(frozen=True)
class DynamicState:
    energy_level: EnergyLevel = "green"
    user_id: Optional[str] = None


@dataclass(frozen=True)
class AggregatedStats:
    """Counts of active (pending/confirmed) commitments in the rolling windows."""
    daily_commitments: int = 0
    weekly_money_requests: int = 0
    weekly_time_blocks: int = 0
    concurrent_projects: int = 0
    weekly_support: int = 0


@dataclass(frozen=True)
class EvaluationInput:
    request: ParsedRequest
    profile: UserProfile
    state: DynamicState
    stats: AggregatedStats
    calendar_available: Optional[bool] = None


@dataclass(frozen=True)
class DecisionResult:
    result: DecisionType
    reason_codes: Tuple[str, ...]
    template_key: str
    requires_calendar: bool = False

    def to_json(self) -> Dict[str, Any]:
        return {
            "result": self.result,
            "reasonCodes": list(self.reason_codes),
            "templateKey": self.template_key,
            "requiresCalendar": self.requires_calendar,
        }
