"""
The six decision gates.

Each gate reads the evaluation context and either returns None (continue with
the next gate) or a terminal DecisionResult that ends evaluation. Gates only
touch the context through its verdict, reason codes, template key and
requires_calendar flag; they never call each other. Order lives in GATES.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from decision_platform.policy.config import PolicyCatalog
from decision_platform.policy.types import (
    ALLOW,
    CONDITIONAL,
    DEFER,
    FORBID,
    AggregatedStats,
    DecisionResult,
    DecisionType,
    DynamicState,
    ParsedRequest,
    ReasonCode,
    TemplateKey,
    UserProfile,
)


@dataclass
class EvaluationContext:
    catalog: PolicyCatalog
    request: ParsedRequest
    profile: UserProfile
    state: DynamicState
    stats: AggregatedStats
    calendar_available: Optional[bool] = None

    verdict: DecisionType = ALLOW
    reason_codes: List[str] = field(default_factory=list)
    template_key: Optional[str] = None     # set only when a gate fixes a specific template
    requires_calendar: bool = False

    def terminate(
        self,
        result: DecisionType,
        template_key: str,
        requires_calendar: bool = False,
    ) -> DecisionResult:
        return DecisionResult(
            result=result,
            reason_codes=tuple(self.reason_codes),
            template_key=template_key,
            requires_calendar=requires_calendar,
        )


Gate = Callable[[EvaluationContext], Optional[DecisionResult]]


def _hard_rule_matches(rule: str, intent: str) -> bool:
    rule_l = rule.lower()
    intent_l = intent.lower()
    return rule_l in intent_l or intent_l in rule_l


def system_rules_gate(ctx: EvaluationContext) -> Optional[DecisionResult]:
    """Gate 1: user hard rules block outright; pressure is only flagged."""
    for rule in ctx.profile.hard_rules:
        if _hard_rule_matches(rule, ctx.request.intent):
            ctx.reason_codes.append(ReasonCode.hard_rule_match(rule))
            return ctx.terminate(FORBID, TemplateKey.FORBID_POLICY)

    if ctx.request.decision_pressure:
        ctx.reason_codes.append(ReasonCode.PRESSURE_DETECTED)
    return None


def role_intent_gate(ctx: EvaluationContext) -> Optional[DecisionResult]:
    """Gate 2: role x intent matrix. Missing entries fall back to DEFER."""
    verdict = ctx.catalog.matrix_verdict(ctx.profile.primary_role, ctx.request.intent)

    if verdict == FORBID:
        ctx.reason_codes.append(ReasonCode.ROLE_INTENT_FORBID)
        return ctx.terminate(FORBID, TemplateKey.FORBID_POLICY)

    if verdict == CONDITIONAL:
        ctx.verdict = DEFER
        ctx.reason_codes.append(ReasonCode.ROLE_INTENT_CONDITIONAL)
    elif verdict == ALLOW:
        ctx.verdict = ALLOW
    else:
        ctx.verdict = DEFER
    return None


def energy_gate(ctx: EvaluationContext) -> Optional[DecisionResult]:
    """Gate 3: red energy forbids new commitments; yellow is advisory only."""
    level = ctx.state.energy_level

    if level == "red":
        ctx.reason_codes.append(ReasonCode.ENERGY_RED)
        if ctx.verdict in (ALLOW, DEFER):
            return ctx.terminate(FORBID, TemplateKey.FORBID_ENERGY)
        return None

    # Yellow never downgrades ALLOW to DEFER; it only leaves a flag.
    if level == "yellow" and ctx.verdict == ALLOW:
        ctx.reason_codes.append(ReasonCode.ENERGY_YELLOW)
    return None


def load_limits_gate(ctx: EvaluationContext) -> Optional[DecisionResult]:
    """Gate 4: capacity limits of the user's load profile."""
    limits = ctx.catalog.limits_for(ctx.profile.load_profile)
    if limits is None:
        return None

    stats = ctx.stats
    intent = ctx.request.intent

    if stats.daily_commitments >= limits.daily_commitments:
        ctx.reason_codes.append(ReasonCode.DAILY_LIMIT_REACHED)
        return ctx.terminate(FORBID, TemplateKey.FORBID_NO_CAPACITY)

    if intent == "money" and stats.weekly_money_requests >= limits.weekly_money_requests:
        ctx.reason_codes.append(ReasonCode.WEEKLY_MONEY_LIMIT)
        return ctx.terminate(FORBID, TemplateKey.FORBID_NO_CAPACITY)

    if intent == "time" and stats.weekly_time_blocks >= limits.weekly_time_blocks:
        ctx.reason_codes.append(ReasonCode.WEEKLY_TIME_LIMIT)
        return ctx.terminate(FORBID, TemplateKey.FORBID_NO_CAPACITY)

    if intent == "work-change" and stats.concurrent_projects >= limits.concurrent_projects:
        ctx.reason_codes.append(ReasonCode.PROJECT_LIMIT_REACHED)
        if ctx.verdict == ALLOW:
            ctx.verdict = DEFER
    return None


def _money_policy(ctx: EvaluationContext) -> Optional[DecisionResult]:
    policy = ctx.profile.money_policy
    params = ctx.request.params

    if ctx.request.actor_type not in policy.allowed_actors:
        ctx.reason_codes.append(ReasonCode.ACTOR_NOT_ALLOWED_FOR_MONEY)
        return ctx.terminate(FORBID, TemplateKey.MONEY_FORBID)

    if policy.require_return_date and not params.return_date:
        ctx.reason_codes.append(ReasonCode.MISSING_RETURN_DATE)
        return ctx.terminate(DEFER, TemplateKey.MONEY_DEFER)

    if (
        policy.max_amount is not None
        and params.amount is not None
        and params.amount > policy.max_amount
    ):
        ctx.reason_codes.append(ReasonCode.EXCEEDS_MAX_AMOUNT)
        return ctx.terminate(FORBID, TemplateKey.MONEY_FORBID)
    return None


def _time_policy(ctx: EvaluationContext) -> Optional[DecisionResult]:
    ctx.requires_calendar = True
    if not ctx.request.params.duration:
        ctx.reason_codes.append(ReasonCode.MISSING_DURATION)
        return ctx.terminate(DEFER, TemplateKey.DEFER_NEED_INFO, requires_calendar=True)
    return None


def _intro_policy(ctx: EvaluationContext) -> Optional[DecisionResult]:
    if not ctx.request.params.two_line_pitch:
        ctx.reason_codes.append(ReasonCode.MISSING_PITCH)
        return ctx.terminate(DEFER, TemplateKey.INTRO_NEED_PITCH)
    return None


def _support_policy(ctx: EvaluationContext) -> Optional[DecisionResult]:
    if ctx.request.actor_type not in ctx.profile.support_policy.allowed_actors:
        ctx.reason_codes.append(ReasonCode.ACTOR_NOT_ALLOWED_FOR_SUPPORT)
        return ctx.terminate(FORBID, TemplateKey.FORBID_POLICY)
    return None


def _scheduled_focus_policy(ctx: EvaluationContext) -> Optional[DecisionResult]:
    if ctx.request.params.duration:
        ctx.requires_calendar = True
    return None


_INTENT_POLICIES = {
    "money": _money_policy,
    "time": _time_policy,
    "intro": _intro_policy,
    "support": _support_policy,
    "attention": _scheduled_focus_policy,
    "work-change": _scheduled_focus_policy,
}


def intent_policy_gate(ctx: EvaluationContext) -> Optional[DecisionResult]:
    """Gate 5: per-intent checks on the primary intent only."""
    policy = _INTENT_POLICIES.get(ctx.request.intent)
    if policy is None:
        return None
    return policy(ctx)


def calendar_gate(ctx: EvaluationContext) -> Optional[DecisionResult]:
    """Gate 6: defer when a calendar-bound request cannot be placed."""
    if not ctx.requires_calendar:
        return None

    if not ctx.profile.calendar_connected:
        ctx.reason_codes.append(ReasonCode.CALENDAR_NOT_CONNECTED)
    elif ctx.calendar_available is False:
        ctx.reason_codes.append(ReasonCode.NO_CALENDAR_SLOT)
    else:
        return None

    ctx.verdict = DEFER
    ctx.template_key = TemplateKey.DEFER_NEED_TIME
    return None


# Gate order is fixed. Do not reorder.
GATES: Tuple[Tuple[str, Gate], ...] = (
    ("system_rules", system_rules_gate),
    ("role_intent", role_intent_gate),
    ("energy", energy_gate),
    ("load_limits", load_limits_gate),
    ("intent_policies", intent_policy_gate),
    ("calendar", calendar_gate),
)
