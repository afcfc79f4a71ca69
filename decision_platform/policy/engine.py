from __future__ import annotations

import logging
from typing import Optional

from decision_platform.policy.config import PolicyCatalog
from decision_platform.policy.gates import GATES, EvaluationContext
from decision_platform.policy.types import (
    ALLOW,
    AggregatedStats,
    DecisionResult,
    DynamicState,
    EvaluationInput,
    ParsedRequest,
    TemplateKey,
    UserProfile,
)

logger = logging.getLogger("decision_platform.policy.engine")


class DecisionEngine:
    """
    Decides whether a parsed request is allowed, deferred, or forbidden.
    This is the single choke point for commitment decisions.

    The engine holds only the (immutable) catalog, so one instance can serve
    any number of concurrent callers.
    """

    def __init__(self, catalog: PolicyCatalog):
        self.catalog = catalog

    def evaluate(
        self,
        request: ParsedRequest,
        profile: UserProfile,
        state: DynamicState,
        stats: AggregatedStats,
        calendar_available: Optional[bool] = None,
    ) -> DecisionResult:
        ctx = EvaluationContext(
            catalog=self.catalog,
            request=request,
            profile=profile,
            state=state,
            stats=stats,
            calendar_available=calendar_available,
        )

        for name, gate in GATES:
            terminal = gate(ctx)
            if terminal is not None:
                logger.debug(
                    "Gate %s terminated intent=%s result=%s reasons=%s",
                    name, request.intent, terminal.result, list(terminal.reason_codes),
                )
                return terminal

        decision = self._finalize(ctx)
        logger.debug(
            "Decision intent=%s result=%s template=%s reasons=%s",
            request.intent, decision.result, decision.template_key, list(decision.reason_codes),
        )
        return decision

    def evaluate_input(self, data: EvaluationInput) -> DecisionResult:
        return self.evaluate(
            data.request,
            data.profile,
            data.state,
            data.stats,
            calendar_available=data.calendar_available,
        )

    @staticmethod
    def _finalize(ctx: EvaluationContext) -> DecisionResult:
        if ctx.verdict == ALLOW:
            template_key = TemplateKey.ALLOW_DEFAULT
        else:
            template_key = ctx.template_key or TemplateKey.DEFER_NEED_TIME
        return ctx.terminate(ctx.verdict, template_key, requires_calendar=ctx.requires_calendar)
