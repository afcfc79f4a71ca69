"""End-to-end decisions through all six gates, one scenario per test."""

from decision_platform.policy.types import AggregatedStats, DynamicState


class TestCoreScenarios:
    def test_family_loan_with_return_date_is_allowed(self, engine, make_request, make_profile, green, no_stats):
        req = make_request("money", "family", amount=500, return_date="2026-12-01")
        profile = make_profile("executor", "B", require_return_date=True)

        d = engine.evaluate(req, profile, green, no_stats)

        assert d.result == "ALLOW"
        assert d.template_key == "allow_default"
        assert d.requires_calendar is False
        assert d.reason_codes == ()

    def test_family_loan_without_return_date_is_deferred(self, engine, make_request, make_profile, green, no_stats):
        req = make_request("money", "family", amount=500)
        profile = make_profile("executor", "B", require_return_date=True)

        d = engine.evaluate(req, profile, green, no_stats)

        assert d.result == "DEFER"
        assert "MISSING_RETURN_DATE" in d.reason_codes
        assert d.template_key == "money_defer"
        assert d.requires_calendar is False

    def test_red_energy_forbids_otherwise_allowed_request(self, engine, make_request, make_profile, no_stats):
        req = make_request("money", "family", amount=500, return_date="2026-12-01")

        d = engine.evaluate(req, make_profile(), DynamicState(energy_level="red"), no_stats)

        assert d.result == "FORBID"
        assert "ENERGY_RED" in d.reason_codes
        assert d.template_key == "forbid_energy"

    def test_hard_rule_on_intent_forbids(self, engine, make_request, make_profile, no_stats):
        req = make_request("money", "family", amount=500, return_date="2026-12-01", decision_pressure=True)
        profile = make_profile("helper", "C", hard_rules=["money"])

        d = engine.evaluate(req, profile, DynamicState(energy_level="red"), AggregatedStats(daily_commitments=99))

        assert d.result == "FORBID"
        assert d.reason_codes == ("HARD_RULE_MATCH:money",)
        assert d.template_key == "forbid_policy"
        assert d.requires_calendar is False

    def test_meeting_without_connected_calendar_is_deferred(self, engine, make_request, make_profile, green, no_stats):
        req = make_request("time", "client", duration=60)
        profile = make_profile("executor", calendar_connected=False)

        d = engine.evaluate(req, profile, green, no_stats)

        assert d.requires_calendar is True
        assert d.result == "DEFER"
        assert d.template_key == "defer_need_time"
        assert "CALENDAR_NOT_CONNECTED" in d.reason_codes

    def test_daily_limit_on_minimal_profile_forbids(self, engine, catalog, make_request, make_profile, green):
        assert catalog.limits_for("A").daily_commitments == 2
        req = make_request("errand", "friend")

        d = engine.evaluate(req, make_profile("executor", "A"), green, AggregatedStats(daily_commitments=2))

        assert d.result == "FORBID"
        assert d.template_key == "forbid_no_capacity"
        assert d.reason_codes == ("DAILY_LIMIT_REACHED",)


class TestReasonCodeOrdering:
    def test_codes_follow_gate_order(self, engine, make_request, make_profile, no_stats):
        # pressure (gate 1), conditional (gate 2), project limit (gate 4), calendar (gate 6)
        req = make_request("work-change", "client", decision_pressure=True, duration=90)
        profile = make_profile("creator", "A", calendar_connected=False)

        d = engine.evaluate(
            req, profile, DynamicState(energy_level="yellow"), AggregatedStats(concurrent_projects=1)
        )

        assert d.reason_codes == (
            "PRESSURE_DETECTED",
            "ROLE_INTENT_CONDITIONAL",
            "PROJECT_LIMIT_REACHED",
            "CALENDAR_NOT_CONNECTED",
        )
        assert d.result == "DEFER"
        assert d.template_key == "defer_need_time"
        assert d.requires_calendar is True

    def test_pressure_flag_survives_into_terminal_forbid(self, engine, make_request, make_profile, no_stats):
        req = make_request("errand", "friend", decision_pressure=True)

        d = engine.evaluate(req, make_profile("creator"), DynamicState(energy_level="green"), no_stats)

        assert d.reason_codes == ("PRESSURE_DETECTED", "ROLE_INTENT_FORBID")
        assert d.template_key == "forbid_policy"

    def test_to_json_uses_camel_case(self, engine, make_request, make_profile, green, no_stats):
        d = engine.evaluate(make_request("errand", "friend"), make_profile(), green, no_stats)

        assert d.to_json() == {
            "result": "ALLOW",
            "reasonCodes": [],
            "templateKey": "allow_default",
            "requiresCalendar": False,
        }
