import pytest

from decision_platform.policy import DecisionEngine, load_catalog
from decision_platform.policy.config import DEFAULT_CATALOG_PATH
from decision_platform.policy.types import (
    AggregatedStats,
    DynamicState,
    MoneyPolicy,
    ParsedRequest,
    RequestParams,
    SupportPolicy,
    UserProfile,
)


@pytest.fixture(autouse=True)
def _no_catalog_env(monkeypatch):
    """Tests load the packaged catalog unless they point elsewhere explicitly."""
    monkeypatch.delenv("DECISION_CATALOG_PATH", raising=False)


@pytest.fixture(scope="session")
def catalog():
    return load_catalog(DEFAULT_CATALOG_PATH)


@pytest.fixture(scope="session")
def engine(catalog):
    return DecisionEngine(catalog)


def build_request(intent="money", actor_type="family", decision_pressure=False, **params):
    return ParsedRequest(
        intent=intent,
        actor_type=actor_type,
        params=RequestParams(**params),
        decision_pressure=decision_pressure,
    )


def build_profile(
    primary_role="executor",
    load_profile="B",
    hard_rules=(),
    calendar_connected=True,
    money_actors=("family", "friend"),
    require_return_date=True,
    max_amount=None,
    support_actors=("family", "friend", "team"),
):
    return UserProfile(
        primary_role=primary_role,
        load_profile=load_profile,
        money_policy=MoneyPolicy(
            allowed_actors=frozenset(money_actors),
            require_return_date=require_return_date,
            max_amount=max_amount,
        ),
        support_policy=SupportPolicy(allowed_actors=frozenset(support_actors), max_weekly=3),
        hard_rules=tuple(hard_rules),
        calendar_connected=calendar_connected,
    )


@pytest.fixture
def make_request():
    return build_request


@pytest.fixture
def make_profile():
    return build_profile


@pytest.fixture
def green():
    return DynamicState(energy_level="green")


@pytest.fixture
def no_stats():
    return AggregatedStats()
