from .parsing import (
    parse_evaluation_input,
    parse_profile,
    parse_request,
    parse_state,
    parse_stats,
)
from .stats import CommitmentRecord, aggregate_stats

__all__ = [
    "CommitmentRecord",
    "aggregate_stats",
    "parse_evaluation_input",
    "parse_profile",
    "parse_request",
    "parse_state",
    "parse_stats",
]
