from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from decision_platform.errors import PlatformError
from decision_platform.intake import parse_evaluation_input
from decision_platform.policy import DecisionEngine, TemplateResolver, load_catalog

logger = logging.getLogger("decision_platform.cli")


def _catalog_path(args) -> Optional[Path]:
    return Path(args.catalog) if args.catalog else None


def _read_payload(source: str) -> dict:
    if source == "-":
        return json.load(sys.stdin)
    with open(source, "r", encoding="utf-8") as f:
        return json.load(f)


def cmd_decide(args):
    catalog = load_catalog(_catalog_path(args))
    engine = DecisionEngine(catalog)
    resolver = TemplateResolver(catalog)

    data = parse_evaluation_input(_read_payload(args.input))
    decision = engine.evaluate_input(data)

    out = decision.to_json()
    out["templateText"] = resolver.resolve(decision.template_key)
    print(json.dumps(out, indent=2, ensure_ascii=False))


def cmd_templates(args):
    catalog = load_catalog(_catalog_path(args))
    for key, entry in sorted(TemplateResolver(catalog).all().items()):
        print(f"- {key} [{entry.result or '-'}]: {entry.text}")


def cmd_check_catalog(args):
    catalog = load_catalog(_catalog_path(args))
    print(
        f"catalog ok: version={catalog.version} roles={len(catalog.roles)} "
        f"intents={len(catalog.intents)} profiles={len(catalog.profiles)} "
        f"templates={len(catalog.templates)}"
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="decider")
    p.add_argument("--catalog", help="Policy catalog path (default: $DECISION_CATALOG_PATH or packaged rules.yaml).")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = p.add_subparsers(dest="cmd", required=True)

    dp = sub.add_parser("decide", help="Evaluate a decision from a JSON input file.")
    dp.add_argument("input", help="Path to JSON with parsedRequest/userProfile/dynamicState/aggregatedStats, or '-' for stdin.")
    dp.set_defaults(func=cmd_decide)

    tp = sub.add_parser("templates", help="List response templates.")
    tp.set_defaults(func=cmd_templates)

    cp = sub.add_parser("check-catalog", help="Load and validate the policy catalog.")
    cp.set_defaults(func=cmd_check_catalog)

    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        args.func(args)
    except PlatformError as e:
        logger.error("%s failed: %s", args.cmd, e.message)
        print(json.dumps({"error": e.to_json()}), file=sys.stderr)
        return 2
    except (OSError, ValueError) as e:
        logger.error("%s failed: %s", args.cmd, e)
        print(json.dumps({"error": {"code": "input_error", "message": str(e), "details": {}}}), file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
