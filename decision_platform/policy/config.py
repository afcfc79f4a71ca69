from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError as JsonSchemaValidationError

from decision_platform.errors import CatalogError
from decision_platform.policy.types import (
    INTENTS,
    LOAD_PROFILES,
    REQUIRED_TEMPLATE_KEYS,
    ROLES,
    MatrixVerdict,
)

logger = logging.getLogger("decision_platform.policy.config")

CATALOG_PATH_ENV = "DECISION_CATALOG_PATH"
DEFAULT_CATALOG_PATH = Path(__file__).parent / "rules.yaml"
CATALOG_SCHEMA_PATH = Path(__file__).parent / "schemas" / "catalog.schema.json"


@dataclass(frozen=True)
class ProfileLimits:
    daily_commitments: int
    weekly_money_requests: int
    weekly_time_blocks: int
    concurrent_projects: int


@dataclass(frozen=True)
class LoadProfileConfig:
    id: str
    name: str
    description: str
    limits: ProfileLimits


@dataclass(frozen=True)
class TemplateEntry:
    key: str
    text: str
    result: Optional[str] = None


@dataclass(frozen=True)
class CatalogItem:
    """Display metadata for a role or an intent."""
    id: str
    name: str
    description: str = ""


@dataclass(frozen=True)
class PolicyCatalog:
    version: str
    roles: Tuple[CatalogItem, ...]
    intents: Tuple[CatalogItem, ...]
    role_intent_matrix: Mapping[str, Mapping[str, MatrixVerdict]]
    profiles: Mapping[str, LoadProfileConfig]
    templates: Mapping[str, TemplateEntry]

    def matrix_verdict(self, role: str, intent: str) -> Optional[MatrixVerdict]:
        row = self.role_intent_matrix.get(role)
        if row is None:
            return None
        return row.get(intent)

    def limits_for(self, load_profile: str) -> Optional[ProfileLimits]:
        profile = self.profiles.get(load_profile)
        return profile.limits if profile is not None else None


def get_catalog_path() -> Path:
    return Path(os.getenv(CATALOG_PATH_ENV, str(DEFAULT_CATALOG_PATH)))


def _load_schema() -> Dict[str, Any]:
    with CATALOG_SCHEMA_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)


def _read_raw(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"Cannot read policy catalog: {path}", {"error": str(e)}) from e

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise CatalogError(f"Policy catalog is not valid YAML/JSON: {path}", {"error": str(e)}) from e

    if not isinstance(raw, dict):
        raise CatalogError(f"Policy catalog must be a mapping: {path}")
    return raw


def _validate_structure(raw: Dict[str, Any], path: Path) -> None:
    try:
        Draft202012Validator(_load_schema()).validate(raw)
    except JsonSchemaValidationError as ve:
        raise CatalogError(
            f"Policy catalog failed schema validation: {path}",
            {"error": ve.message, "path": [str(p) for p in ve.path]},
        ) from ve


def _validate_integrity(raw: Dict[str, Any]) -> None:
    declared_roles = [r["id"] for r in raw["roles"]]
    declared_intents = [i["id"] for i in raw["intents"]]

    unknown_roles = sorted(set(declared_roles) - set(ROLES))
    missing_roles = sorted(set(ROLES) - set(declared_roles))
    if unknown_roles or missing_roles:
        raise CatalogError(
            "Catalog roles do not match the role enumeration",
            {"unknown": unknown_roles, "missing": missing_roles},
        )

    unknown_intents = sorted(set(declared_intents) - set(INTENTS))
    missing_intents = sorted(set(INTENTS) - set(declared_intents))
    if unknown_intents or missing_intents:
        raise CatalogError(
            "Catalog intents do not match the intent enumeration",
            {"unknown": unknown_intents, "missing": missing_intents},
        )

    matrix = raw["role_intent_matrix"]
    gaps = [
        f"{role}/{intent}"
        for role in ROLES
        for intent in INTENTS
        if intent not in (matrix.get(role) or {})
    ]
    if gaps:
        raise CatalogError("Role x intent matrix has gaps", {"missing": gaps})

    missing_profiles = [p for p in LOAD_PROFILES if p not in raw["profiles"]]
    if missing_profiles:
        raise CatalogError("Catalog is missing load profiles", {"missing": missing_profiles})

    templates = raw["templates"]
    missing_templates = [
        key
        for key in REQUIRED_TEMPLATE_KEYS
        if key not in templates or not str(templates[key].get("text", "")).strip()
    ]
    if missing_templates:
        raise CatalogError("Catalog is missing templates", {"missing": missing_templates})


def _build_catalog(raw: Dict[str, Any]) -> PolicyCatalog:
    roles = tuple(
        CatalogItem(id=r["id"], name=r.get("name", r["id"]), description=r.get("description", ""))
        for r in raw["roles"]
    )
    intents = tuple(
        CatalogItem(id=i["id"], name=i.get("name", i["id"]), description=i.get("description", ""))
        for i in raw["intents"]
    )

    matrix = MappingProxyType({
        role: MappingProxyType(dict(row))
        for role, row in raw["role_intent_matrix"].items()
    })

    profiles = {}
    for pid, praw in raw["profiles"].items():
        lim = praw["limits"]
        profiles[pid] = LoadProfileConfig(
            id=pid,
            name=praw.get("name", pid),
            description=praw.get("description", ""),
            limits=ProfileLimits(
                daily_commitments=int(lim["daily_commitments"]),
                weekly_money_requests=int(lim["weekly_money_requests"]),
                weekly_time_blocks=int(lim["weekly_time_blocks"]),
                concurrent_projects=int(lim["concurrent_projects"]),
            ),
        )

    templates = {
        key: TemplateEntry(key=key, text=t["text"], result=t.get("result"))
        for key, t in raw["templates"].items()
    }

    return PolicyCatalog(
        version=str(raw.get("version", "0")),
        roles=roles,
        intents=intents,
        role_intent_matrix=matrix,
        profiles=MappingProxyType(profiles),
        templates=MappingProxyType(templates),
    )


def load_catalog(path: Optional[Path] = None) -> PolicyCatalog:
    """
    Load and validate the policy catalog.

    Resolution order: explicit path, $DECISION_CATALOG_PATH, packaged rules.yaml.
    Raises CatalogError on any structural or integrity problem; callers are
    expected to treat that as fatal at startup.
    """
    path = Path(path) if path is not None else get_catalog_path()
    raw = _read_raw(path)
    _validate_structure(raw, path)
    _validate_integrity(raw)
    catalog = _build_catalog(raw)
    logger.info(
        "Loaded policy catalog version=%s from %s (%d templates)",
        catalog.version, path, len(catalog.templates),
    )
    return catalog


load = load_catalog


class CatalogStore:
    """
    Holds the active catalog. Reload swaps the whole catalog reference so an
    evaluation that already grabbed `current()` keeps seeing one consistent
    catalog.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = path
        self._lock = threading.Lock()
        self._catalog = load_catalog(path)

    def current(self) -> PolicyCatalog:
        return self._catalog

    def reload(self) -> PolicyCatalog:
        # A failed load raises before the swap; the previous catalog stays active.
        with self._lock:
            catalog = load_catalog(self.path)
            self._catalog = catalog
        return catalog
