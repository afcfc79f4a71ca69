from __future__ import annotations

from typing import Mapping

from decision_platform.policy.config import PolicyCatalog, TemplateEntry
from decision_platform.policy.types import TemplateKey


class TemplateResolver:
    """Maps template keys to display text; unknown keys fall back to allow_default."""

    def __init__(self, catalog: PolicyCatalog):
        self.catalog = catalog

    def resolve(self, key: str) -> str:
        entry = self.catalog.templates.get(key)
        if entry is not None and entry.text:
            return entry.text
        # load_catalog guarantees allow_default exists with non-empty text.
        return self.catalog.templates[TemplateKey.ALLOW_DEFAULT].text

    def all(self) -> Mapping[str, TemplateEntry]:
        return self.catalog.templates


def resolve_template(catalog: PolicyCatalog, key: str) -> str:
    return TemplateResolver(catalog).resolve(key)
