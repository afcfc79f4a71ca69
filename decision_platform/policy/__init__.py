from .config import CatalogStore, PolicyCatalog, load_catalog
from .engine import DecisionEngine
from .templates import TemplateResolver, resolve_template

__all__ = [
    "CatalogStore",
    "DecisionEngine",
    "PolicyCatalog",
    "TemplateResolver",
    "load_catalog",
    "resolve_template",
]
