import pytest

from decision_platform.policy import TemplateResolver, resolve_template
from decision_platform.policy.types import REQUIRED_TEMPLATE_KEYS


class TestTemplateResolver:
    @pytest.mark.parametrize("key", REQUIRED_TEMPLATE_KEYS)
    def test_known_keys_resolve_to_their_text(self, catalog, key):
        assert TemplateResolver(catalog).resolve(key) == catalog.templates[key].text

    @pytest.mark.parametrize("key", ["", "unknown_key", "ALLOW_DEFAULT", "forbid_policy "])
    def test_unknown_keys_fall_back_to_allow_default(self, catalog, key):
        text = resolve_template(catalog, key)

        assert text == catalog.templates["allow_default"].text
        assert text

    def test_every_engine_template_resolves(self, catalog, engine, make_request, make_profile, green, no_stats):
        d = engine.evaluate(make_request("intro", "client"), make_profile("manager"), green, no_stats)

        assert resolve_template(catalog, d.template_key) == catalog.templates["intro_need_pitch"].text

    def test_all_exposes_table(self, catalog):
        table = TemplateResolver(catalog).all()

        assert set(REQUIRED_TEMPLATE_KEYS) <= set(table)
        assert table["money_defer"].result == "DEFER"
