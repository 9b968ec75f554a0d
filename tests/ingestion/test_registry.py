"""Tests for the table registry and its YAML loader."""

import pytest

from siteops_ingestion.domain.types import ContextRequirement, FieldType
from siteops_ingestion.registry import SchemaRegistry, default_registry
from siteops_ingestion.registry.loader import DEFAULT_REGISTRY_PATH, compute_checksum, load_yaml_file
from siteops_kernel.exceptions import InvalidTableConfigError, UnknownEntityError

IMPORTABLE = {
    "daily_attendance",
    "market_laborer_attendance",
    "expenses",
    "labor_payments",
    "laborers",
    "advances",
    "tea_shop_entries",
}


class TestBundledRegistry:
    def test_importable_entities(self, registry):
        assert {t.name for t in registry.list_importable()} == IMPORTABLE

    def test_placeholders_registered_but_not_importable(self, registry):
        assert "subcontracts" in registry
        with pytest.raises(UnknownEntityError) as exc_info:
            registry.require("subcontracts")
        assert exc_info.value.code == "UNKNOWN_ENTITY"

    def test_unknown_entity(self, registry):
        assert registry.get_config("payroll") is None
        with pytest.raises(UnknownEntityError):
            registry.require("payroll")

    def test_laborers_schema(self, registry):
        table = registry.require("laborers")
        assert table.required_context == (ContextRequirement.USER,)
        assert not table.requires_site
        assert table.upsert_key == ("phone",)
        phone = table.field_by_target("phone")
        assert phone.pattern == r"^\d{10}$"
        role = table.field_by_header("ROLE_ID ")
        assert role.field_type == FieldType.LOOKUP and role.lookup.table == "labor_roles"

    def test_attendance_lookups_and_enums(self, registry):
        table = registry.require("daily_attendance")
        assert table.requires_site
        laborer = table.field_by_target("laborer_id")
        assert laborer.lookup.alternate_fields == ("phone",)
        assert laborer.lookup.filters == (("status", "active"),)
        assert table.field_by_target("section_id").lookup.site_scoped
        assert table.field_by_target("work_days").enum_values == ("0.5", "1", "1.5", "2")

    def test_example_rows_cover_every_header(self, registry):
        for table in registry.list_importable():
            assert table.example_row is not None
            assert set(table.example_row) == set(table.headers), table.name

    def test_default_registry_is_cached(self):
        assert default_registry() is default_registry()

    def test_checksum_matches_document(self):
        registry = SchemaRegistry.from_file(DEFAULT_REGISTRY_PATH)
        assert registry.checksum == compute_checksum(load_yaml_file(DEFAULT_REGISTRY_PATH))


class TestLoaderErrors:
    def _doc(self, fields, **extra):
        return {"tables": {"things": {"display_name": "Things", "fields": fields, **extra}}}

    def test_duplicate_header(self):
        doc = self._doc([{"target": "a", "header": "Name"}, {"target": "b", "header": "name"}])
        with pytest.raises(InvalidTableConfigError, match="duplicate header"):
            SchemaRegistry.from_dict(doc)

    def test_unknown_type(self):
        with pytest.raises(InvalidTableConfigError, match="unknown type"):
            SchemaRegistry.from_dict(self._doc([{"target": "a", "type": "uuid"}]))

    def test_unknown_lookup(self):
        with pytest.raises(InvalidTableConfigError, match="unknown lookup"):
            SchemaRegistry.from_dict(self._doc([{"target": "a", "type": "lookup", "lookup": "nope"}]))

    def test_unknown_named_enum(self):
        with pytest.raises(InvalidTableConfigError, match="unknown enum"):
            SchemaRegistry.from_dict(self._doc([{"target": "a", "type": "enum", "enum": "colors"}]))

    def test_bad_context(self):
        with pytest.raises(InvalidTableConfigError):
            SchemaRegistry.from_dict(self._doc([{"target": "a"}], required_context=["tenant_id"]))

    def test_inline_enum_and_header_default(self):
        registry = SchemaRegistry.from_dict(
            self._doc([{"target": "size", "type": "enum", "enum": ["S", "M", 3]}])
        )
        field = registry.require("things").fields[0]
        assert field.header == "size"
        assert field.enum_values == ("S", "M", "3")
