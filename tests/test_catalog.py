"""Catalog tests — fixed special leave definitions, indexing, immutability."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from leave_backend.common.constants import CountryCode, GenderType, MaritalStatus
from leave_backend.special_leave.catalog import (
    BEREAVEMENT_LEAVE,
    MATERNITY_LEAVE,
    PATERNITY_LEAVE,
    SPECIAL_LEAVE_TYPES,
    LeaveCatalog,
    default_catalog,
    describe_restrictions,
)
from leave_backend.special_leave.schemas import AllocationRule, LeaveTypeDefinition


class TestDefaultCatalog:
    """The three special leave types shipped with the service."""

    def test_catalog_order_and_ids(self):
        assert list(default_catalog) == [MATERNITY_LEAVE, PATERNITY_LEAVE, BEREAVEMENT_LEAVE]
        assert len(default_catalog) == 3

    def test_maternity_definition(self):
        maternity = default_catalog[MATERNITY_LEAVE]
        assert maternity.name == "Maternity Leave"
        assert maternity.eligibility.required_gender == GenderType.female
        assert maternity.eligibility.required_marital_status == MaritalStatus.married
        assert maternity.allocation.days == 180
        assert maternity.allocation.must_be_consecutive is True
        assert maternity.allocation.max_occurrences_per_year == 1
        assert maternity.restrictions.advance_notice_days == 30
        assert maternity.restrictions.blocks_concurrent_leave_types == (
            "CASUAL_LEAVE", "PRIVILEGE_LEAVE",
        )

    def test_paternity_definition(self):
        paternity = default_catalog[PATERNITY_LEAVE]
        assert paternity.eligibility.required_gender == GenderType.male
        assert paternity.allocation.days == 5
        assert paternity.restrictions.advance_notice_days == 7
        assert paternity.restrictions.blocks_concurrent_leave_types == ()

    def test_bereavement_definition(self):
        bereavement = default_catalog[BEREAVEMENT_LEAVE]
        assert bereavement.eligibility.required_country == CountryCode.usa
        assert bereavement.eligibility.required_gender is None
        assert bereavement.allocation.days == 3
        assert bereavement.allocation.must_be_consecutive is False
        assert bereavement.allocation.max_occurrences_per_year == 3
        assert bereavement.restrictions.advance_notice_days == 0

    def test_unknown_leave_type_lookup_returns_none(self):
        assert default_catalog.get_leave_type("SABBATICAL_LEAVE") is None
        with pytest.raises(KeyError):
            default_catalog["SABBATICAL_LEAVE"]


class TestCatalogImmutability:
    """Catalog entries and the index cannot be changed after load."""

    def test_definition_is_frozen(self):
        with pytest.raises(ValidationError):
            default_catalog[MATERNITY_LEAVE].name = "Parental Leave"

    def test_nested_allocation_is_frozen(self):
        with pytest.raises(ValidationError):
            default_catalog[MATERNITY_LEAVE].allocation.days = 1

    def test_index_rejects_item_assignment(self):
        with pytest.raises(TypeError):
            default_catalog["NEW_LEAVE"] = SPECIAL_LEAVE_TYPES[0]  # type: ignore[index]

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError, match="Duplicate leave type id"):
            LeaveCatalog([SPECIAL_LEAVE_TYPES[0], SPECIAL_LEAVE_TYPES[0]])

    def test_definitions_returns_a_copy(self):
        definitions = default_catalog.definitions()
        definitions.clear()
        assert len(default_catalog.definitions()) == 3


class TestCatalogHelpers:

    def test_display_name_for_special_regular_and_unknown_types(self):
        assert default_catalog.display_name(PATERNITY_LEAVE) == "Paternity Leave"
        assert default_catalog.display_name("CASUAL_LEAVE") == "Casual Leave"
        assert default_catalog.display_name("STUDY_LEAVE") == "STUDY_LEAVE"

    def test_describe_restrictions_maternity(self):
        assert describe_restrictions(default_catalog[MATERNITY_LEAVE]) == [
            "Documentation required",
            "No other leaves allowed during this period",
            "30 days advance notice required",
            "Maximum 1 times per year",
            "Must be taken consecutively",
        ]

    def test_describe_restrictions_bereavement(self):
        assert describe_restrictions(default_catalog[BEREAVEMENT_LEAVE]) == [
            "Documentation required",
            "Maximum 3 times per year",
        ]

    def test_definition_requires_positive_days(self):
        with pytest.raises(ValidationError):
            LeaveTypeDefinition(
                id="ZERO_LEAVE", name="Zero", allocation=AllocationRule(days=0),
            )
