# tests/test_lookup.py
import asyncio

import pytest

from brokerdesk.errors import PropertyLookupError
from brokerdesk.models import PropertyRecord, SearchCriteria
from brokerdesk.search import PropertyLookup, matches_criteria
from tests.fakes import FakePropertyRepository, make_property


LAGOS_APARTMENT = make_property(id="apt-lagos")
ABUJA_HOUSE = make_property(
    id="house-abuja",
    address="5 Aminu Kano Crescent",
    city="Wuse",
    state="Abuja",
    property_type="house",
    listing_type="sale",
    price=95000000,
    bedrooms=5,
)


def test_lookup_returns_only_matching_property():
    repo = FakePropertyRepository([LAGOS_APARTMENT, ABUJA_HOUSE])
    criteria = SearchCriteria(
        location="lagos", property_type="apartment", listing_type="rent", bedrooms=3
    )

    results = asyncio.run(PropertyLookup(repository=repo, limit=20).lookup(criteria))

    assert [r.id for r in results] == ["apt-lagos"]
    assert repo.calls == [(criteria, 20)]


def test_lookup_without_matches_is_empty():
    repo = FakePropertyRepository([LAGOS_APARTMENT, ABUJA_HOUSE])

    results = asyncio.run(
        PropertyLookup(repository=repo).lookup(SearchCriteria(property_type="duplex"))
    )

    assert results == []


def test_broad_query_false_positives_are_filtered():
    # El OR de ubicación puede traer filas de otro tipo
    office = make_property(id="office-lagos", property_type="office")
    repo = FakePropertyRepository([office, LAGOS_APARTMENT])

    results = asyncio.run(
        PropertyLookup(repository=repo).lookup(
            SearchCriteria(location="lagos", property_type="apartment")
        )
    )

    assert [r.id for r in results] == ["apt-lagos"]


def test_unapproved_rows_are_never_returned():
    pending = make_property(id="pending", status="pending")
    repo = FakePropertyRepository([pending])

    results = asyncio.run(PropertyLookup(repository=repo).lookup(SearchCriteria()))

    assert results == []


def test_results_are_capped_and_keep_order():
    rows = [make_property(id=f"p{i}") for i in range(25)]
    repo = FakePropertyRepository(rows)

    results = asyncio.run(PropertyLookup(repository=repo, limit=20).lookup(SearchCriteria()))

    assert len(results) == 20
    assert [r.id for r in results] == [f"p{i}" for i in range(20)]


def test_invalid_rows_are_dropped():
    broken = {"id": "broken", "city": "Lagos"}
    repo = FakePropertyRepository([broken, LAGOS_APARTMENT])

    results = asyncio.run(PropertyLookup(repository=repo).lookup(SearchCriteria()))

    assert [r.id for r in results] == ["apt-lagos"]


def test_query_error_is_wrapped():
    repo = FakePropertyRepository(error=RuntimeError("connection reset"))

    with pytest.raises(PropertyLookupError, match="connection reset"):
        asyncio.run(PropertyLookup(repository=repo).lookup(SearchCriteria()))


def test_location_matches_address():
    record = PropertyRecord.model_validate(
        make_property(address="Plot 4, Lekki Phase 1", city="Eti-Osa")
    )

    assert matches_criteria(record, SearchCriteria(location="lekki"))
    assert not matches_criteria(record, SearchCriteria(location="ikoyi"))


def test_type_match_is_case_insensitive_substring():
    record = PropertyRecord.model_validate(
        make_property(property_type="Serviced Apartment", listing_type="RENT")
    )

    assert matches_criteria(
        record, SearchCriteria(property_type="apartment", listing_type="rent")
    )
