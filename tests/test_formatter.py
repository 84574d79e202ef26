# tests/test_formatter.py
import pytest

from brokerdesk.models import PropertyRecord, SearchCriteria
from brokerdesk.search import ResponseFormatter, pluralize
from brokerdesk.search.formatter import APOLOGY_MESSAGE, CALL_TO_ACTION
from tests.fakes import make_property


@pytest.fixture
def formatter():
    return ResponseFormatter(currency_symbol="₦", preview_length=100)


def _record(**overrides) -> PropertyRecord:
    return PropertyRecord.model_validate(make_property(**overrides))


def test_rent_price_is_yearly(formatter):
    record = _record(price=1234567, listing_type="rent")

    assert formatter.format_price(record) == "₦1,234,567/year"


def test_sale_price_has_no_period(formatter):
    record = _record(price=45000000, listing_type="sale")

    assert formatter.format_price(record) == "₦45,000,000"


def test_no_results_mentions_requested_type(formatter):
    text = formatter.format(SearchCriteria(property_type="duplex"), [])

    assert "duplex" in text
    assert text.rstrip().endswith("?")


def test_no_results_lists_no_properties(formatter):
    text = formatter.format(
        SearchCriteria(location="lagos", property_type="apartment", listing_type="rent"),
        [],
    )

    assert "apartments in Lagos for rent" in text
    assert "📍" not in text
    assert "12 Admiralty Way" not in text


def test_headline_count_matches_blocks(formatter):
    results = [_record(id="a"), _record(id="b", address="3 Bourdillon Road")]
    criteria = SearchCriteria(location="lagos", property_type="apartment", listing_type="rent")

    text = formatter.format(criteria, results)

    assert text.startswith("🏠 Great news! I found 2 apartments in Lagos for rent:")
    assert "\n\n1. *APARTMENT FOR RENT*" in text
    assert "\n\n2. *APARTMENT FOR RENT*" in text
    assert "\n\n3." not in text
    assert text.endswith(CALL_TO_ACTION)


def test_single_result_uses_singular(formatter):
    text = formatter.format(SearchCriteria(property_type="house"), [_record(property_type="house")])

    assert "I found 1 house:" in text


def test_missing_type_falls_back_to_property(formatter):
    text = formatter.format(SearchCriteria(), [_record(id="a"), _record(id="b")])

    assert "I found 2 properties:" in text


def test_property_block_lines(formatter):
    record = _record(
        price=1234567,
        bedrooms=1,
        bathrooms=2,
        area=85.5,
        landmark="Lekki Conservation Centre",
    )

    block = formatter.format_property(1, record)

    assert block.splitlines() == [
        "1. *APARTMENT FOR RENT*",
        "📍 12 Admiralty Way, Lagos, Lagos",
        "💰 ₦1,234,567/year",
        "🛏️ 1 bed 🛁 2 baths 📐 85.5 sqm",
        "📝 Spacious apartment with a fitted kitchen",
        "🗺️ Near Lekki Conservation Centre",
    ]


def test_optional_lines_are_omitted(formatter):
    record = _record(bedrooms=None, bathrooms=None, area=None, description=None, landmark=None)

    block = formatter.format_property(3, record)

    assert len(block.splitlines()) == 3
    assert "Near" not in block


@pytest.mark.parametrize(
    "area,expected",
    [
        (1500000, "📐 1,500,000 sqm"),
        (85.5, "📐 85.5 sqm"),
        (2450.25, "📐 2,450.25 sqm"),
        (600, "📐 600 sqm"),
    ],
)
def test_area_is_written_in_full(formatter, area, expected):
    record = _record(bedrooms=None, bathrooms=None, area=area)

    assert formatter.format_amenities(record) == expected


def test_long_description_is_truncated(formatter):
    record = _record(description="x" * 150)

    assert formatter.format_description(record) == "x" * 100 + "..."


def test_short_description_is_kept(formatter):
    record = _record(description="x" * 100)

    assert formatter.format_description(record) == "x" * 100


def test_apology(formatter):
    assert formatter.format_apology() == APOLOGY_MESSAGE


@pytest.mark.parametrize(
    "noun,count,expected",
    [
        ("apartment", 2, "apartments"),
        ("property", 3, "properties"),
        ("duplex", 2, "duplexes"),
        ("day", 2, "days"),
        ("house", 1, "house"),
        ("land", 0, "land"),
    ],
)
def test_pluralize(noun, count, expected):
    assert pluralize(noun, count) == expected
