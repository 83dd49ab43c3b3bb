"""Tests for carrier code resolution."""

from airlines import Airline, AirlineResolver, airline_names, unique_carrier_codes
from conftest import offer, segment
from lookup_cache import LookupCache


def offers_for(*carriers):
    return [offer(str(i), [segment("JFK", "LHR", carrier=c)]) for i, c in enumerate(carriers, 1)]


def test_unique_codes_keep_first_appearance():
    offers = offers_for("VS", "BA", "VS", "AA", "BA")
    assert unique_carrier_codes(offers) == ["VS", "BA", "AA"]


def test_codes_are_case_sensitive():
    assert unique_carrier_codes(offers_for("BA", "ba")) == ["BA", "ba"]


def test_only_first_segment_of_first_itinerary_counts():
    connecting = offer("1", [segment("JFK", "DUB", carrier="EI"), segment("DUB", "LHR", carrier="BA")])
    assert unique_carrier_codes([connecting]) == ["EI"]


def test_one_lookup_per_unique_code(fake):
    AirlineResolver(fake).resolve_airlines(offers_for("BA", "BA", "AA", "BA"))
    assert fake.calls_to("lookup_airlines") == [
        ("lookup_airlines", ("BA",)),
        ("lookup_airlines", ("AA",)),
    ]


def test_name_preference(fake):
    airlines = AirlineResolver(fake).resolve_airlines(offers_for("BA", "AA", "VS"))
    assert airlines == [
        Airline("BA", "BRITISH AIRWAYS"),
        Airline("AA", "AMERICAN AIRLINES"),
        Airline("VS", "VIRGIN ATLANTIC AIRWAYS"),
    ]


def test_failing_code_is_omitted(fake):
    airlines = AirlineResolver(fake).resolve_airlines(offers_for("BA", "XX", "AA"))
    assert [a.code for a in airlines] == ["BA", "AA"]


def test_unknown_code_is_omitted(fake):
    airlines = AirlineResolver(fake).resolve_airlines(offers_for("ZZ", "BA"))
    assert airline_names(airlines) == {"BA": "BRITISH AIRWAYS"}


def test_cached_across_result_sets(fake):
    resolver = AirlineResolver(fake, cache=LookupCache(ttl=60))
    resolver.resolve_airlines(offers_for("BA"))
    resolver.resolve_airlines(offers_for("BA", "AA"))
    assert len(fake.calls_to("lookup_airlines")) == 2
