"""Tests for FeedEntryClient against a recording transport."""

import pytest

from feedprops.client import FeedEntryClient, entry_url
from feedprops.converters import PropertyConverter, convert_xml_to_properties
from feedprops.errors import ClientError, ParseError, SerializationError, ValidationError
from feedprops.models import FeedEntry

from .conftest import ENTRY_URL, FEED_URL, VEHICLE_MAP, VEHICLE_XML


@pytest.fixture
def client(transport):
    return FeedEntryClient(transport)


# ---------------------------------------------------------------------------
# entry_url
# ---------------------------------------------------------------------------

def test_entry_url_appends_name():
    assert entry_url(FEED_URL, {"name": "vehicle0"}) == ENTRY_URL


def test_entry_url_strips_trailing_slash():
    assert entry_url(FEED_URL + "/", {"name": "vehicle0"}) == ENTRY_URL


@pytest.mark.parametrize("props", [{}, {"name": None}, {"name": ["a"]}, {"name": 7}, {"name": "  "}])
def test_entry_url_rejects_unusable_name(props):
    with pytest.raises(ValidationError):
        entry_url(FEED_URL, props)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def test_get_entry(client, transport):
    transport.entries[ENTRY_URL] = FeedEntry.from_payload(VEHICLE_XML)
    assert client.get_entry(ENTRY_URL) == VEHICLE_MAP
    assert transport.calls == [("fetch_entry", ENTRY_URL, None)]


def test_get_entry_wraps_transport_failure(client, transport):
    transport.fail_on["http://badUrl"] = IOError("invalid URL")
    with pytest.raises(ClientError) as excinfo:
        client.get_entry("http://badUrl")
    assert isinstance(excinfo.value.cause, IOError)
    assert str(excinfo.value.cause) == "invalid URL"
    assert excinfo.value.__cause__ is excinfo.value.cause


def test_get_entry_malformed_payload_raises_parse_error(client, transport):
    transport.entries[ENTRY_URL] = FeedEntry.from_payload("<entity><name>vehicle0</entity>")
    with pytest.raises(ParseError):
        client.get_entry(ENTRY_URL)


def test_get_entries_preserves_feed_order(client, transport):
    transport.feeds[FEED_URL] = [
        FeedEntry.from_payload("<entity><name>b</name></entity>"),
        FeedEntry.from_payload("<entity><name>a</name></entity>"),
    ]
    assert client.get_entries(FEED_URL) == [{"name": "b"}, {"name": "a"}]


def test_get_entries_empty_feed(client, transport):
    assert client.get_entries(FEED_URL) == []


def test_get_entries_one_bad_entry_fails_the_call(client, transport):
    transport.feeds[FEED_URL] = [
        FeedEntry.from_payload("<entity><name>a</name></entity>"),
        FeedEntry.from_payload("<entity>"),
    ]
    with pytest.raises(ParseError):
        client.get_entries(FEED_URL)


def test_get_map_from_xml_makes_no_transport_call(client, transport):
    assert client.get_map_from_xml(VEHICLE_XML) == VEHICLE_MAP
    assert transport.calls == []


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def test_insert_entry(client, transport):
    stored = client.insert_entry(FEED_URL, VEHICLE_MAP)
    assert stored == VEHICLE_MAP
    (op, url, entry), = transport.calls
    assert (op, url) == ("insert", ENTRY_URL)
    assert convert_xml_to_properties(entry.payload) == VEHICLE_MAP


def test_update_entry(client, transport):
    client.update_entry(FEED_URL, VEHICLE_MAP)
    (op, url, entry), = transport.calls
    assert (op, url) == ("update", ENTRY_URL)
    assert entry.payload.startswith("<entity>")
    assert '<propertyName repeatable="true">prop0</propertyName>' in entry.payload


def test_write_uses_converter_root_tag(transport):
    client = FeedEntryClient(transport, PropertyConverter(root_tag="vehicle"))
    client.update_entry(FEED_URL, {"name": "vehicle0"})
    assert transport.calls[0][2].payload == "<vehicle><name>vehicle0</name></vehicle>"


@pytest.mark.parametrize("method", ["insert_entry", "update_entry"])
def test_write_without_name_fails_before_transport_call(client, transport, method):
    props = {k: v for k, v in VEHICLE_MAP.items() if k != "name"}
    with pytest.raises(ValidationError):
        getattr(client, method)(FEED_URL, props)
    assert transport.calls == []


@pytest.mark.parametrize("method", ["insert_entry", "update_entry"])
def test_write_with_non_string_name_fails(client, transport, method):
    with pytest.raises(ValidationError):
        getattr(client, method)(FEED_URL, {"name": ["vehicle0", "vehicle1"]})
    assert transport.calls == []


def test_write_with_unserializable_value_fails_before_transport_call(client, transport):
    with pytest.raises(SerializationError):
        client.insert_entry(FEED_URL, {"name": "vehicle0", "year": 2007})
    assert transport.calls == []


def test_update_wraps_transport_failure(client, transport):
    transport.fail_on[ENTRY_URL] = RuntimeError("conflict")
    with pytest.raises(ClientError) as excinfo:
        client.update_entry(FEED_URL, VEHICLE_MAP)
    assert isinstance(excinfo.value.cause, RuntimeError)


def test_delete_entry_by_url(client, transport):
    client.delete_entry(ENTRY_URL)
    assert transport.calls == [("delete", ENTRY_URL, None)]


def test_delete_entry_by_name(client, transport):
    client.delete_entry(FEED_URL, VEHICLE_MAP)
    assert transport.calls == [("delete", ENTRY_URL, None)]


def test_delete_entry_by_name_requires_name(client, transport):
    with pytest.raises(ValidationError):
        client.delete_entry(FEED_URL, {"owner": "Joe"})
    assert transport.calls == []


def test_delete_wraps_transport_failure(client, transport):
    transport.fail_on[ENTRY_URL] = IOError("gone")
    with pytest.raises(ClientError):
        client.delete_entry(ENTRY_URL)


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------

def test_insert_entries_in_order(client, transport):
    results = client.insert_entries(FEED_URL, [{"name": "a"}, {"name": "b"}])
    assert results == [{"name": "a"}, {"name": "b"}]
    assert [c[1] for c in transport.calls] == [FEED_URL + "/a", FEED_URL + "/b"]


def test_update_entries_stops_at_first_validation_error(client, transport):
    with pytest.raises(ValidationError):
        client.update_entries(FEED_URL, [{"name": "a"}, {"owner": "nobody"}, {"name": "c"}])
    assert [c[1] for c in transport.calls] == [FEED_URL + "/a"]


def test_insert_entries_stops_at_first_transport_error(client, transport):
    transport.fail_on[FEED_URL + "/b"] = IOError("down")
    with pytest.raises(ClientError):
        client.insert_entries(FEED_URL, [{"name": "a"}, {"name": "b"}, {"name": "c"}])
    assert [c[1] for c in transport.calls] == [FEED_URL + "/a", FEED_URL + "/b"]
    assert FEED_URL + "/c" not in transport.entries


def test_delete_entries(client, transport):
    client.delete_entries(FEED_URL, [{"name": "a"}, {"name": "b"}])
    assert transport.calls == [
        ("delete", FEED_URL + "/a", None),
        ("delete", FEED_URL + "/b", None),
    ]
