import logging

import pytest
from halsync.errors import MissingTransportError, ModelValidationError
from halsync.links import Link
from halsync.resource import Resource
from pydantic import BaseModel


def test_parse_splits_links_and_embedded(orders_body):
    sut = Resource()
    sut.parse(orders_body)

    assert sut.currentlyProcessing == 14
    assert sut.shippedToday == 20
    assert "_links" not in sut.properties
    assert "_embedded" not in sut.properties
    assert sut.links("self")[0].href == "http://a.com/orders"


def test_serialize_round_trips(orders_body):
    sut = Resource()
    sut.parse(orders_body)

    assert sut.serialize() == orders_body


def test_serialize_can_drop_links_and_embedded(orders_body):
    sut = Resource(body=orders_body)

    assert sut.serialize(include_links=False, include_embedded=False) == {
        "currentlyProcessing": 14,
        "shippedToday": 20,
    }
    assert "_embedded" in sut.serialize(include_links=False)
    assert "_links" not in sut.serialize(include_links=False)


def test_serialize_omits_identity():
    sut = Resource("http://a.com/orders", {"name": "A"})
    assert sut.serialize(include_links=False) == {"name": "A"}


def test_links_cardinality(orders_body):
    sut = Resource(body=orders_body)

    assert sut.links("missing") == []
    assert len(sut.links("next")) == 1
    assert len(sut.links("ea:multi")) == 3
    admins = sut.links("ea:admin")
    assert [link.title for link in admins] == ["Fred", "Kate"]
    assert all(isinstance(link, Link) for link in admins)
    find = sut.links("ea:find")[0]
    assert find.templated is True


def test_lazy_resource_seeds_self_link():
    sut = Resource("http://a.com/orders")

    assert sut.self_uri == "http://a.com/orders"
    assert sut.link_map == {"self": {"href": "http://a.com/orders"}}
    assert sut.properties == {}
    assert sut.original_body is None


def test_self_accepts_link_spec():
    sut = Resource({"href": "http://a.com/orders{?page}", "templated": True})

    assert sut.self_uri == "http://a.com/orders{?page}"
    assert sut.links("self")[0].templated is True


def test_seed_body_corrects_self(orders_body):
    sut = Resource("http://a.com/whatever", orders_body)
    assert sut.self_uri == "http://a.com/orders"
    assert sut.original_body == {"currentlyProcessing": 14, "shippedToday": 20}


def test_self_lookup_falls_back_to_identity():
    sut = Resource("http://a.com/a", {"name": "A"})

    assert sut.link_map == {}
    assert sut.links("self")[0].href == "http://a.com/a"


def test_empty_resource_has_no_identity():
    sut = Resource()
    assert sut.self_uri is None
    assert sut.links("self") == []
    assert sut.serialize() == {}


def test_property_sugar():
    sut = Resource(body={"name": "A", "_type": "Order"})

    sut.name = "B"
    sut.total = 3
    assert sut.properties == {"name": "B", "_type": "Order", "total": 3}
    assert sut["_type"] == "Order"
    assert "total" in sut

    del sut.total
    del sut["_type"]
    assert sut.properties == {"name": "B"}

    with pytest.raises(AttributeError):
        sut.missing


def test_reserved_keys_cannot_be_assigned():
    sut = Resource()
    with pytest.raises(KeyError):
        sut["_links"] = {}


def test_methods_win_over_properties():
    sut = Resource(body={"links": "shadowed?", "get": 1})

    assert callable(sut.links)
    assert sut["links"] == "shadowed?"
    assert sut.serialize() == {"links": "shadowed?", "get": 1}


def test_assigning_a_member_name_is_rejected():
    sut = Resource(body={"a": 1})

    with pytest.raises(AttributeError, match="links"):
        sut.links = ["x"]

    sut["links"] = ["x"]
    assert callable(sut.links)
    assert sut.properties == {"a": 1, "links": ["x"]}


def test_parse_replaces_properties():
    sut = Resource(body={"a": 1, "b": 2})
    sut.parse({"a": 5})

    assert sut.properties == {"a": 5}
    assert sut.original_body == {"a": 5}


def test_parse_json_string():
    sut = Resource()
    result = sut.parse('{"a": 1, "_links": {"self": {"href": "/x"}}}')

    assert result == {"a": 1, "_links": {"self": {"href": "/x"}}}
    assert sut.a == 1
    # public parse never moves the identity
    assert sut.self_uri is None


def test_parse_malformed_string_keeps_state(caplog):
    sut = Resource(body={"a": 1})

    with caplog.at_level(logging.WARNING, logger="halsync.resource"):
        assert sut.parse("{not json") is None

    assert sut.properties == {"a": 1}
    record = next(r for r in caplog.records if r.getMessage() == "hal.parse_failure")
    assert "Malformed JSON" in record.error


def test_parse_non_object_keeps_state(caplog):
    sut = Resource(body={"a": 1})

    with caplog.at_level(logging.WARNING, logger="halsync.resource"):
        assert sut.parse("[1, 2]") is None

    assert sut.properties == {"a": 1}
    assert any(r.getMessage() == "hal.parse_failure" for r in caplog.records)


def test_parse_json_null_keeps_state(caplog):
    sut = Resource(
        "http://a.com/x",
        {"name": "A", "_links": {"next": {"href": "http://a.com/y"}}},
    )

    with caplog.at_level(logging.WARNING, logger="halsync.resource"):
        assert sut.parse("null") is None

    assert sut.properties == {"name": "A"}
    assert sut.original_body == {"name": "A"}
    assert sut.links("next")[0].href == "http://a.com/y"
    assert any(r.getMessage() == "hal.parse_failure" for r in caplog.records)


def test_original_body_is_a_snapshot():
    sut = Resource(body={"deep": {"thoughts": "jack"}})
    sut.deep["thoughts"] = "jazz"

    assert sut.original_body == {"deep": {"thoughts": "jack"}}


def test_allow_getter_setter():
    sut = Resource()
    assert sut.allow() == []
    assert sut.allow(["GET", "PUT"]) == ["GET", "PUT"]
    assert sut.allowed_methods == ["GET", "PUT"]


def test_clone_is_deep_and_shares_transport(orders_body, recording_fetch):
    fetch = recording_fetch()
    sut = Resource("http://a.com/orders", orders_body, fetch=fetch)
    sut.allow(["GET"])
    twin = sut.clone()

    twin.currentlyProcessing = 0
    twin.allow(["DELETE"])

    assert twin is not sut
    assert twin.fetch is fetch
    assert twin.self_uri == sut.self_uri
    assert sut.currentlyProcessing == 14
    assert sut.allowed_methods == ["GET"]
    assert twin.serialize(include_links=False) != sut.serialize(include_links=False)
    assert twin.link_map == sut.link_map
    assert twin.original_body == sut.original_body


def test_embedded_snapshots(orders_body):
    sut = Resource(body=orders_body)
    orders = sut.embedded("ea:order")

    assert [o.self_uri for o in orders] == [
        "http://a.com/orders/123",
        "http://a.com/orders/124",
    ]
    assert orders[0].total == 30.0
    assert orders[1].links("ea:basket")[0].href == "http://a.com/baskets/97213"
    assert sut.embedded("missing") == []


@pytest.mark.asyncio
async def test_embedded_snapshot_cannot_sync(orders_body):
    order = Resource(body=orders_body).embedded("ea:order")[0]
    with pytest.raises(MissingTransportError):
        await order.get()


class Order(BaseModel):
    total: float
    currency: str


def test_to_model(orders_body):
    order = Resource(body=orders_body).embedded("ea:order")[0].to_model(Order)
    assert order == Order(total=30.0, currency="USD")


def test_to_model_mismatch_raises(orders_body):
    with pytest.raises(ModelValidationError) as exc:
        Resource(body=orders_body).to_model(Order)

    assert "Order" in str(exc.value)


def test_to_json(orders_body):
    sut = Resource(body=orders_body)
    assert '"currentlyProcessing": 14' in sut.to_json(include_links=False)
