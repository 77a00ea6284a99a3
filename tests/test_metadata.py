import pytest

from swiftstore.metadata import ContainerMetadata, Metadata, ObjectMetadata


class PlainMetadata(Metadata):
    prefix = "X-Meta-"


def test_constructor_stores_initial_values():
    metadata = PlainMetadata({"foo": "bar"})
    assert metadata.has("foo")


def test_str_of_empty_bag_is_empty():
    assert str(PlainMetadata()) == ""


def test_str_renders_sorted_aligned_lines():
    metadata = PlainMetadata({"foo": "bar"})
    assert str(metadata) == "Foo: bar\r\n"

    metadata = PlainMetadata({"zed": "1", "content-kind": "2"})
    assert str(metadata) == "Content-Kind: 2\r\nZed:          1\r\n"


def test_keys_keep_insertion_order():
    metadata = PlainMetadata({"foo": "bar", "bar": "baz"})
    assert metadata.keys() == ["foo", "bar"]


def test_all_lowercases_keys():
    assert PlainMetadata({"foo": "bar"}).all() == {"foo": "bar"}
    assert PlainMetadata({"FOO": "BAR"}).all() == {"foo": "BAR"}


def test_replace_drops_previous_values():
    metadata = PlainMetadata({"foo": "bar"})
    metadata.replace({"NOPE": "BAR"})

    assert metadata.all() == {"nope": "BAR"}
    assert not metadata.has("foo")


def test_get_and_defaults():
    metadata = PlainMetadata({"foo": "bar", "fuzz": "bizz"})

    assert metadata.get("foo") == "bar"
    assert metadata.get("FoO") == "bar"
    assert metadata.get("none") is None
    assert metadata.get("none", "default") == "default"


@pytest.mark.parametrize("key", ["cache_control", "Cache-Control", "CACHE_CONTROL", "X-Meta-Cache-Control", "x-meta-cache_control"])
def test_key_variants_address_same_entry(key):
    metadata = PlainMetadata({"cache-control": "max-age=60"})
    assert metadata.get(key) == metadata.get("cache-control") == "max-age=60"
    assert key in metadata


def test_set_keeps_first_element_of_sequences():
    metadata = PlainMetadata()

    metadata.set("foo", ["value", "other"])
    assert metadata.get("foo") == "value"

    metadata.set("foo", ("tuple",))
    assert metadata.get("foo") == "tuple"

    metadata.set("foo", [])
    assert metadata.get("foo") is None
    assert metadata.has("foo")


def test_set_stores_strings():
    metadata = PlainMetadata({"Max-Age": 3600})
    metadata.set("enabled", True)
    metadata.set("ids", [7, 8])

    assert metadata.get("max-age") == "3600"
    assert metadata.get("enabled") == "True"
    assert metadata.get("ids") == "7"
    assert metadata.get_headers() == {"X-Meta-Max-Age": "3600", "X-Meta-Enabled": "True", "X-Meta-Ids": "7"}


def test_remove():
    metadata = PlainMetadata({"foo": "bar", "bar": "baz"})
    metadata.remove("BAR")
    assert not metadata.has("bar")

    metadata.remove("missing")
    assert len(metadata) == 1


def test_get_headers_are_prefixed_and_title_cased():
    metadata = PlainMetadata({"foo": "bar", "bar_baz": "qux", "empty": None})
    assert metadata.get_headers() == {"X-Meta-Foo": "bar", "X-Meta-Bar-Baz": "qux"}


def test_iteration_and_len():
    values = {"foo": "bar", "hello": "world", "third": "charm"}
    metadata = PlainMetadata(values)

    assert dict(metadata) == values
    assert len(PlainMetadata({"foo": "bar", "HELLO": "WORLD"})) == 2


def test_prefixed_key_detection_is_case_insensitive():
    metadata = ObjectMetadata()
    assert metadata.is_prefixed_key("X-Object-Meta-Foo")
    assert metadata.is_prefixed_key("x-object-meta-foo")
    assert not metadata.is_prefixed_key("X-Container-Meta-Foo")
    assert not metadata.is_prefixed_key("Content-Type")


def test_container_and_object_prefixes():
    container = ContainerMetadata({"X-Container-Meta-Read": ".r:*"})
    assert container.get("read") == ".r:*"
    assert container.get_headers() == {"X-Container-Meta-Read": ".r:*"}

    obj = ObjectMetadata({"x-object-meta-author": "me"})
    assert obj.get_headers() == {"X-Object-Meta-Author": "me"}
