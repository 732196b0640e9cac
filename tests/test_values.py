from decimal import Decimal

import pytest

from appcontext.errors import (
    DuplicatePathError,
    InvalidArgumentError,
    TypeConversionError,
    UnsupportedOperationError,
    ValueShapeError,
)
from appcontext.settings import ContextSettings
from appcontext.values import ValueTree, is_scalar


@pytest.fixture
def tree() -> ValueTree:
    return ValueTree()


def test_register_and_get_leaf_string_value(tree):
    leaf = tree.register_value("a", "foo")

    assert tree.get_value("a") is leaf
    assert leaf.as_string() == "foo"
    assert leaf.is_leaf


def test_register_and_get_leaf_number_value(tree):
    leaf = tree.register_value("a", 2)

    assert tree.get_value("a") is leaf
    assert leaf.as_number() == 2


def test_register_leaf_in_object(tree):
    leaf = tree.register_value("a.b", "foo")

    assert tree.get_value("a.b") is leaf
    assert tree.get_value("a").is_object
    assert leaf.parent is tree.get_value("a")
    assert tree.get_value("a").parent is tree.root


def test_register_leaf_in_array(tree):
    leaf = tree.register_value("a.0", 2)

    container = tree.get_value("a")
    assert container.is_array
    assert container.child(0) is leaf
    assert tree.get_value("a.0").as_number() == 2


def test_register_object_inside_array(tree):
    tree.register_value("a.0.b", "x")
    tree.register_value("a.0.c", "y")

    element = tree.get_value("a.0")
    assert element.is_object
    assert sorted(element) == ["b", "c"]
    assert tree.get_value("a").child(0) is element


def test_array_indices_registered_in_reverse_order(tree):
    tree.register_value("a.1", 5)
    tree.register_value("a.0", "foo")

    array = tree.get_value("a")
    assert len(array) == 2
    assert tree.get_value("a.0").as_string() == "foo"
    assert tree.get_value("a.1").as_number() == 5
    assert array.child(0).as_string() == "foo"


def test_array_gap_reads_as_hole(tree):
    tree.register_value("a.2", "z")

    array = tree.get_value("a")
    assert len(array) == 3
    assert array.child(0) is None
    assert array.child(1) is None
    assert array.child(5) is None
    assert [index for index, _ in array.items()] == [2]


def test_register_same_path_twice_raises(tree):
    tree.register_value("a", 1)

    with pytest.raises(DuplicatePathError, match="Path 'a' has already been registered"):
        tree.register_value("a", 2)


@pytest.mark.parametrize("path", ["a.b", "a.0"])
def test_register_same_nested_path_twice_raises(tree, path):
    tree.register_value(path, 1)

    with pytest.raises(InvalidArgumentError):
        tree.register_value(path, 2)


def test_paths_are_case_insensitive_by_default(tree):
    leaf = tree.register_value("Db.Host", "localhost")

    assert tree.get_value("db.host") is leaf
    with pytest.raises(DuplicatePathError):
        tree.register_value("DB.HOST", "elsewhere")


def test_case_sensitive_paths_are_distinct():
    tree = ValueTree(ContextSettings(case_sensitive_paths=True))
    tree.register_value("A", 1)
    tree.register_value("a", 2)

    assert tree.get_value("A").as_number() == 1
    assert tree.get_value("a").as_number() == 2


def test_custom_separator():
    tree = ValueTree(ContextSettings(path_separator="/"))
    tree.register_value("server/ports/0", 8080)

    assert tree.join_path("server", "ports", 0) == "server/ports/0"
    assert tree.get_value("server/ports").is_array
    assert tree.has_value("server/ports/0")
    assert not tree.has_value("server.ports.0")


@pytest.mark.parametrize("path", ["", "   ", "a..b", "a. .b", ".a", "a."])
def test_blank_path_or_segment_raises(tree, path):
    with pytest.raises(InvalidArgumentError):
        tree.register_value(path, 1)


def test_non_string_path_raises(tree):
    with pytest.raises(InvalidArgumentError, match="Path must be a string"):
        tree.register_value(5, 1)


@pytest.mark.parametrize("value", [True, None, [1], {"a": 1}, object()])
def test_non_scalar_value_raises(tree, value):
    with pytest.raises(InvalidArgumentError, match="must be a string or number"):
        tree.register_value("a", value)

    assert not tree.has_value("a")


def test_numeric_index_at_root_raises(tree):
    with pytest.raises(InvalidArgumentError, match="starts with an array index"):
        tree.register_value("0", "foo")

    with pytest.raises(InvalidArgumentError, match="starts with an array index"):
        tree.register_value("0.a", "foo")


def test_leaf_cannot_become_container(tree):
    tree.register_value("a", 1)

    with pytest.raises(ValueShapeError, match="indexes a leaf value"):
        tree.register_value("a.b", 2)


def test_container_cannot_become_leaf(tree):
    tree.register_value("a.0.b", 1)

    with pytest.raises(ValueShapeError, match="already holds an object container"):
        tree.register_value("a.0", 2)
    with pytest.raises(ValueShapeError, match="already holds an array container"):
        tree.register_value("a", 2)


@pytest.mark.parametrize("path", ["a.00", "a.000"])
def test_padded_index_reaching_existing_leaf_is_a_duplicate(tree, path):
    tree.register_value("a.0", 1)

    with pytest.raises(DuplicatePathError, match=f"Path '{path}' has already been registered"):
        tree.register_value(path, 2)
    assert tree.get_value("a.0").as_number() == 1


def test_index_into_object_raises(tree):
    tree.register_value("a.b", 1)

    with pytest.raises(ValueShapeError, match="is an array index"):
        tree.register_value("a.0", 2)


def test_key_into_array_raises(tree):
    tree.register_value("a.0", 1)

    with pytest.raises(ValueShapeError, match="is an object key"):
        tree.register_value("a.b", 2)


def test_failed_registration_leaves_no_partial_nodes(tree):
    tree.register_value("a", 1)

    with pytest.raises(ValueShapeError):
        tree.register_value("a.b.c", 2)

    assert not tree.has_value("a.b")
    assert tree.get_value("a").as_number() == 1


def test_get_unregistered_path_raises(tree):
    with pytest.raises(InvalidArgumentError, match="has not been registered"):
        tree.get_value("missing")


def test_update_returns_previous_value(tree):
    leaf = tree.register_value("a", "foo")

    assert leaf.update("bar") == "foo"
    assert tree.get_value("a").as_string() == "bar"


@pytest.mark.parametrize(
    "raw, expected",
    [("42", 42), ("-7", -7), ("2.5", 2.5), ("1e3", 1000.0), (3, 3), (Decimal("1.10"), Decimal("1.10"))],
)
def test_as_number(tree, raw, expected):
    number = tree.register_value("a", raw).as_number()

    assert number == expected
    assert type(number) is type(expected)


def test_as_number_on_text_raises(tree):
    leaf = tree.register_value("a", "not a number")

    with pytest.raises(TypeConversionError, match="'not a number'"):
        leaf.as_number()


@pytest.mark.parametrize("raw", ["1_000", " 7 ", "7\n", "\t2.5", "1_0.5"])
def test_as_number_rejects_separators_and_whitespace(tree, raw):
    leaf = tree.register_value("a", raw)

    with pytest.raises(TypeConversionError, match="as a number"):
        leaf.as_number()


def test_containers_are_not_scalars(tree):
    tree.register_value("a.b", 1)
    tree.register_value("c.0", 1)

    for path in ("a", "c"):
        container = tree.get_value(path)
        with pytest.raises(UnsupportedOperationError):
            container.as_string()
        with pytest.raises(UnsupportedOperationError):
            container.as_number()
        with pytest.raises(UnsupportedOperationError):
            container.update(2)


def test_child_access_by_wrong_key_kind_raises(tree):
    tree.register_value("a.b", 1)
    tree.register_value("c.0", 1)

    with pytest.raises(UnsupportedOperationError, match="object container"):
        tree.get_value("a").child(0)
    with pytest.raises(UnsupportedOperationError, match="array container"):
        tree.get_value("c").child("b")
    with pytest.raises(UnsupportedOperationError, match="leaf value"):
        tree.get_value("a.b").child("x")


def test_root_is_object_without_parent(tree):
    assert tree.root.is_object
    assert tree.root.parent is None


@pytest.mark.parametrize(
    "value, expected",
    [("x", True), (1, True), (1.5, True), (Decimal("2"), True), (False, False), (None, False)],
)
def test_is_scalar(value, expected):
    assert is_scalar(value) is expected
