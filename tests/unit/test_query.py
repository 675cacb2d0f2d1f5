"""
Tests for Query composition.

Covers merge (&, where), $or (|, or_) and explicit $and (and_) semantics,
including the non-flattening of nested $or and the merge/and_ asymmetry.
"""

import copy
import pickle

import pytest

from mongrep import Query


class TestConstruction:
    """Tests for Query()."""

    def test_defaults_to_empty_query(self):
        assert dict(Query().to_dict()) == {}

    def test_exposes_given_mapping(self):
        assert dict(Query({"test": 1}).to_dict()) == {"test": 1}

    def test_accepts_nested_values_verbatim(self):
        raw = {"price": {"$gt": 5}, "tags": ["a", "b"]}
        assert dict(Query(raw).to_dict()) == raw

    def test_caller_dict_is_copied(self):
        raw = {"test": 1}
        query = Query(raw)
        raw["test"] = 2

        assert query.to_dict()["test"] == 1

    def test_to_dict_is_read_only(self):
        with pytest.raises(TypeError):
            Query({"test": 1}).to_dict()["test"] = 2

    def test_attributes_cannot_be_set(self):
        with pytest.raises(AttributeError):
            Query().foo = 1

    def test_caller_nested_values_are_copied(self):
        raw = {"tags": {"$in": ["x"]}}
        query = Query(raw)
        raw["tags"]["$in"].append("y")

        assert query.to_dict()["tags"] == {"$in": ["x"]}

    def test_nested_values_cannot_be_changed_through_to_dict(self):
        query = Query({"a": 1}) | Query({"b": 2})
        query.to_dict()["$or"].append({"c": 3})

        assert query == Query({"$or": [{"a": 1}, {"b": 2}]})

    def test_as_filter_is_independent(self):
        query = Query({"tags": {"$in": ["x"]}})
        query.as_filter()["tags"]["$in"].append("y")

        assert query.as_filter() == {"tags": {"$in": ["x"]}}

    def test_copy_and_deepcopy(self):
        query = Query({"tags": {"$in": ["x"]}})

        assert copy.copy(query) == query
        assert copy.deepcopy(query) == query

    def test_pickle(self):
        query = Query({"$or": [{"a": 1}, {"b": 2}]})
        assert pickle.loads(pickle.dumps(query)) == query

    def test_structural_equality(self):
        assert Query({"a": 1, "b": 2}) == Query({"b": 2, "a": 1})
        assert Query({"a": 1}) != Query({"a": 2})


class TestMerge:
    """Tests for & (shallow merge)."""

    @pytest.fixture
    def first(self):
        return Query({"foo": 1, "bar": 2})

    @pytest.fixture
    def second(self):
        return Query({"foo": 2})

    def test_returns_a_query(self, first, second):
        assert isinstance(first & second, Query)

    def test_keys_of_other_win(self, first, second):
        assert dict((first & second).to_dict()) == {"foo": 2, "bar": 2}

    def test_does_not_modify_either_operand(self, first, second):
        _ = first & second

        assert dict(first.to_dict()) == {"foo": 1, "bar": 2}
        assert dict(second.to_dict()) == {"foo": 2}

    def test_nested_values_are_replaced_not_merged(self):
        query = Query({"foo": {"bar": 1}}) & Query({"foo": {"baz": 2}})
        assert dict(query.to_dict()) == {"foo": {"baz": 2}}

    def test_empty_query_is_identity(self):
        assert Query() & Query({"a": 1}) == Query({"a": 1})
        assert Query({"a": 1}) & Query() == Query({"a": 1})

    def test_merge_alias(self, first, second):
        assert first.merge(second) == first & second

    def test_accepts_plain_mapping(self, first):
        assert first & {"foo": 3} == Query({"foo": 3, "bar": 2})

    def test_rejects_non_mapping(self, first):
        with pytest.raises(TypeError):
            first & 5


class TestOr:
    """Tests for | ($or)."""

    @pytest.fixture
    def first(self):
        return Query({"foo": 1})

    @pytest.fixture
    def second(self):
        return Query({"foo": 2})

    def test_returns_a_query(self, first, second):
        assert isinstance(first | second, Query)

    def test_wraps_both_in_or(self, first, second):
        assert dict((first | second).to_dict()) == {"$or": [{"foo": 1}, {"foo": 2}]}

    def test_does_not_modify_either_operand(self, first, second):
        _ = first | second

        assert dict(first.to_dict()) == {"foo": 1}
        assert dict(second.to_dict()) == {"foo": 2}

    def test_repeated_or_nests_instead_of_flattening(self, first, second):
        third = Query({"foo": 3})
        combined = (first | second) | third

        assert dict(combined.to_dict()) == {
            "$or": [{"$or": [{"foo": 1}, {"foo": 2}]}, {"foo": 3}]
        }

    def test_accepts_plain_mapping(self, first):
        assert first | {"foo": 2} == Query({"$or": [{"foo": 1}, {"foo": 2}]})

    def test_rejects_non_mapping(self, first):
        with pytest.raises(TypeError):
            first | "foo"


class TestWhere:
    """Tests for where()."""

    @pytest.fixture
    def query(self):
        return Query({"foo": 1, "bar": 2})

    def test_returns_a_query(self, query):
        assert isinstance(query.where({}), Query)

    def test_merges_given_mapping(self, query):
        assert dict(query.where({"foo": 2}).to_dict()) == {"foo": 2, "bar": 2}

    def test_does_not_modify_query(self, query):
        _ = query.where({"foo": 2})
        assert dict(query.to_dict()) == {"foo": 1, "bar": 2}


class TestOrWhere:
    """Tests for or_()."""

    def test_combines_with_or(self):
        query = Query({"foo": 1}).or_({"foo": 2})
        assert dict(query.to_dict()) == {"$or": [{"foo": 1}, {"foo": 2}]}

    def test_chains_after_where(self):
        query = Query().where({"name": "test 1"}).or_({"name": "test 2"})
        assert dict(query.to_dict()) == {"$or": [{"name": "test 1"}, {"name": "test 2"}]}

    def test_does_not_modify_query(self):
        query = Query({"foo": 1})
        _ = query.or_({"foo": 2})
        assert dict(query.to_dict()) == {"foo": 1}


class TestAnd:
    """Tests for and_() (explicit $and, unlike & and where())."""

    @pytest.fixture
    def query(self):
        return Query({"foo": {"bar": 1}})

    def test_returns_a_query(self, query):
        assert isinstance(query.and_({}), Query)

    def test_builds_explicit_and_node(self, query):
        assert dict(query.and_({"foo": {"foo": 2}}).to_dict()) == {
            "$and": [{"foo": {"bar": 1}}, {"foo": {"foo": 2}}]
        }

    def test_differs_from_where_on_shared_keys(self, query):
        merged = query.where({"foo": {"foo": 2}})
        anded = query.and_({"foo": {"foo": 2}})

        assert dict(merged.to_dict()) == {"foo": {"foo": 2}}
        assert merged != anded

    def test_does_not_modify_query(self, query):
        _ = query.and_({"foo": 2})
        assert dict(query.to_dict()) == {"foo": {"bar": 1}}
