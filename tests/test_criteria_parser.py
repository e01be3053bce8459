"""
Tests for criteria parsing.

Tests cover:
- Entry classification order
- Positional tuple defaults
- Nested groups (list and mapping shaped)
- Criterion validation
"""

import pytest

from repokit.criteria import Criterion, Group, RelationCriterion, parse_criteria, validate_criterion
from repokit.criteria.parser import is_nested_group
from repokit.utils.exceptions import BadCriteriaError


class TestParseCriteria:
    """Tests for parse_criteria()"""

    def test_mapping_is_equality_shorthand(self):
        """String keys with scalar values become equality criteria."""
        group = parse_criteria({"field1": 67, "field2": "s"})

        assert group.terms == (
            Criterion("field1", "=", 67),
            Criterion("field2", "=", "s"),
        )

    def test_none_and_dates_are_scalars(self):
        """None and dates are accepted as shorthand values."""
        from datetime import date

        group = parse_criteria({"email": None, "born": date(2000, 1, 1)})

        assert group.terms[0] == Criterion("email", "=", None)
        assert group.terms[1].value == date(2000, 1, 1)

    def test_positional_tuple(self):
        """[attribute, operator, value, boolean] is parsed positionally."""
        group = parse_criteria([["field1", ">", 5, "or"]])

        assert group.terms == (Criterion("field1", ">", 5, boolean="or"),)

    def test_positional_tuple_defaults(self):
        """Missing trailing elements default to None, None and 'and'."""
        group = parse_criteria([["field1"]])

        assert group.terms == (Criterion("field1", None, None, boolean="and"),)

    def test_criterion_instance_kept(self):
        """Criterion instances are used as they are."""
        criterion = Criterion("field1", "in", [1, 2], boolean="or")

        group = parse_criteria([criterion])

        assert group.terms[0] is criterion

    def test_criterion_instance_wins_over_string_key(self):
        """An instance is never shape-sniffed, even under a string key."""
        criterion = Criterion("field1", "<", 3)

        group = parse_criteria({"ignored": criterion})

        assert group.terms[0] is criterion

    def test_relation_criterion_kept(self):
        """RelationCriterion instances are used as they are."""
        term = RelationCriterion("cars", [["brand", "=", "Volvo"]])

        group = parse_criteria([term])

        assert group.terms[0] is term

    def test_nested_list_is_group(self):
        """A list of lists under an integer key is a nested group."""
        group = parse_criteria([[["field1", "<", 10], ["field1", ">", 100]]])

        nested = group.terms[0]
        assert isinstance(nested, Group)
        assert nested.boolean == "and"
        assert nested.terms == (
            Criterion("field1", "<", 10),
            Criterion("field1", ">", 100),
        )

    def test_mapping_group_with_boolean(self):
        """The reserved 'boolean' key sets the joiner of a mapping group."""
        group = parse_criteria([
            ["field3", "=", "x"],
            {0: ["field1", "=", 1], 1: ["field2", "=", "b"], "boolean": "or"},
        ])

        nested = group.terms[1]
        assert isinstance(nested, Group)
        assert nested.boolean == "or"
        assert len(nested.terms) == 2

    def test_explicit_group_is_normalized(self):
        """Group instances keep their joiner; their members are parsed."""
        group = parse_criteria([Group([["field1", "=", 1]], boolean="or")])

        assert group.terms[0] == Group((Criterion("field1", "=", 1),), boolean="or")

    def test_single_term_input(self):
        """A bare term is treated as a one element list."""
        group = parse_criteria(Criterion("field1", "=", 1))

        assert group.terms == (Criterion("field1", "=", 1),)

    def test_empty_input(self):
        """Empty and missing input produce an empty group."""
        assert parse_criteria(None).terms == ()
        assert parse_criteria({}).terms == ()
        assert parse_criteria([]).terms == ()

    @pytest.mark.parametrize(
        "criteria",
        [
            {"field1": [1, 2]},  # string key with a list
            {"field1": {"nested": 1}},  # string key with a mapping
            [[]],  # empty positional tuple
            ["field1"],  # bare string under an integer key
            [42],  # scalar under an integer key
            [{"field2": "s"}],  # field mapping under an integer key
            "field1 = 1",  # not a mapping or list
        ],
    )
    def test_unsupported_entries_fail(self, criteria):
        """Entries matching no rule raise BadCriteriaError."""
        with pytest.raises(BadCriteriaError):
            parse_criteria(criteria)


class TestIsNestedGroup:
    """Tests for nested group detection."""

    def test_list_of_lists(self):
        assert is_nested_group([["a", "=", 1], ["b", "=", 2]])

    def test_positional_tuple_is_not_group(self):
        """A tuple whose first element is a string is a criterion."""
        assert not is_nested_group(["a", "=", 1])

    def test_mapping_with_invalid_boolean(self):
        assert not is_nested_group({0: ["a", "=", 1], "boolean": "xor"})

    def test_mapping_without_members(self):
        assert not is_nested_group({"boolean": "or"})

    def test_empty(self):
        assert not is_nested_group([])


class TestValidateCriterion:
    """Tests for validate_criterion()"""

    def test_normalizes_case(self):
        """Operator and joiner are lower-cased."""
        criterion = validate_criterion(Criterion("field1", "NOT IN", [1], boolean="OR"))

        assert criterion == Criterion("field1", "not in", [1], boolean="or")

    def test_valid_criterion_returned_unchanged(self):
        criterion = Criterion("field1", "like", "a%")

        assert validate_criterion(criterion) is criterion

    @pytest.mark.parametrize(
        "criterion",
        [
            Criterion("field1", "xor", 1),  # unknown operator
            Criterion("field1", "in", "not-a-list"),  # in with a scalar
            Criterion("field1", "=", [1, 2]),  # single operator with a list
            Criterion("field1", "=", {"a": 1}),  # single operator with a mapping
            Criterion("field1", "in", {"a": 1}),  # membership with a mapping
            Criterion("field1", "=", object()),  # not a column value
            Criterion("field1", None, 1),  # missing operator
            Criterion(None, "=", 1),  # missing attribute
            Criterion("", "=", 1),  # empty attribute
            Criterion("field1", "=", 1, boolean="xor"),  # bad joiner
            Criterion("field1", "=", 1, boolean=""),  # empty joiner
        ],
    )
    def test_invalid_criteria_fail(self, criterion):
        with pytest.raises(BadCriteriaError):
            validate_criterion(criterion)

    def test_sets_are_collections(self):
        """Sets and tuples count as lists for membership operators."""
        assert validate_criterion(Criterion("field1", "in", {1, 2})).operator == "in"
        assert validate_criterion(Criterion("field1", "in", (1, 2))).operator == "in"

    def test_error_names_entity(self):
        """Errors are tagged with the entity type."""
        with pytest.raises(BadCriteriaError) as exc_info:
            validate_criterion(Criterion("field1", "xor", 1), entity_type="TestEntity")

        assert str(exc_info.value).startswith("TestEntity: ")
        assert exc_info.value.status_code == 400
