"""Tests for the schema type registry and unit casting."""

import pytest

from typedgql.errors import UnfetchedFieldError
from typedgql.execute.utils import ErrorCollection, List
from typedgql.gql_models import GQLError
from typedgql.query_result import QueryResult
from typedgql.scalars import DateTimeScalar
from typedgql.schema_types import (
    AbstractType,
    EnumType,
    ListType,
    NonNullType,
    ObjectType,
    PossibleTypes,
    ScalarType,
    generate,
)


@pytest.fixture
def types(schema):
    return generate(schema)


class TestGenerate:
    def test_named_output_types_registered(self, types):
        for name in ("Person", "Dog", "Cat", "Node", "Pet", "Color", "Query", "DateTime"):
            assert name in types
        assert isinstance(types["Person"], ObjectType)
        assert isinstance(types["Node"], AbstractType)
        assert isinstance(types["Pet"], AbstractType)
        assert isinstance(types["Color"], EnumType)
        assert isinstance(types["String"], ScalarType)

    def test_introspection_types_skipped(self, types):
        assert not any(name.startswith("__") for name in types)

    def test_attribute_access(self, types):
        assert types.Person is types["Person"]
        with pytest.raises(AttributeError):
            types.Nope

    def test_self_reference_terminates(self, types):
        person = types.Person
        assert person.fields["bestFriend"] is person
        friends = person.fields["friends"]
        assert isinstance(friends, ListType)
        assert isinstance(friends.of_unit, NonNullType)
        assert friends.of_unit.of_unit is person

    def test_supertypes(self, types):
        assert types.Dog.is_a("Node")
        assert types.Dog.is_a("Pet")
        assert types.Dog.is_a("Dog")
        assert not types.Person.is_a("Pet")

    def test_scalar_override(self, schema):
        types = generate(schema, {"DateTime": DateTimeScalar})
        value = types.DateTime.cast("2020-01-02T03:04:05", ErrorCollection())
        assert value.year == 2020 and value.hour == 3

    def test_enum_values(self, types):
        assert types.Color.values == ("RED", "GREEN", "BLUE")
        assert types.Color.cast("RED", ErrorCollection()) == "RED"

    def test_deterministic(self, schema):
        first, second = generate(schema), generate(schema)
        assert list(first) == list(second)
        for name in first:
            assert first[name] == second[name]
            if isinstance(first[name], ObjectType):
                assert {k: repr(u) for k, u in first[name].fields.items()} == {
                    k: repr(u) for k, u in second[name].fields.items()
                }


class TestCasting:
    def test_scalar_none(self, types):
        assert types.String.cast(None, ErrorCollection()) is None
        assert types.Int.cast(3, ErrorCollection()) == 3

    def test_list_wraps_and_scopes_errors(self, types):
        errors = ErrorCollection(
            [GQLError(message="boom", path=["me", "friends", 1])], ("data", "me", "friends")
        )
        value = types.Person.fields["friends"].cast(
            [{"id": "1"}, {"id": "2"}], errors
        )
        assert isinstance(value, List)
        assert len(value) == 2
        assert value[1]._errors.messages == {None: ["boom"]}
        assert not value[0]._errors

    def test_list_non_list_is_none(self, types):
        assert types.Person.fields["friends"].cast("nope", ErrorCollection()) is None

    def test_schema_level_view(self, types):
        view = types.Person.cast({"id": "1", "firstName": "Ada"}, ErrorCollection())
        assert isinstance(view, QueryResult)
        assert view.first_name == "Ada"
        with pytest.raises(UnfetchedFieldError):
            view.last_name

    def test_abstract_dispatch(self, types):
        dog = types.Pet.cast({"__typename": "Dog", "name": "Rex"}, ErrorCollection())
        assert dog._typename == "Dog"
        assert dog.name == "Rex"
        assert types.Pet.cast({"__typename": "Fish"}, ErrorCollection()) is None

    def test_object_cast_rejects_non_mapping(self, types):
        with pytest.raises(TypeError):
            types.Person.cast(["x"], ErrorCollection())


class TestMerge:
    def test_same_scalar(self, types):
        assert (types.String | types.String) is types.String

    def test_different_scalars(self, types):
        with pytest.raises(TypeError):
            types.String | types.Int

    def test_non_null_vs_nullable(self, types):
        with pytest.raises(TypeError):
            NonNullType(types.String) | types.String

    def test_wrapping_equality(self, types):
        assert ListType(types.String) == ListType(types.String)
        assert NonNullType(types.String) != ListType(types.String)
        merged = ListType(types.String) | ListType(types.String)
        assert merged == ListType(types.String)

    def test_object_field_union(self, types):
        a = ObjectType(types.Person.type_, {"id": types.ID})
        b = ObjectType(types.Person.type_, {"firstName": types.String})
        merged = a | b
        assert set(merged.fields) == {"id", "firstName"}

    def test_object_different_types(self, types):
        with pytest.raises(TypeError):
            ObjectType(types.Dog.type_, {}) | ObjectType(types.Cat.type_, {})

    def test_possible_types_merge(self, types):
        a = PossibleTypes({"Dog": ObjectType(types.Dog.type_, {"name": types.String})})
        b = PossibleTypes(
            {
                "Dog": ObjectType(types.Dog.type_, {"barks": types.Boolean}),
                "Cat": ObjectType(types.Cat.type_, {"lives": types.Int}),
            }
        )
        merged = a | b
        assert set(merged.types) == {"Dog", "Cat"}
        assert set(merged.types["Dog"].fields) == {"name", "barks"}

    @pytest.fixture
    def units(self, types):
        return (
            ObjectType(types.Person.type_, {"id": types.ID}),
            ObjectType(types.Person.type_, {"firstName": types.String}),
            ObjectType(types.Person.type_, {"id": types.ID, "lastName": types.String}),
        )

    def test_object_merge_commutative(self, units):
        a, b, _ = units
        assert a | b == b | a
        assert set((a | b).fields) == {"id", "firstName"}

    def test_object_merge_associative(self, units):
        a, b, c = units
        assert (a | b) | c == a | (b | c)

    def test_object_merge_idempotent(self, units):
        a, _, c = units
        assert a | a == a
        assert c | c == c

    def test_possible_types_laws(self, types):
        a = PossibleTypes({"Dog": ObjectType(types.Dog.type_, {"name": types.String})})
        b = PossibleTypes({"Cat": ObjectType(types.Cat.type_, {"lives": types.Int})})
        c = PossibleTypes({"Dog": ObjectType(types.Dog.type_, {"barks": types.Boolean})})
        assert a | b == b | a
        assert (a | b) | c == a | (b | c)
        assert a | a == a
        assert set((a | c).types["Dog"].fields) == {"name", "barks"}
