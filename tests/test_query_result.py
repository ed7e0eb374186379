"""Tests for casting responses into views and reading fields from them."""

import datetime

import pytest

from typedgql import (
    Client,
    ImplicitlyFetchedFieldError,
    NoFieldError,
    UndefinedFieldError,
    UnfetchedFieldError,
)
from typedgql.execute.utils import List
from typedgql.query_result import QueryResult, cast
from typedgql.scalars import DateTimeScalar


@pytest.fixture
def person_fragment(client):
    return client.parse(
        """
        fragment on Person {
          firstName
          lastName
        }
        """
    )


class TestFieldAccess:
    def test_snake_case_and_key_access(self, client):
        query = client.parse("query Me { me { id firstName } }")
        view = query.Me.new({"me": {"id": "1", "firstName": "Ada"}})
        assert view.me.first_name == "Ada"
        assert view.me.firstName == "Ada"
        assert view.me["firstName"] == "Ada"
        assert view.me.id == "1"

    def test_alias_is_response_key(self, client):
        query = client.parse("query Me { me { name: firstName } }")
        view = query.Me.new({"me": {"name": "Ada"}})
        assert view.me.name == "Ada"
        with pytest.raises(UnfetchedFieldError):
            view.me.first_name

    def test_values_are_cached(self, client):
        query = client.parse("query Me { me { bestFriend { id } } }")
        view = query.Me.new({"me": {"bestFriend": {"id": "2"}}})
        assert view.me.best_friend is view.me.best_friend

    def test_read_only(self, client):
        query = client.parse("query Me { me { id } }")
        view = query.Me.new({"me": {"id": "1"}})
        with pytest.raises(AttributeError):
            view.me = None
        with pytest.raises(AttributeError):
            del view.me

    def test_missing_declared_field_reads_none(self, client):
        query = client.parse("query Me($x: Boolean!) { me { id firstName @include(if: $x) } }")
        view = query.Me.new({"me": {"id": "1"}})
        assert view.me.first_name is None

    def test_null_object(self, client):
        query = client.parse("query Me { me { id } }")
        assert query.Me.new({"me": None}).me is None
        assert query.Me.new(None) is None

    def test_lists(self, client):
        query = client.parse("query Me { me { friends { firstName } } }")
        view = query.Me.new({"me": {"friends": [{"firstName": "A"}, {"firstName": "B"}]}})
        assert isinstance(view.me.friends, List)
        assert [f.first_name for f in view.me.friends] == ["A", "B"]

    def test_custom_scalar(self, schema):
        client = Client(schema, scalars={"DateTime": DateTimeScalar})
        query = client.parse("query Me { me { birthday } }")
        view = query.Me.new({"me": {"birthday": "1815-12-10T00:00:00"}})
        assert view.me.birthday == datetime.datetime(1815, 12, 10)

    def test_enum(self, client):
        query = client.parse("query Color { color }")
        assert query.Color.new({"color": "RED"}).color == "RED"


class TestNoFieldErrors:
    def test_implicitly_fetched(self, client, person_fragment):
        query = client.parse("query Me { me { id ...person_fragment } }")
        view = query.Me.new({"me": {"id": "1", "firstName": "Ada"}})
        with pytest.raises(ImplicitlyFetchedFieldError) as exc_info:
            view.me.first_name
        assert exc_info.value.field_name == "firstName"
        assert exc_info.value.type_name == "Person"

    def test_unfetched(self, client):
        query = client.parse("query Me { me { id } }")
        view = query.Me.new({"me": {"id": "1"}})
        with pytest.raises(UnfetchedFieldError) as exc_info:
            view.me.last_name
        assert "+ lastName" in str(exc_info.value)

    def test_undefined(self, client):
        query = client.parse("query Me { me { id } }")
        view = query.Me.new({"me": {"id": "1"}})
        with pytest.raises(UndefinedFieldError):
            view.me.nickname

    def test_errors_are_attribute_errors(self, client):
        query = client.parse("query Me { me { id } }")
        view = query.Me.new({"me": {"id": "1"}})
        assert not hasattr(view.me, "nickname")
        assert getattr(view.me, "last_name", "default") == "default"
        assert issubclass(UndefinedFieldError, NoFieldError)

    def test_item_access_undeclared(self, client):
        query = client.parse("query Me { me { id } }")
        view = query.Me.new({"me": {"id": "1"}})
        with pytest.raises(UnfetchedFieldError):
            view.me["lastName"]


class TestFragments:
    def test_cast_through_spread(self, client, person_fragment):
        query = client.parse("query Me { me { id ...person_fragment } }")
        view = query.Me.new({"me": {"id": "1", "firstName": "Ada", "lastName": "L"}})
        person = person_fragment.new(view.me)
        assert isinstance(person, QueryResult)
        assert person.first_name == "Ada"
        assert person._data is view.me._data
        with pytest.raises(ImplicitlyFetchedFieldError):
            person.id

    def test_same_unit_returns_view(self, client, person_fragment):
        person = person_fragment.new({"firstName": "Ada"})
        assert person_fragment.new(person) is person

    def test_not_included(self, client, person_fragment):
        query = client.parse("query Me { me { id } }")
        view = query.Me.new({"me": {"id": "1"}})
        with pytest.raises(TypeError, match="is not included in"):
            person_fragment.new(view.me)

    def test_non_mapping(self, person_fragment):
        with pytest.raises(TypeError):
            person_fragment.new("nope")

    def test_none(self, person_fragment):
        assert person_fragment.new(None) is None

    def test_inline_fragments_merge(self, client):
        query = client.parse(
            """
            query Pets {
              pets {
                ... on Dog { name barks }
                ... on Cat { name lives }
              }
            }
            """
        )
        view = query.Pets.new(
            {
                "pets": [
                    {"__typename": "Dog", "name": "Rex", "barks": True},
                    {"__typename": "Cat", "name": "Tom", "lives": 9},
                ]
            }
        )
        dog, cat = view.pets
        assert dog.barks is True
        assert cat.lives == 9
        assert dog._type_of("Pet", "Node")
        assert cat._typename == "Cat"
        with pytest.raises(UndefinedFieldError):
            dog.lives

    def test_interface_fields(self, client):
        query = client.parse(
            """
            query Node {
              node(id: "1") {
                id
                ... on Person { firstName }
              }
            }
            """
        )
        view = query.Node.new({"node": {"__typename": "Person", "id": "1", "firstName": "Ada"}})
        assert view.node.first_name == "Ada"
        view = query.Node.new({"node": {"__typename": "Dog", "id": "2"}})
        assert view.node.id == "2"
        with pytest.raises(UndefinedFieldError):
            view.node.first_name


class TestViewHelpers:
    def test_present(self, client):
        query = client.parse("query Me { me { id firstName } }")
        view = query.Me.new({"me": {"id": "1", "firstName": ""}})
        assert view.me._present("id")
        assert not view.me._present("first_name")

    def test_fields_and_to_dict(self, client):
        query = client.parse("query Me { me { id firstName } }")
        data = {"me": {"id": "1", "firstName": "Ada"}}
        view = query.Me.new(data)
        assert view.me._fields == ("id", "firstName")
        assert view._to_dict() == data

    def test_equality(self, client):
        query = client.parse("query Me { me { id } }")
        assert query.Me.new({"me": {"id": "1"}}) == query.Me.new({"me": {"id": "1"}})
        assert query.Me.new({"me": {"id": "1"}}) != query.Me.new({"me": {"id": "2"}})

    def test_repr_elides_nested(self, client):
        query = client.parse("query Me { me { id bestFriend { id } } }")
        view = query.Me.new({"me": {"id": "1", "bestFriend": {"id": "2"}}})
        assert repr(view.me).endswith("id='1' bestFriend=...>")

    def test_dir_lists_accessors(self, client):
        query = client.parse("query Me { me { firstName } }")
        view = query.Me.new({"me": {"firstName": "Ada"}})
        assert "first_name" in dir(view.me)
        assert "firstName" in dir(view.me)


class TestCast:
    def test_scopes_errors_under_data(self, client):
        query = client.parse("query Me { me { id firstName } }")
        view = cast(
            {"me": {"id": "1", "firstName": None}},
            query.Me,
            [{"message": "no name", "path": ["me", "firstName"]}],
        )
        assert view._errors.path == ("data",)
        assert view.me._errors["firstName"] == ["no name"]
        assert view._errors.all()["me"] == ["no name"]
