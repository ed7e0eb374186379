import typing as T

import graphql
import pytest

from typedgql import Client

SDL = """
scalar DateTime

interface Node {
  id: ID!
}

type Person implements Node {
  id: ID!
  firstName: String
  lastName: String
  birthday: DateTime
  bestFriend: Person
  friends: [Person!]
  pets: [Pet]
}

type Dog implements Node {
  id: ID!
  name: String!
  barks: Boolean
}

type Cat implements Node {
  id: ID!
  name: String!
  lives: Int
}

union Pet = Dog | Cat

enum Color {
  RED
  GREEN
  BLUE
}

type Query {
  me: Person
  person(id: ID!): Person
  node(id: ID!): Node
  pets: [Pet!]!
  color: Color
}

type Mutation {
  updatePerson(id: ID!, firstName: String): Person
}
"""


class RecordingExecutor:
    """Returns a canned result and remembers how it was called."""

    def __init__(self, result: T.Mapping[str, T.Any] | None = None):
        self.result = result if result is not None else {"data": None}
        self.calls: list[dict[str, T.Any]] = []

    def execute(self, document, operation_name=None, variables=None, context=None):
        self.calls.append(
            {
                "document": document,
                "operation_name": operation_name,
                "variables": variables,
                "context": context,
            }
        )
        return self.result


@pytest.fixture
def schema() -> graphql.GraphQLSchema:
    return graphql.build_schema(SDL)


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def client(schema, executor) -> Client:
    return Client(schema, execute=executor)
