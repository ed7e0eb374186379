import logging
import re
import time
import typing as T
import graphql

from typedgql.errors import ValidationError
from typedgql.gql_ast.document_types import DocumentTypes, analyze_types
from typedgql.gql_ast.models import (
    Definition,
    Definitions,
    FragmentDefinition,
    NameBinding,
    SourceLocation,
)
from typedgql.gql_ast.slice import slice_document
from typedgql.gql_ast.typename import insert_typename_fields
from typedgql.schema_types import SchemaTypes
from typedgql.utils import freeze, walk

logger = logging.getLogger(__name__)

ANONYMOUS = "__anonymous__"

# strings and comments are matched first so spreads inside them are left alone
SPREAD_RE = re.compile(
    r'"""(?:[^"\\]|\\.|"(?!""))*"""'
    r'|"(?:[^"\\\n]|\\.)*"'
    r"|#[^\n]*"
    r"|\.\.\.(?P<reference>[a-zA-Z0-9_]+(?:\.[a-zA-Z0-9_]+)*)"
)
ANONYMOUS_FRAGMENT_RE = re.compile(r"\bfragment(\s+)on\b")

# fragments are pulled into a document only where spread, and __typename is
# injected after validation, so these two rules cannot hold yet
RELAXED_RULES = (graphql.NoUnusedFragmentsRule, graphql.ScalarLeafsRule)
VALIDATION_RULES = tuple(
    rule for rule in graphql.specified_rules if rule not in RELAXED_RULES
)

NameAllocator = T.Callable[[str | None], str]


class DocumentCompiler:
    """Compiles one block of query text into named, sliced definitions."""

    def __init__(
        self,
        *,
        schema: graphql.GraphQLSchema,
        types: SchemaTypes,
        source: str,
        source_location: SourceLocation,
        scope: T.Mapping[str, T.Any],
        allocate_name: NameAllocator,
    ):
        self.schema = schema
        self.types = types
        self.source = source
        self.source_location = source_location
        self.scope = scope
        self.allocate_name = allocate_name
        self.dependencies: dict[str, graphql.DefinitionNode] = {}

    def error(self, message: str, line_offset: int = 0) -> ValidationError:
        return ValidationError(
            message,
            filename=self.source_location.filename,
            lineno=self.source_location.lineno + line_offset,
        )

    def resolve_reference(self, reference: str) -> T.Any:
        head, *rest = reference.split(".")
        if head not in self.scope:
            return None
        obj = self.scope[head]
        for attr in rest:
            obj = getattr(obj, attr, None)
            if obj is None:
                return None
        return obj

    def interpolate_fragments(self, source: str) -> str:
        """Rewrite spreads of previously compiled fragments to their emitted names."""

        def replace(match: re.Match) -> str:
            reference = match.group("reference")
            if reference is None or reference == "on" or re.search(
                rf"\bfragment\s+{re.escape(reference)}\b", source
            ):
                return match.group(0)

            fragment = self.resolve_reference(reference)
            if isinstance(fragment, FragmentDefinition):
                for node in fragment.document.definitions:
                    self.dependencies.setdefault(node.name.value, node)
                return f"...{fragment.definition_name}"

            if fragment is None:
                message = f"name '{reference}' is not defined"
            else:
                message = (
                    f"expected {reference} to be a FragmentDefinition, "
                    f"but was a {type(fragment).__name__}."
                )
                if isinstance(fragment, Definitions) and fragment.fragments():
                    member = fragment.fragments()[0].name
                    message += f" Did you mean {reference}.{member}?"
            line_offset = source.count("\n", 0, match.start())
            raise self.error(message, line_offset)

        return SPREAD_RE.sub(replace, source)

    def parse(self) -> graphql.DocumentNode:
        source = self.interpolate_fragments(self.source)
        source = ANONYMOUS_FRAGMENT_RE.sub(rf"fragment\g<1>{ANONYMOUS} on", source)
        document = graphql.parse(source)
        anonymous = 0
        for node in document.definitions:
            if getattr(node, "name", None) is None:
                node.name = graphql.NameNode(value=ANONYMOUS)
            if node.name.value == ANONYMOUS:
                anonymous += 1
        if anonymous > 1:
            raise self.error("a block may contain at most one anonymous definition")
        return document

    def validate(self, document: graphql.DocumentNode) -> None:
        errors = graphql.validate(self.schema, document, VALIDATION_RULES)
        if errors:
            error = errors[0]
            line = error.locations[0].line if error.locations else 1
            raise self.error(error.message, line - 1)

    def build_definitions(
        self,
        document: graphql.DocumentNode,
        document_with_dependencies: graphql.DocumentNode,
        document_types: DocumentTypes,
    ) -> dict[str | None, Definition]:
        definitions: dict[str | None, Definition] = {}
        for node in document.definitions:
            provisional = node.name.value
            name = None if provisional == ANONYMOUS else provisional
            definitions[name] = Definition.for_node(
                definition_node=node,
                name=name,
                document=slice_document(document_with_dependencies, provisional),
                resolved_type=graphql.get_named_type(document_types[node]),
                source_location=self.source_location,
                schema=self.schema,
                types=self.types,
                document_types=document_types,
                binding=NameBinding(name),
            )
        return definitions

    def rename(
        self,
        document: graphql.DocumentNode,
        definitions: dict[str | None, Definition],
    ) -> None:
        final_names: dict[str, str] = {}
        for name, definition in definitions.items():
            definition.binding.resolve(self.allocate_name(name))
            final_names[name if name is not None else ANONYMOUS] = definition.definition_name
        for node in walk(document):
            if isinstance(
                node,
                (
                    graphql.OperationDefinitionNode,
                    graphql.FragmentDefinitionNode,
                    graphql.FragmentSpreadNode,
                ),
            ):
                final = final_names.get(node.name.value)
                if final is not None:
                    node.name = graphql.NameNode(value=final)

    def compile(self) -> dict[str | None, Definition]:
        start = time.time()
        document = self.parse()
        local_names = {node.name.value for node in document.definitions}
        document_with_dependencies = graphql.DocumentNode(
            definitions=(
                *document.definitions,
                *(
                    node
                    for name, node in self.dependencies.items()
                    if name not in local_names
                ),
            )
        )
        self.validate(document_with_dependencies)

        document_types = analyze_types(self.schema, document)
        insert_typename_fields(document, document_types)

        definitions = self.build_definitions(
            document, document_with_dependencies, document_types
        )
        self.rename(document, definitions)
        freeze(document)
        for definition in definitions.values():
            # selection units are built now so conflicting field merges fail here
            definition.type

        logger.debug(
            "[COMPILE] %s (%s) took %.2f ms",
            ", ".join(d.definition_name for d in definitions.values()),
            self.source_location,
            (time.time() - start) * 1_000,
        )
        return definitions


__all__ = [
    "ANONYMOUS",
    "VALIDATION_RULES",
    "DocumentCompiler",
]
