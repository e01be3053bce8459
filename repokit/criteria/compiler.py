"""
Compilation of criteria terms into SQLAlchemy WHERE predicates.

Siblings are combined with SQL precedence: ``and`` binds tighter than ``or``,
so ``a AND b OR c`` compiles to ``(a AND b) OR c``. Nested groups holding more
than one term are parenthesised. Relation terms become correlated EXISTS
subqueries built from the mapper's relationship registry.
"""

from __future__ import annotations

import operator as op
from collections.abc import Callable
from typing import Any

from sqlalchemy import ColumnElement, Select, and_, inspect, or_
from sqlalchemy.ext.hybrid import HybridExtensionType
from sqlalchemy.sql.elements import BooleanClauseList, Grouping
from sqlalchemy.sql.selectable import FromClause, Join

from repokit.config.constants import BOOLEAN_OR
from repokit.criteria.parser import parse_criteria, validate_boolean, validate_criterion
from repokit.criteria.terms import Criterion, Group, RelationCriterion, Term
from repokit.utils.exceptions import BadCriteriaError

_Emitter = Callable[[Any, Any], ColumnElement[bool]]

_EMITTERS: dict[str, _Emitter] = {
    "=": op.eq,
    "<": op.lt,
    ">": op.gt,
    "<=": op.le,
    ">=": op.ge,
    "<>": op.ne,
    "!=": op.ne,
    "<=>": lambda column, value: column.is_not_distinct_from(value),
    "like": lambda column, value: column.like(value),
    "not like": lambda column, value: column.not_like(value),
    "ilike": lambda column, value: column.ilike(value),
    "not ilike": lambda column, value: column.not_ilike(value),
    "~~*": lambda column, value: column.ilike(value),
    "!~~*": lambda column, value: column.not_ilike(value),
    "regexp": lambda column, value: column.regexp_match(value),
    "rlike": lambda column, value: column.regexp_match(value),
    "~": lambda column, value: column.regexp_match(value),
    "not regexp": lambda column, value: ~column.regexp_match(value),
    "!~": lambda column, value: ~column.regexp_match(value),
    "~*": lambda column, value: column.regexp_match(value, flags="i"),
    "!~*": lambda column, value: ~column.regexp_match(value, flags="i"),
    "in": lambda column, value: column.in_(list(value)),
    "not in": lambda column, value: column.not_in(list(value)),
}


def emit_comparison(column: Any, operator: str, value: Any) -> ColumnElement[bool]:
    """
    Comparison predicate for a validated operator.

    Operators without a SQLAlchemy counterpart (``like binary``, ``similar to``,
    bitwise operators) are rendered verbatim as custom comparison operators.
    """
    emitter = _EMITTERS.get(operator)
    if emitter is not None:
        return emitter(column, value)
    return column.op(operator.upper(), is_comparison=True)(value)


def joined_tables(query: Select) -> set[FromClause]:
    """Tables present in the FROM list of a query, looking inside joins."""
    tables: set[FromClause] = set()

    def walk(clause: FromClause) -> None:
        if isinstance(clause, Join):
            walk(clause.left)
            walk(clause.right)
        else:
            tables.add(clause)

    for clause in query.get_final_froms():
        walk(clause)
    return tables


def _parenthesise(predicate: ColumnElement[bool] | None) -> ColumnElement[bool] | None:
    # and_() flattens an ungrouped AND list into its parent
    if isinstance(predicate, BooleanClauseList) and len(predicate.clauses) > 1:
        return Grouping(predicate)
    return predicate


class CriteriaCompiler:
    """
    Compiles filter input for one mapped model.

    Usage:
        compiler = CriteriaCompiler(User)
        query = compiler.apply(select(User), [["age", ">=", 18], {"status": "active"}])
    """

    def __init__(self, model: type, entity_type: Any = None):
        self.model = model
        self.entity_type = entity_type or model
        self._mapper = inspect(model)

    def compile(self, criteria: Any, tables: set[FromClause] | None = None) -> ColumnElement[bool] | None:
        """
        Compile filter input to a single predicate.

        ``tables`` are the FROM tables ``table.column`` names may refer to;
        only the model's own table by default.

        Returns None when the input holds no terms.

        Raises:
            BadCriteriaError: on invalid entries, unknown attributes or relations
        """
        if tables is None:
            tables = {self._mapper.local_table}
        group = parse_criteria(criteria, self.entity_type)
        return self._compile_terms(group.terms, tables)

    def apply(self, query: Select, criteria: Any) -> Select:
        """Attach the compiled predicate to ``query``, whose joins qualified names may use."""
        predicate = self.compile(criteria, joined_tables(query))
        if predicate is None:
            return query
        return query.where(predicate)

    def resolve_attribute(self, name: str, tables: set[FromClause] | None = None) -> Any:
        """
        Column expression for an attribute name.

        Accepts mapped column attributes, hybrid properties and
        ``table.column`` names of tables in ``tables`` (the model's own table
        by default). Tables missing from the query are rejected.
        """
        if name in self._mapper.column_attrs:
            return getattr(self.model, name)

        descriptor = self._mapper.all_orm_descriptors.get(name)
        if descriptor is not None and descriptor.extension_type is HybridExtensionType.HYBRID_PROPERTY:
            return getattr(self.model, name)

        if "." in name:
            table_name, column_name = name.rsplit(".", 1)
            table = self._mapper.local_table.metadata.tables.get(table_name)
            if table is not None and column_name in table.c:
                if table not in (tables or {self._mapper.local_table}):
                    raise BadCriteriaError(
                        f"Table '{table_name}' is not part of the query",
                        entity_type=self.entity_type,
                        attribute=name,
                    )
                return table.c[column_name]

        raise BadCriteriaError(f"Unknown attribute '{name}'", entity_type=self.entity_type)

    def _compile_terms(self, terms, tables: set[FromClause]) -> ColumnElement[bool] | None:
        disjuncts: list[list[ColumnElement[bool]]] = []
        for term in terms:
            predicate, boolean = self._compile_term(term, tables)
            if predicate is None:
                continue
            if not disjuncts or boolean == BOOLEAN_OR:
                disjuncts.append([predicate])
            else:
                disjuncts[-1].append(predicate)

        if not disjuncts:
            return None
        conjunctions = [parts[0] if len(parts) == 1 else and_(*parts) for parts in disjuncts]
        return conjunctions[0] if len(conjunctions) == 1 else or_(*conjunctions)

    def _compile_term(self, term: Term, tables: set[FromClause]) -> tuple[ColumnElement[bool] | None, str]:
        if isinstance(term, RelationCriterion):
            boolean = validate_boolean(term.boolean, self.entity_type)
            return self._compile_relation(term), boolean
        if isinstance(term, Group):
            boolean = validate_boolean(term.boolean, self.entity_type)
            return _parenthesise(self._compile_terms(term.terms, tables)), boolean
        if isinstance(term, Criterion):
            criterion = validate_criterion(term, self.entity_type)
            column = self.resolve_attribute(criterion.attribute, tables)
            return emit_comparison(column, criterion.operator, criterion.value), criterion.boolean
        raise BadCriteriaError(f"Unsupported term {term!r}", entity_type=self.entity_type)

    def _compile_relation(self, term: RelationCriterion) -> ColumnElement[bool]:
        relationship = self._mapper.relationships.get(term.relation)
        if relationship is None:
            raise BadCriteriaError(
                f"Relation '{term.relation}' is not defined",
                entity_type=self.entity_type,
                relation=term.relation,
            )

        related = CriteriaCompiler(relationship.mapper.class_)
        nested = related.compile(term.criteria)
        attribute = getattr(self.model, term.relation)
        if relationship.uselist:
            return attribute.any(nested)
        return attribute.has(nested)
