"""
Filter criteria: terms, parsing and compilation to SQL predicates.
"""

from repokit.criteria.compiler import CriteriaCompiler, emit_comparison
from repokit.criteria.parser import parse_criteria, validate_criterion
from repokit.criteria.terms import Criterion, Group, RelationCriterion, Term

__all__ = [
    "CriteriaCompiler",
    "Criterion",
    "Group",
    "RelationCriterion",
    "Term",
    "emit_comparison",
    "parse_criteria",
    "validate_criterion",
]
