"""treefind Rules System.

This package provides the predicates a search is built from:
- patterns: Shell glob compilation for name and path matchers
- matchers: Predicate constructors mirroring find tests
- boolean: and_, or_ and not_ combinators
- loader: Predicates from declarative criteria

Every predicate is a callable `(path, entry) -> MatchResult`, so
primitives and combinations nest freely.
"""

from .boolean import and_, evaluate_all, evaluate_any, not_, or_
from .loader import build_predicate
from .patterns import GlobPattern, compile_glob, translate_glob

__all__ = [
    # Patterns
    "GlobPattern",
    "compile_glob",
    "translate_glob",
    # Combinators
    "and_",
    "or_",
    "not_",
    "evaluate_all",
    "evaluate_any",
    # Declarative criteria
    "build_predicate",
]
