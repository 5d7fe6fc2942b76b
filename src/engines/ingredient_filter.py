"""Ingredient filter expressions -> SQL predicates

Expression tokens:
    @name   must contain
    !name   must not contain
    |name   contains at least one of the | names
    name    same as @name
"""

from dataclasses import dataclass, field

from src.utils.errors import ValidationError

MUST_HAVE = "@"
MUST_NOT_HAVE = "!"
ANY_OF = "|"

_CATEGORY_LABELS = {
    MUST_HAVE: "AND (@)",
    MUST_NOT_HAVE: "NOT (!)",
    ANY_OF: "OR (|)",
}


def escape_like_literal(value: str) -> str:
    """Lower-case and escape a term for LIKE ... ESCAPE '\\' inside quotes"""
    value = value.lower()
    value = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return value.replace("'", "''")


def escape_literal(value: str) -> str:
    """Escape a plain string literal"""
    return value.replace("'", "''")


def contains(column: str, term: str) -> str:
    return f"LOWER({column}) LIKE '%{escape_like_literal(term)}%' ESCAPE '\\'"


def not_contains(column: str, term: str) -> str:
    return f"LOWER({column}) NOT LIKE '%{escape_like_literal(term)}%' ESCAPE '\\'"


@dataclass
class IngredientFilter:
    """Parsed ingredient filter"""
    must_have: list[str] = field(default_factory=list)
    must_not_have: list[str] = field(default_factory=list)
    any_of: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.must_have or self.must_not_have or self.any_of)

    def add(self, token: str, default: str = MUST_HAVE) -> None:
        token = token.strip()
        if not token:
            return
        category = default
        if token[0] in _CATEGORY_LABELS:
            category, token = token[0], token[1:].strip()
        if not token:
            return
        self._bucket(category).append(token)

    def _bucket(self, category: str) -> list[str]:
        return {
            MUST_HAVE: self.must_have,
            MUST_NOT_HAVE: self.must_not_have,
            ANY_OF: self.any_of,
        }[category]

    def validate(self) -> None:
        """Reject names that sit in two contradicting categories"""
        for left, right in ((MUST_HAVE, MUST_NOT_HAVE), (MUST_NOT_HAVE, ANY_OF)):
            others = {name.lower() for name in self._bucket(right)}
            conflicts = [name for name in self._bucket(left) if name.lower() in others]
            if conflicts:
                raise ValidationError(
                    f"Invalid query: Ingredient(s) {', '.join(conflicts)} cannot be in both "
                    f"{_CATEGORY_LABELS[left]} and {_CATEGORY_LABELS[right]} conditions."
                )

    def to_predicate(self, column: str) -> str:
        """Compile to one SQL condition over ``column``"""
        if self.is_empty:
            raise ValidationError("At least one ingredient condition is required.")
        self.validate()

        clauses = []
        if self.must_have:
            clauses.append(" AND ".join(contains(column, i) for i in self.must_have))
        if self.must_not_have:
            clauses.append(" AND ".join(not_contains(column, i) for i in self.must_not_have))
        if self.any_of:
            clauses.append(" OR ".join(contains(column, i) for i in self.any_of))
        return " AND ".join(f"({clause})" for clause in clauses)


def parse_ingredient_expression(raw: str) -> IngredientFilter:
    """Whitespace separated tokens, e.g. ``@chicken !beef |rice |pasta``"""
    result = IngredientFilter()
    for token in raw.split():
        result.add(token)
    result.validate()
    return result


def parse_ingredient_lists(
    include: str | None = None,
    exclude: str | None = None,
    any_of: str | None = None,
) -> IngredientFilter:
    """Comma separated include/exclude/anyOf parameters"""
    result = IngredientFilter()
    for raw, default in ((include, MUST_HAVE), (exclude, MUST_NOT_HAVE), (any_of, ANY_OF)):
        for token in (raw or "").split(","):
            result.add(token, default)
    result.validate()
    return result
