"""Field rules shared by the entity services."""

from dataclasses import dataclass
from typing import Any

from storefront.domain.exceptions import ErrorIssue, ValidationError


@dataclass(frozen=True)
class TextRule:
    """Length bounds for a trimmed text field."""

    label: str
    min_length: int = 0
    max_length: int | None = None

    def check(self, field: str, value: Any, issues: list[ErrorIssue]) -> str | None:
        """Trim and check a value, appending any problem to ``issues``.

        Returns:
            The trimmed value, or None when it is invalid.
        """
        if not isinstance(value, str):
            issues.append(ErrorIssue(message=f"{self.label} must be a string", field=field))
            return None
        value = value.strip()
        if len(value) < self.min_length:
            issues.append(
                ErrorIssue(
                    message=f"{self.label} must be at least {self.min_length} characters",
                    field=field,
                )
            )
            return None
        if self.max_length is not None and len(value) > self.max_length:
            issues.append(
                ErrorIssue(
                    message=f"{self.label} cannot exceed {self.max_length} characters",
                    field=field,
                )
            )
            return None
        return value


CATEGORY_NAME = TextRule("Category name", 2, 50)
CATEGORY_DESCRIPTION = TextRule("Description", 0, 500)
SUBCATEGORY_NAME = TextRule("Subcategory name", 2, 50)
SUBCATEGORY_DESCRIPTION = TextRule("Description", 0, 500)
PRODUCT_TITLE = TextRule("Product title", 2, 100)
PRODUCT_DESCRIPTION = TextRule("Product description", 10, 2000)


def is_blank(value: Any) -> bool:
    """True for None, empty strings and whitespace-only strings."""
    return value is None or (isinstance(value, str) and not value.strip())


def require(message: str, data: dict[str, Any], fields: tuple[str, ...]) -> None:
    """Fail when any of the fields is missing or blank, reporting all of them.

    Raises:
        ValidationError: With one issue per missing field.
    """
    missing = [name for name in fields if is_blank(data.get(name))]
    if missing:
        raise ValidationError(
            message,
            details=[ErrorIssue(message=f"{name} is required", field=name) for name in missing],
        )


def raise_if_issues(issues: list[ErrorIssue], message: str = "Validation error") -> None:
    """Raise a ValidationError carrying the collected issues, if any."""
    if issues:
        raise ValidationError(message, details=issues)
