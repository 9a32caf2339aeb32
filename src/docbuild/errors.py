"""Build diagnostics collected per file, plus the fatal abort path."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ErrorCategory(str, Enum):
    PARSE = "parse"
    VALIDATION = "validation"
    TYPE = "type"
    CONTENT = "content"
    COLLABORATOR = "collaborator"


class ErrorLevel(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class BuildError:
    """One diagnostic reported while building a single source file."""

    code: str
    message: str
    category: ErrorCategory
    level: ErrorLevel = ErrorLevel.ERROR
    file: str | None = None
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        location = [f"file={self.file}"] if self.file else []
        if self.line is not None:
            location.append(f"line={self.line}")
        if self.column is not None:
            location.append(f"column={self.column}")
        suffix = f" ({', '.join(location)})" if location else ""
        return f"{self.code}: {self.message}{suffix}"

    def to_dict(self) -> dict[str, object]:
        return {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "level": self.level.value,
            "file": self.file,
            "line": self.line,
            "column": self.column,
        }


@dataclass(slots=True)
class BuildAbort(Exception):
    """Fatal error that stops the build of one file; sibling builds are unaffected."""

    error: BuildError
    collected: list[BuildError] = field(default_factory=list)

    def __str__(self) -> str:
        return str(self.error)

    @property
    def errors(self) -> list[BuildError]:
        """Everything reported for the file, fatal error last."""

        return [*self.collected, self.error]


@dataclass(slots=True)
class CollaboratorError(Exception):
    """Expected lookup failure raised by a collaborator; the caller substitutes a default."""

    error: BuildError

    def __str__(self) -> str:
        return str(self.error)


def yaml_syntax_error(file: str, message: str, line: int | None = None, column: int | None = None) -> BuildError:
    return BuildError("yaml-syntax-error", message, ErrorCategory.PARSE, file=file, line=line, column=column)


def json_syntax_error(file: str, message: str, line: int | None = None, column: int | None = None) -> BuildError:
    return BuildError("json-syntax-error", message, ErrorCategory.PARSE, file=file, line=line, column=column)


def schema_violation(file: str, message: str) -> BuildError:
    return BuildError("violate-schema", message, ErrorCategory.VALIDATION, file=file)


def unexpected_type(file: str, expected: str, actual: str) -> BuildError:
    return BuildError(
        "unexpected-type",
        f"Expect type '{expected}' but got '{actual}'",
        ErrorCategory.TYPE,
        file=file,
        line=1,
        column=1,
    )


def merge_conflict_marker(file: str, line: int | None = None) -> BuildError:
    return BuildError(
        "merge-conflict",
        "File contains unresolved merge conflict markers",
        ErrorCategory.CONTENT,
        file=file,
        line=line,
    )


def heading_not_found(file: str) -> BuildError:
    return BuildError(
        "heading-not-found",
        "The first visible block is not a heading block with `#`",
        ErrorCategory.CONTENT,
        level=ErrorLevel.WARNING,
        file=file,
    )


def custom_404_page(file: str) -> BuildError:
    return BuildError(
        "custom-404-page",
        "Custom 404 page is not supported",
        ErrorCategory.CONTENT,
        level=ErrorLevel.WARNING,
        file=file,
    )


def landing_data_invalid(file: str, field_name: str, expected: str) -> BuildError:
    return BuildError(
        "landing-data-invalid",
        f"Landing page field '{field_name}' must be {expected}",
        ErrorCategory.VALIDATION,
        file=file,
    )


def invalid_breadcrumb_path(file: str, breadcrumb_path: str) -> BuildError:
    return BuildError(
        "invalid-breadcrumb-path",
        f"Cannot resolve breadcrumb path '{breadcrumb_path}'",
        ErrorCategory.COLLABORATOR,
        level=ErrorLevel.WARNING,
        file=file,
    )


def publish_conflict(file: str, claimed_by: str, path: str) -> BuildError:
    return BuildError(
        "publish-conflict",
        f"Two files publish to the same location '{path}': '{claimed_by}' and '{file}'",
        ErrorCategory.CONTENT,
        file=file,
    )
