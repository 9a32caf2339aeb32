"""Legacy landing page shape rendered through the server-side template."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from docbuild.errors import BuildError, landing_data_invalid
from docbuild.models import JsonObject


@dataclass(slots=True)
class LandingSection:
    title: str | None = None
    text: str | None = None
    items: list[JsonObject] = field(default_factory=list)


@dataclass(slots=True)
class LandingData:
    title: str | None = None
    metadata: JsonObject = field(default_factory=dict)
    abstract: JsonObject = field(default_factory=dict)
    sections: list[LandingSection] = field(default_factory=list)

    @classmethod
    def from_dict(cls, file: str, obj: JsonObject) -> tuple[list[BuildError], "LandingData"]:
        """Read the transformed landing object; ill-typed fields fall back to defaults."""

        errors: list[BuildError] = []

        def _typed(container: JsonObject, key: str, expected: type, label: str, path: str) -> Any:
            value = container.get(key)
            if value is None:
                return None
            if not isinstance(value, expected):
                errors.append(landing_data_invalid(file, path, label))
                return None
            return value

        sections: list[LandingSection] = []
        for index, raw_section in enumerate(_typed(obj, "sections", list, "a list", "sections") or []):
            path = f"sections[{index}]"
            if not isinstance(raw_section, dict):
                errors.append(landing_data_invalid(file, path, "an object"))
                continue
            items = _typed(raw_section, "items", list, "a list", f"{path}.items") or []
            valid_items = [item for item in items if isinstance(item, dict)]
            if len(valid_items) != len(items):
                errors.append(landing_data_invalid(file, f"{path}.items", "a list of objects"))
            sections.append(
                LandingSection(
                    title=_typed(raw_section, "title", str, "a string", f"{path}.title"),
                    text=_typed(raw_section, "text", str, "a string", f"{path}.text"),
                    items=valid_items,
                )
            )

        landing = cls(
            title=_typed(obj, "title", str, "a string", "title"),
            metadata=_typed(obj, "metadata", dict, "an object", "metadata") or {},
            abstract=_typed(obj, "abstract", dict, "an object", "abstract") or {},
            sections=sections,
        )
        return errors, landing
