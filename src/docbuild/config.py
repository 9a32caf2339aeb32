"""Docset configuration consumed by the page build pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

from dotenv import dotenv_values
import yaml


DEFAULT_LOCALE = "en-us"
DEFAULT_SITE_NAME = "Docs"
DEFAULT_HOST_NAME = ""

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(*, name: str, raw_value: object) -> bool:
    if isinstance(raw_value, bool):
        return raw_value
    value = str(raw_value).strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw_value!r}")


def _normalize_base_path(raw_value: str) -> str:
    return raw_value.replace("\\", "/").strip().strip("/")


def _validate_host_name(name: str, host_name: str) -> str:
    if host_name and not (host_name.startswith("http://") or host_name.startswith("https://")):
        raise ValueError(f"{name} must start with http:// or https://")
    return host_name.rstrip("/")


def _split_list(raw_value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in raw_value.split(",") if item.strip())


def _parse_name_map(*, name: str, raw_value: str) -> dict[str, str]:
    """Parse `key=meta-name` pairs separated by commas."""

    names: dict[str, str] = {}
    for item in _split_list(raw_value):
        key, separator, meta_name = item.partition("=")
        if not separator or not key.strip() or not meta_name.strip():
            raise ValueError(f"{name} entries must look like key=name, got {item!r}")
        names[key.strip()] = meta_name.strip()
    return names


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Validated docset settings; one instance is shared by every file of a build."""

    product: str = ""
    name: str = ""
    site_name: str = DEFAULT_SITE_NAME
    host_name: str = DEFAULT_HOST_NAME
    site_base_path: str = ""
    locale: str = DEFAULT_LOCALE
    output_json: bool = False
    output_pdf: bool = False
    bilingual: bool = False
    legacy: bool = False
    data_mimes: tuple[str, ...] = ()
    html_meta_hidden: tuple[str, ...] = ()
    html_meta_names: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        env_file: str | Path | None = None,
    ) -> "BuildConfig":
        source: dict[str, str] = {}
        if env_file is not None:
            source.update({key: value or "" for key, value in dotenv_values(env_file).items()})
        source.update(os.environ if environ is None else environ)

        def _get(key: str, default: str = "") -> str:
            return source.get(key, default).strip()

        locale = _get("DOCBUILD_LOCALE", DEFAULT_LOCALE).lower()
        if not locale:
            raise ValueError("DOCBUILD_LOCALE cannot be empty")

        return cls(
            product=_get("DOCBUILD_PRODUCT"),
            name=_get("DOCBUILD_NAME"),
            site_name=_get("DOCBUILD_SITE_NAME", DEFAULT_SITE_NAME) or DEFAULT_SITE_NAME,
            host_name=_validate_host_name("DOCBUILD_HOST_NAME", _get("DOCBUILD_HOST_NAME", DEFAULT_HOST_NAME)),
            site_base_path=_normalize_base_path(_get("DOCBUILD_BASE_PATH")),
            locale=locale,
            output_json=_parse_bool(name="DOCBUILD_OUTPUT_JSON", raw_value=_get("DOCBUILD_OUTPUT_JSON")),
            output_pdf=_parse_bool(name="DOCBUILD_OUTPUT_PDF", raw_value=_get("DOCBUILD_OUTPUT_PDF")),
            bilingual=_parse_bool(name="DOCBUILD_BILINGUAL", raw_value=_get("DOCBUILD_BILINGUAL")),
            legacy=_parse_bool(name="DOCBUILD_LEGACY", raw_value=_get("DOCBUILD_LEGACY")),
            data_mimes=_split_list(_get("DOCBUILD_DATA_MIMES")),
            html_meta_hidden=_split_list(_get("DOCBUILD_HTML_META_HIDDEN")),
            html_meta_names=_parse_name_map(
                name="DOCBUILD_HTML_META_NAMES", raw_value=_get("DOCBUILD_HTML_META_NAMES")
            ),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BuildConfig":
        output = data.get("output") or {}
        localization = data.get("localization") or {}
        if not isinstance(output, Mapping):
            raise ValueError("output must be a mapping")
        if not isinstance(localization, Mapping):
            raise ValueError("localization must be a mapping")

        meta_names = data.get("html_meta_names") or {}
        if not isinstance(meta_names, Mapping):
            raise ValueError("html_meta_names must be a mapping")

        return cls(
            product=str(data.get("product") or ""),
            name=str(data.get("name") or ""),
            site_name=str(data.get("site_name") or DEFAULT_SITE_NAME),
            host_name=_validate_host_name("host_name", str(data.get("host_name") or DEFAULT_HOST_NAME)),
            site_base_path=_normalize_base_path(str(data.get("base_path") or "")),
            locale=str(localization.get("locale") or DEFAULT_LOCALE).lower(),
            output_json=_parse_bool(name="output.json", raw_value=output.get("json", False)),
            output_pdf=_parse_bool(name="output.pdf", raw_value=output.get("pdf", False)),
            bilingual=_parse_bool(name="localization.bilingual", raw_value=localization.get("bilingual", False)),
            legacy=_parse_bool(name="legacy", raw_value=data.get("legacy", False)),
            data_mimes=tuple(str(item) for item in data.get("data_mimes") or ()),
            html_meta_hidden=tuple(str(item) for item in data.get("html_meta_hidden") or ()),
            html_meta_names={str(key): str(value) for key, value in meta_names.items()},
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "BuildConfig":
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        if not isinstance(data, Mapping):
            raise ValueError(f"Docset config must be a mapping: {path}")
        return cls.from_mapping(data)
