"""Read and validate a package's ``typst.toml``."""

from __future__ import annotations

import tomllib
from pathlib import Path

from review.errors import ManifestInvalid, ManifestMissing
from review.models import PackageInfo, PackageManifest, TemplateInfo

MANIFEST_FILE = "typst.toml"

PACKAGE_REQUIRED = ("name", "version", "entrypoint")
PACKAGE_OPTIONAL_STR = ("license", "description", "homepage", "repository", "compiler")
PACKAGE_OPTIONAL_LIST = ("authors", "keywords", "categories", "disciplines", "exclude")

TEMPLATE_REQUIRED = ("path", "entrypoint")
TEMPLATE_OPTIONAL_STR = ("thumbnail",)


def load_manifest(package_dir: Path) -> PackageManifest:
    """Read ``typst.toml`` from a package directory.

    Raises:
        ManifestMissing: If the file does not exist or cannot be read.
        ManifestInvalid: If it is not UTF-8, not valid TOML, or violates the schema.
    """
    manifest_path = Path(package_dir) / MANIFEST_FILE
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestMissing(str(manifest_path)) from e
    except UnicodeDecodeError as e:
        raise ManifestInvalid(f"package manifest `{manifest_path}` is not valid UTF-8") from e
    return parse_manifest(text, source=str(manifest_path))


def parse_manifest(text: str, source: str = MANIFEST_FILE) -> PackageManifest:
    """Parse manifest TOML text into a PackageManifest."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ManifestInvalid(f"failed to parse package manifest `{source}`") from e

    package = data.get("package")
    if not isinstance(package, dict):
        raise ManifestInvalid(f"missing `[package]` table in `{source}`")

    template = data.get("template")
    if template is not None and not isinstance(template, dict):
        raise ManifestInvalid(f"`template` must be a table in `{source}`")

    extra = {k: v for k, v in data.items() if k not in ("package", "template")}
    return PackageManifest(
        package=_parse_package(package, source),
        template=_parse_template(template, source) if template is not None else None,
        extra=extra,
    )


def _parse_package(table: dict, source: str) -> PackageInfo:
    values = _read_table(
        table,
        "package",
        source,
        required=PACKAGE_REQUIRED,
        optional_str=PACKAGE_OPTIONAL_STR,
        optional_list=PACKAGE_OPTIONAL_LIST,
    )
    return PackageInfo(**values)


def _parse_template(table: dict, source: str) -> TemplateInfo:
    values = _read_table(
        table,
        "template",
        source,
        required=TEMPLATE_REQUIRED,
        optional_str=TEMPLATE_OPTIONAL_STR,
        optional_list=(),
    )
    return TemplateInfo(**values)


def _read_table(
    table: dict,
    table_name: str,
    source: str,
    required: tuple[str, ...],
    optional_str: tuple[str, ...],
    optional_list: tuple[str, ...],
) -> dict:
    values: dict = {}

    for key in required:
        value = table.get(key)
        if value is None:
            raise ManifestInvalid(f"missing `{table_name}.{key}` in `{source}`")
        if not isinstance(value, str):
            raise ManifestInvalid(f"`{table_name}.{key}` must be a string in `{source}`")
        values[key] = value

    for key in optional_str:
        value = table.get(key)
        if value is not None and not isinstance(value, str):
            raise ManifestInvalid(f"`{table_name}.{key}` must be a string in `{source}`")
        values[key] = value

    for key in optional_list:
        value = table.get(key, [])
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ManifestInvalid(
                f"`{table_name}.{key}` must be a list of strings in `{source}`"
            )
        values[key] = tuple(value)

    return values
