"""
Credential manifest — the issuers and new secret values to write.

A manifest is a TOML (or YAML) document:

    [[issuers]]
    issuer = "GitLab"

    [[issuers.credentials]]
    name = "cli PAT"
    value = "glpat-..."

Only structure is validated. Duplicate issuers are allowed and are processed
independently, in document order.
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Iterator
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, StrictStr, ValidationError

from opcreds.errors import ManifestParseError

logger = logging.getLogger(__name__)

TOML_SUFFIXES = {".toml"}
YAML_SUFFIXES = {".yaml", ".yml"}


class Credential(BaseModel):
    """A named secret. ``value`` is written verbatim, empty included."""

    name: StrictStr = Field(min_length=1)
    value: StrictStr = Field(repr=False)


class Issuer(BaseModel):
    issuer: StrictStr = Field(min_length=1)
    credentials: list[Credential]


class Manifest(BaseModel):
    issuers: list[Issuer]

    def pairs(self) -> Iterator[tuple[Issuer, Credential]]:
        """Yield every (issuer, credential) pair in document order."""
        for issuer in self.issuers:
            for cred in issuer.credentials:
                yield issuer, cred

    def __len__(self) -> int:
        return sum(len(issuer.credentials) for issuer in self.issuers)


def parse_manifest(data: object) -> Manifest:
    """Validate an already-decoded document."""
    if not isinstance(data, dict):
        raise ManifestParseError(
            "Manifest must be a table/mapping", cause=f"got {type(data).__name__}"
        )
    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ManifestParseError("Invalid manifest", cause=problems) from e


def load_manifest(path: Path | str) -> Manifest:
    """Read and validate a manifest file. Format is chosen by suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in TOML_SUFFIXES | YAML_SUFFIXES:
        raise ManifestParseError(
            f"Unsupported manifest format: {path}", cause="expected .toml, .yaml or .yml"
        )

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ManifestParseError(f"Manifest not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestParseError(f"Cannot read manifest {path}", cause=str(e)) from e

    try:
        if suffix in TOML_SUFFIXES:
            data = tomllib.loads(text)
        else:
            data = yaml.safe_load(text)
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise ManifestParseError(f"Cannot parse manifest {path}", cause=str(e)) from e

    manifest = parse_manifest(data)
    logger.info(
        "Loaded manifest %s: %d issuer(s), %d credential(s)",
        path,
        len(manifest.issuers),
        len(manifest),
    )
    return manifest
