"""Locate, parse and fingerprint jurisdiction rule documents."""
from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..config import default_rule_table, rules_dir
from .tables import JurisdictionRules, RuleFormatError

logger = logging.getLogger(__name__)


class RuleNotFoundError(FileNotFoundError):
    """Raised when a rule table cannot be located."""


@dataclass(frozen=True)
class RuleDocument:
    """Container for a single rules file."""

    name: str
    path: Path
    sha256: str
    payload: Dict[str, Any]
    source_url: Optional[str]
    last_reviewed: Optional[str]


def _normalise_name(name: str) -> str:
    return name.strip().lower().replace("-", "_").replace(" ", "_")


def _rule_path(name: str, directory: Path) -> Path:
    key = _normalise_name(name)
    for suffix in (".yaml", ".yml"):
        candidate = directory / f"{key}{suffix}"
        if candidate.exists():
            return candidate
    raise RuleNotFoundError(f"No payroll rules named '{name}' in {directory}")


def _read_document(path: Path) -> RuleDocument:
    data = path.read_bytes()
    try:
        payload = yaml.safe_load(data.decode("utf-8")) or {}
    except yaml.YAMLError as exc:
        raise RuleFormatError(f"Rule document {path.name} is not valid YAML: {exc}") from exc
    if not isinstance(payload, dict):
        raise RuleFormatError(f"Rule document {path.name} must define a mapping")
    return RuleDocument(
        name=path.stem,
        path=path,
        sha256=hashlib.sha256(data).hexdigest(),
        payload=payload,
        source_url=payload.get("source_url"),
        last_reviewed=payload.get("last_reviewed"),
    )


@lru_cache(maxsize=None)
def _load_cached(name: str, directory: str) -> JurisdictionRules:
    document = _read_document(_rule_path(name, Path(directory)))
    rules = JurisdictionRules.from_mapping(document.payload)
    logger.debug("Loaded payroll rules %s version %s from %s", rules.name, rules.version, document.path)
    return rules


def load_rules(name: str | None = None, *, directory: Path | None = None) -> JurisdictionRules:
    """Return the parsed rule table ``name`` (defaults to the configured table)."""

    target = name or default_rule_table()
    base = directory or rules_dir()
    return _load_cached(_normalise_name(target), str(base))


def load_rule_documents(directory: Path | None = None) -> Dict[str, RuleDocument]:
    """Return all rule documents keyed by table name."""

    base = directory or rules_dir()
    documents: Dict[str, RuleDocument] = {}
    for path in sorted(list(base.glob("*.yaml")) + list(base.glob("*.yml"))):
        document = _read_document(path)
        documents[document.name] = document
    return documents


def rules_version_payload(directory: Path | None = None) -> Dict[str, Any]:
    """Payload for the ``/rules/version`` endpoint."""

    files: List[Dict[str, Any]] = []
    for document in load_rule_documents(directory).values():
        files.append(
            {
                "name": document.name,
                "version": str(document.payload.get("version", "unversioned")),
                "sha256": document.sha256,
                "source_url": document.source_url,
                "last_reviewed": document.last_reviewed,
            }
        )
    return {"default": default_rule_table(), "files": files}


def clear_cache() -> None:
    _load_cached.cache_clear()


__all__ = [
    "RuleDocument",
    "RuleNotFoundError",
    "clear_cache",
    "load_rule_documents",
    "load_rules",
    "rules_version_payload",
]
