"""Structural validation of kubeconfig documents."""

from __future__ import annotations

from typing import Any

import yaml

from .errors import ConfigurationError


def _named_entries(doc: dict[str, Any], section: str) -> set[str]:
    entries = doc.get(section)
    if not isinstance(entries, list) or not entries:
        raise ConfigurationError(f"kubeconfig has no {section}", operation="validate_kubeconfig")
    names = set()
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("name"):
            raise ConfigurationError(
                f"kubeconfig {section} entry without a name", operation="validate_kubeconfig"
            )
        names.add(entry["name"])
    return names


def parse_kubeconfig(raw: bytes | str) -> dict[str, Any]:
    """Parse a kubeconfig and check that it is structurally consistent.

    Reachability of the described cluster is not checked.

    Args:
        raw: Kubeconfig content

    Returns:
        Parsed kubeconfig document

    Raises:
        ConfigurationError: If the document is malformed
    """
    try:
        doc = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"error loading kubeconfig: {e}", operation="validate_kubeconfig") from e

    if not isinstance(doc, dict):
        raise ConfigurationError("error loading kubeconfig: not a mapping", operation="validate_kubeconfig")

    clusters = _named_entries(doc, "clusters")
    users = _named_entries(doc, "users")
    contexts = _named_entries(doc, "contexts")

    for entry in doc["contexts"]:
        context = entry.get("context") or {}
        if context.get("cluster") not in clusters:
            raise ConfigurationError(
                f"kubeconfig context '{entry['name']}' references unknown cluster",
                operation="validate_kubeconfig",
            )
        if context.get("user") not in users:
            raise ConfigurationError(
                f"kubeconfig context '{entry['name']}' references unknown user",
                operation="validate_kubeconfig",
            )

    current = doc.get("current-context")
    if current and current not in contexts:
        raise ConfigurationError(
            f"kubeconfig current-context '{current}' does not exist", operation="validate_kubeconfig"
        )

    return doc
