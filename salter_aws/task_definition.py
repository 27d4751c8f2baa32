from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from salter_aws.models import EnvironmentEntry, SecretRecord


ARN_PARAMETER_PREFIX = "parameter/"


class TaskDefinitionError(RuntimeError):
    """Raised when a task-definition file cannot be read, parsed or written."""


def extract_parameter_name(arn: str) -> str | None:
    """
    Return the parameter path from an SSM parameter ARN.

    ``arn:aws:ssm:<region>:<account>:parameter/app/db`` -> ``/app/db``.
    Anything that is not an SSM parameter ARN yields ``None``.
    """
    parts = (arn or "").split(":")
    if len(parts) < 6 or parts[2] != "ssm":
        return None
    resource = parts[5]
    if not resource.startswith(ARN_PARAMETER_PREFIX):
        return None
    return "/" + resource[len(ARN_PARAMETER_PREFIX) :]


def resolve_parameter_name(value_from: str) -> str | None:
    if not value_from:
        return None
    if value_from.startswith("arn:"):
        return extract_parameter_name(value_from)
    if value_from.startswith("/"):
        return value_from
    return None


def reference_for_key(prefix: str, key: str) -> str:
    return prefix + key


def strip_prefix(name: str, prefix: str) -> str:
    if prefix and name.startswith(prefix):
        return name[len(prefix) :]
    return name


def load_task_definition(path: str | Path) -> dict[str, Any]:
    """Read a task definition, keeping every field so it can be written back."""
    source = Path(path)
    try:
        raw = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise TaskDefinitionError(f"failed to read file {source}: {exc}") from exc
    try:
        document = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise TaskDefinitionError(f"failed to parse JSON in {source}: {exc}") from exc
    if not isinstance(document, dict):
        raise TaskDefinitionError(f"{source} must contain a JSON object")
    first_container(document)
    return document


def first_container(document: dict[str, Any]) -> dict[str, Any]:
    containers = document.get("containerDefinitions")
    if not isinstance(containers, list) or not containers:
        raise TaskDefinitionError("no container definitions found")
    container = containers[0]
    if not isinstance(container, dict):
        raise TaskDefinitionError("invalid container definition")
    return container


def secret_items(container: dict[str, Any]) -> list[Any]:
    secrets = container.get("secrets")
    if not isinstance(secrets, list):
        raise TaskDefinitionError("no secrets found")
    return secrets


def secret_records(container: dict[str, Any]) -> list[SecretRecord]:
    return [
        SecretRecord.from_dict(item)
        for item in secret_items(container)
        if isinstance(item, dict)
    ]


def build_task_definition(
    secrets: Iterable[SecretRecord],
    environment: Iterable[EnvironmentEntry] | None = None,
) -> dict[str, Any]:
    container: dict[str, Any] = {}
    if environment is not None:
        container["environment"] = [entry.to_dict() for entry in environment]
    container["secrets"] = [secret.to_dict() for secret in secrets]
    return {"containerDefinitions": [container]}


def write_task_definition(path: str | Path, document: dict[str, Any]) -> Path:
    target = Path(path)
    try:
        target.write_text(json.dumps(document, indent=2), encoding="utf-8")
    except OSError as exc:
        raise TaskDefinitionError(f"failed to write JSON file {target}: {exc}") from exc
    return target
