from __future__ import annotations

import sys
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from salter_aws.classifier import detect_parameter_type
from salter_aws.env_file import read_env_file, to_mapping, write_env_file
from salter_aws.logging_utils import get_logger
from salter_aws.models import ParameterType, SecretRecord
from salter_aws.parameter_store import ParameterStore, ParameterStoreError
from salter_aws.task_definition import (
    build_task_definition,
    first_container,
    load_task_definition,
    reference_for_key,
    resolve_parameter_name,
    secret_items,
    secret_records,
    strip_prefix,
    write_task_definition,
)


DATE_SUFFIX_FORMAT = "%d%m%y"

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class BulkResult:
    processed: int
    failed: int
    skipped: int = 0
    env_file: Path | None = None
    json_file: Path | None = None


def dated_output_base(output_prefix: str, today: date | None = None) -> str:
    stamp = (today or date.today()).strftime(DATE_SUFFIX_FORMAT)
    return f"{output_prefix}-{stamp}"


def _report_item(message: str, *, action: str, parameter: str) -> None:
    print(message, file=sys.stderr)
    logger.info(message, extra={"action": action, "parameter": parameter})


def generate_task_definition(
    env_path: str | Path,
    output_path: str | Path,
    *,
    parameter_prefix: str,
) -> dict[str, Any]:
    """
    Build a task definition whose secrets mirror a .env file.

    Every entry becomes a secret pointing at ``parameter_prefix + KEY`` and
    carries its value and guessed type so the output can be fed straight
    into ``put_parameters_from_template``.
    """
    entries = to_mapping(read_env_file(env_path))
    secrets = [
        SecretRecord(
            name=key,
            value_from=reference_for_key(parameter_prefix, key),
            type=detect_parameter_type(key, value),
            value=value,
        )
        for key, value in entries.items()
    ]
    document = build_task_definition(secrets, environment=[])
    target = write_task_definition(output_path, document)
    print(f"Generated task definition saved to {target}")
    logger.info(
        "task_definition_generated",
        extra={"action": "generate", "parameter": str(target)},
    )
    return document


def get_parameters_by_prefix(
    store: ParameterStore,
    prefix: str,
    output_base: str,
) -> BulkResult:
    env_pairs: list[tuple[str, str]] = []
    secrets: list[SecretRecord] = []
    for parameter in store.iter_parameters_by_path(prefix):
        key = strip_prefix(parameter.name, prefix)
        env_pairs.append((key, parameter.value))
        secrets.append(
            SecretRecord(
                name=key,
                value_from=parameter.name,
                type=parameter.type,
                value=parameter.value,
            )
        )

    env_file = write_env_file(f"{output_base}.env", env_pairs)
    json_file = write_task_definition(
        f"{output_base}.json", build_task_definition(secrets, environment=[])
    )
    print(f"Saved .env to {env_file} and task-definition JSON to {json_file}")
    logger.info(
        "parameters_saved_by_prefix",
        extra={"action": "get-by-prefix", "parameter": prefix},
    )
    return BulkResult(
        processed=len(secrets),
        failed=0,
        env_file=env_file,
        json_file=json_file,
    )


def put_parameters_from_template(
    store: ParameterStore,
    template_path: str | Path,
    *,
    parameter_prefix: str,
) -> BulkResult:
    container = first_container(load_task_definition(template_path))
    processed = 0
    skipped = 0
    for secret in secret_records(container):
        if not secret.value:
            _report_item(
                f"Skipping {secret.name}: missing value",
                action="put-from-template",
                parameter=secret.name,
            )
            skipped += 1
            continue
        parameter_type = secret.type or ParameterType.STRING
        name = resolve_parameter_name(secret.value_from)
        if name is None:
            name = reference_for_key(parameter_prefix, secret.name.lower())
        try:
            store.put_parameter(name, secret.value, parameter_type)
        except ParameterStoreError as exc:
            raise ParameterStoreError(
                f"failed to put secret {secret.name}: {exc}"
            ) from exc
        print(f"Put secret {name} as {parameter_type.value}")
        processed += 1
    return BulkResult(processed=processed, failed=0, skipped=skipped)


def get_parameters_from_file(
    store: ParameterStore,
    template_path: str | Path,
    output_prefix: str | None = None,
    *,
    today: date | None = None,
) -> BulkResult:
    """
    Fetch the value of every secret referenced by a task definition.

    Without ``output_prefix`` the values are printed as ``NAME=value``.
    With it, a dated ``.env`` and a copy of the task definition annotated
    with ``value`` and ``type`` are written next to each other. Secrets
    with an unusable reference or a failed fetch are reported and skipped.
    """
    document = load_task_definition(template_path)
    items = secret_items(first_container(document))
    env_values: dict[str, str] = {}
    processed = 0
    failed = 0
    for item in items:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        value_from = item.get("valueFrom")
        if not isinstance(name, str) or not isinstance(value_from, str):
            continue
        parameter_name = resolve_parameter_name(value_from)
        if parameter_name is None:
            _report_item(
                f"Invalid ARN for {name}: {value_from}",
                action="get-from-file",
                parameter=name,
            )
            failed += 1
            continue
        try:
            parameter = store.get_parameter(parameter_name)
        except ParameterStoreError as exc:
            _report_item(
                f"Failed to get {name}: {exc}",
                action="get-from-file",
                parameter=name,
            )
            failed += 1
            continue
        item["value"] = parameter.value
        item["type"] = parameter.type.value
        processed += 1
        if output_prefix:
            env_values[name] = parameter.value
        else:
            print(f"{name}={parameter.value}")

    if not output_prefix:
        return BulkResult(processed=processed, failed=failed)

    base = dated_output_base(output_prefix, today)
    env_file = write_env_file(f"{base}.env", env_values.items())
    print(f"Saved bulk env to {env_file}")
    json_file = write_task_definition(f"{base}.json", document)
    print(f"Saved modified task definition to {json_file}")
    return BulkResult(
        processed=processed,
        failed=failed,
        env_file=env_file,
        json_file=json_file,
    )
