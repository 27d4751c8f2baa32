from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from salter_aws.models import Parameter, ParameterType


# GetParametersByPath rejects page sizes above 10.
PAGE_SIZE = 10


class ParameterStoreError(RuntimeError):
    """Base class for Parameter Store access errors."""


class ParameterNotFoundError(ParameterStoreError):
    """Raised when the requested parameter does not exist."""


def _error_code(exc: Exception) -> str | None:
    error = getattr(exc, "response", {})
    if not isinstance(error, dict):
        return None
    details = error.get("Error", {})
    if not isinstance(details, dict):
        return None
    code = details.get("Code")
    return str(code) if code else None


def _to_parameter(raw: dict[str, Any]) -> Parameter:
    return Parameter(
        name=str(raw.get("Name") or ""),
        value=str(raw.get("Value") or ""),
        type=ParameterType.from_api(raw.get("Type")),
    )


class ParameterStore:
    def __init__(
        self,
        *,
        region_name: str | None,
        client: Any | None = None,
    ) -> None:
        self.region_name = region_name
        self._client = client or self._make_default_client(region_name=region_name)

    @staticmethod
    def _make_default_client(*, region_name: str | None) -> Any:
        try:
            import boto3
        except ImportError as exc:  # pragma: no cover
            raise ParameterStoreError(
                "boto3 is required for SSM Parameter Store access"
            ) from exc
        kwargs: dict[str, Any] = {}
        if region_name:
            kwargs["region_name"] = region_name
        try:
            return boto3.client("ssm", **kwargs)
        except Exception as exc:
            raise ParameterStoreError(f"Failed to create SSM client: {exc}") from exc

    def _is_not_found(self, exc: Exception) -> bool:
        exceptions = getattr(self._client, "exceptions", None)
        parameter_not_found = getattr(exceptions, "ParameterNotFound", None)
        if isinstance(parameter_not_found, type) and isinstance(
            exc, parameter_not_found
        ):
            return True
        return _error_code(exc) == "ParameterNotFound"

    def get_parameter(self, name: str) -> Parameter:
        try:
            response = self._client.get_parameter(Name=name, WithDecryption=True)
        except Exception as exc:
            if self._is_not_found(exc):
                raise ParameterNotFoundError(f"Parameter {name} not found") from exc
            raise ParameterStoreError(f"Failed to get parameter {name}: {exc}") from exc
        raw = response.get("Parameter", {}) if isinstance(response, dict) else {}
        return _to_parameter({"Name": name, **raw})

    def put_parameter(
        self,
        name: str,
        value: str,
        parameter_type: ParameterType = ParameterType.STRING,
    ) -> None:
        try:
            self._client.put_parameter(
                Name=name,
                Value=value,
                Type=parameter_type.value,
                Overwrite=True,
            )
        except Exception as exc:
            raise ParameterStoreError(f"Failed to put parameter {name}: {exc}") from exc

    def iter_parameters_by_path(self, prefix: str) -> Iterator[Parameter]:
        """Yield every parameter under ``prefix``, one page at a time."""
        next_token: str | None = None
        while True:
            request: dict[str, Any] = {
                "Path": prefix,
                "Recursive": True,
                "WithDecryption": True,
                "MaxResults": PAGE_SIZE,
            }
            if next_token:
                request["NextToken"] = next_token
            try:
                response = self._client.get_parameters_by_path(**request)
            except Exception as exc:
                raise ParameterStoreError(
                    f"Failed to list parameters under {prefix}: {exc}"
                ) from exc
            if not isinstance(response, dict):
                return
            for raw in response.get("Parameters", []):
                yield _to_parameter(raw)
            next_token = response.get("NextToken")
            if not next_token:
                return
