from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ParameterType(str, Enum):
    STRING = "String"
    STRING_LIST = "StringList"
    SECURE_STRING = "SecureString"

    @classmethod
    def from_api(cls, tag: str | None) -> ParameterType:
        """Map the service's own type tag; unknown tags are plain strings."""
        for member in cls:
            if member.value == tag:
                return member
        return cls.STRING

    @classmethod
    def from_cli(cls, name: str) -> ParameterType:
        lowered = (name or "").strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        raise ValueError(
            f"Invalid type '{name}'. Use 'string', 'stringlist', or 'securestring'"
        )

    @classmethod
    def from_template(cls, name: str | None) -> ParameterType:
        try:
            return cls.from_cli(name or "")
        except ValueError:
            return cls.STRING


@dataclass(frozen=True, slots=True)
class Parameter:
    name: str
    value: str
    type: ParameterType = ParameterType.STRING


@dataclass(frozen=True, slots=True)
class EnvironmentEntry:
    name: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True, slots=True)
class SecretRecord:
    name: str
    value_from: str
    type: ParameterType | None = None
    value: str | None = None

    def to_dict(self) -> dict[str, str]:
        payload = {"name": self.name, "valueFrom": self.value_from}
        if self.type is not None:
            payload["type"] = self.type.value
        if self.value:
            payload["value"] = self.value
        return payload

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> SecretRecord:
        raw_type = raw.get("type")
        value = raw.get("value")
        return cls(
            name=str(raw.get("name") or ""),
            value_from=str(raw.get("valueFrom") or ""),
            type=ParameterType.from_template(str(raw_type)) if raw_type else None,
            value=str(value) if value is not None else None,
        )
