from __future__ import annotations

from typing import Any

import pytest


class FakeClientError(Exception):
    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.response = {"Error": {"Code": code}}


class FakeSsmClient:
    def __init__(self, parameters: dict[str, tuple[str, str]] | None = None) -> None:
        self.parameters: dict[str, tuple[str, str]] = dict(parameters or {})
        self.path_requests: list[dict[str, Any]] = []
        self.put_requests: list[dict[str, Any]] = []

    def get_parameter(self, *, Name: str, WithDecryption: bool) -> dict[str, Any]:
        assert WithDecryption is True
        if Name not in self.parameters:
            raise FakeClientError("ParameterNotFound")
        value, type_tag = self.parameters[Name]
        return {"Parameter": {"Name": Name, "Value": value, "Type": type_tag}}

    def put_parameter(
        self, *, Name: str, Value: str, Type: str, Overwrite: bool
    ) -> dict[str, Any]:
        assert Overwrite is True
        self.put_requests.append({"Name": Name, "Value": Value, "Type": Type})
        self.parameters[Name] = (Value, Type)
        return {"Version": 1}

    def get_parameters_by_path(
        self,
        *,
        Path: str,
        Recursive: bool,
        WithDecryption: bool,
        MaxResults: int,
        NextToken: str | None = None,
    ) -> dict[str, Any]:
        assert Recursive is True
        assert WithDecryption is True
        self.path_requests.append({"Path": Path, "NextToken": NextToken})
        names = sorted(name for name in self.parameters if name.startswith(Path))
        start = int(NextToken or 0)
        page = names[start : start + MaxResults]
        response: dict[str, Any] = {
            "Parameters": [
                {
                    "Name": name,
                    "Value": self.parameters[name][0],
                    "Type": self.parameters[name][1],
                }
                for name in page
            ]
        }
        if start + MaxResults < len(names):
            response["NextToken"] = str(start + MaxResults)
        return response


@pytest.fixture
def ssm_client() -> FakeSsmClient:
    return FakeSsmClient()
