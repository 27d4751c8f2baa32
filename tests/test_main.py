from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

import salter_aws.main as cli
from conftest import FakeSsmClient
from salter_aws.parameter_store import ParameterStore, ParameterStoreError


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SALTER_CONFIG", raising=False)
    monkeypatch.delenv("SALTER_LOG_LEVEL", raising=False)
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def regions(monkeypatch: pytest.MonkeyPatch, ssm_client: FakeSsmClient) -> list[str]:
    seen: list[str] = []

    def _fake_store(region: str) -> ParameterStore:
        seen.append(region)
        return ParameterStore(region_name=region, client=ssm_client)

    monkeypatch.setattr(cli, "_make_store", _fake_store)
    return seen


def test_no_action_prints_usage_and_fails(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([]) == 1
    assert "Usage:" in capsys.readouterr().out


def test_action_help_does_not_touch_config(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli.main(["-action", "get-by-prefix", "-h"]) == 0
    assert "Help for 'get-by-prefix' action" in capsys.readouterr().out
    assert not (tmp_path / "config.json").exists()
    assert cli.main(["-h"]) == 0
    assert "General help" in capsys.readouterr().out


@pytest.mark.parametrize(
    ("argv", "message"),
    [
        (["-action", "get"], "-name is required"),
        (["-action", "put", "-name", "/a"], "-value is required"),
        (["-action", "put", "-name", "/a", "-value", "v", "-type", "int"], "Invalid type"),
        (["-action", "generate", "-s", "x.env"], "required for 'generate'"),
        (["-action", "put-from-template"], "required for 'put-from-template'"),
        (["-action", "get-by-prefix", "-prefix", "/p/"], "required for 'get-by-prefix'"),
        (["-action", "delete", "-name", "/a"], "Invalid action"),
    ],
)
def test_usage_errors_exit_before_any_remote_call(
    argv: list[str],
    message: str,
    regions: list[str],
    capsys: pytest.CaptureFixture[str],
) -> None:
    assert cli.main(argv) == 1
    assert message in capsys.readouterr().err
    assert regions == []


def test_unknown_flag_exits_with_one() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-bogus"])
    assert excinfo.value.code == 1


def test_first_run_generates_config_and_uses_its_region(
    tmp_path: Path, regions: list[str], capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli.main(["-action", "put", "-name", "/a", "-value", "v"]) == 0
    assert regions == ["ap-southeast-3"]
    assert json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))[
        "region"
    ] == "ap-southeast-3"
    assert "Generated default config.json" in capsys.readouterr().out


def test_put_then_get_through_cli(
    regions: list[str],
    ssm_client: FakeSsmClient,
    capsys: pytest.CaptureFixture[str],
) -> None:
    assert (
        cli.main(
            [
                "-action",
                "put",
                "-name",
                "/app/token",
                "-value",
                "abc",
                "-type",
                "SecureString",
                "-region",
                "us-east-1",
            ]
        )
        == 0
    )
    assert ssm_client.parameters["/app/token"] == ("abc", "SecureString")
    assert cli.main(["-action", "get", "-name", "/app/token"]) == 0
    out = capsys.readouterr().out
    assert "Parameter /app/token set successfully as SecureString" in out
    assert "Parameter /app/token: abc" in out
    assert regions == ["us-east-1", "ap-southeast-3"]


def test_get_missing_parameter_fails(
    regions: list[str], capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli.main(["-action", "get", "-name", "/nope"]) == 1
    assert "/nope" in capsys.readouterr().err


def test_generate_runs_without_aws(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _no_store(region: str) -> ParameterStore:
        raise AssertionError("generate must not create a store")

    monkeypatch.setattr(cli, "_make_store", _no_store)
    (tmp_path / "config.json").write_text(
        json.dumps({"parameterPrefix": "/dev/svc/", "region": "us-east-1"}),
        encoding="utf-8",
    )
    (tmp_path / "my.env").write_text("API_KEY=abc\nNAME=svc\n", encoding="utf-8")

    assert cli.main(["-action", "generate", "-s", "my.env", "-o", "td.json"]) == 0

    document = json.loads((tmp_path / "td.json").read_text(encoding="utf-8"))
    secrets = document["containerDefinitions"][0]["secrets"]
    assert secrets[0] == {
        "name": "API_KEY",
        "valueFrom": "/dev/svc/API_KEY",
        "type": "SecureString",
        "value": "abc",
    }
    assert secrets[1]["type"] == "String"


def test_generate_missing_env_file_fails(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["-action", "generate", "-s", "absent.env", "-o", "td.json"]) == 1
    assert "absent.env" in capsys.readouterr().err


def test_get_by_prefix_through_cli(
    tmp_path: Path, regions: list[str], ssm_client: FakeSsmClient
) -> None:
    ssm_client.parameters["/prod/app/DB_HOST"] = ("db.local", "String")
    assert (
        cli.main(["-action", "get-by-prefix", "-prefix", "/prod/app/", "-o", "app"])
        == 0
    )
    assert (tmp_path / "app.env").read_text(encoding="utf-8") == "DB_HOST=db.local\n"
    assert (tmp_path / "app.json").exists()


def test_source_file_without_action_reads_task_definition(
    tmp_path: Path,
    regions: list[str],
    ssm_client: FakeSsmClient,
    capsys: pytest.CaptureFixture[str],
) -> None:
    ssm_client.parameters["/prod/app/DB_HOST"] = ("db.local", "String")
    (tmp_path / "td.json").write_text(
        json.dumps(
            {
                "containerDefinitions": [
                    {"secrets": [{"name": "DB_HOST", "valueFrom": "/prod/app/DB_HOST"}]}
                ]
            }
        ),
        encoding="utf-8",
    )
    assert cli.main(["-s", "td.json"]) == 0
    assert "DB_HOST=db.local" in capsys.readouterr().out


def test_put_from_template_format_error_fails(
    tmp_path: Path, regions: list[str], capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / "bad.json").write_text("{}", encoding="utf-8")
    assert cli.main(["-action", "put-from-template", "-s", "bad.json"]) == 1
    assert "no container definitions found" in capsys.readouterr().err


def test_invalid_log_level_fails_without_traceback(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("SALTER_LOG_LEVEL", "verbose")
    (tmp_path / "a.env").write_text("A=1\n", encoding="utf-8")
    assert cli.main(["-action", "generate", "-s", "a.env", "-o", "td.json"]) == 1
    assert "SALTER_LOG_LEVEL must be one of" in capsys.readouterr().err
    assert not (tmp_path / "td.json").exists()


def test_empty_region_in_config_fails_before_remote_call(
    tmp_path: Path, regions: list[str], capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / "config.json").write_text(
        json.dumps({"parameterPrefix": "/p/", "region": ""}), encoding="utf-8"
    )
    assert cli.main(["-action", "get", "-name", "/a"]) == 1
    assert "region must not be empty" in capsys.readouterr().err
    assert regions == []


def test_client_creation_failure_is_reported(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def _no_client(**kwargs: object) -> object:
        raise ParameterStoreError("Failed to create SSM client: no region")

    monkeypatch.setattr(ParameterStore, "_make_default_client", staticmethod(_no_client))
    assert cli.main(["-action", "get", "-name", "/a"]) == 1
    assert "Failed to create SSM client" in capsys.readouterr().err


def test_cli_logger_is_named_after_its_module() -> None:
    assert cli.logger.name == "salter_aws.main"
