from __future__ import annotations

import argparse
import sys
from typing import NoReturn

from salter_aws.config import ConfigError, ToolConfig, load_tool_config, log_level_from_env
from salter_aws.env_file import EnvFileError
from salter_aws.logging_utils import configure_logging, get_logger
from salter_aws.models import ParameterType
from salter_aws.operations import (
    generate_task_definition,
    get_parameters_by_prefix,
    get_parameters_from_file,
    put_parameters_from_template,
)
from salter_aws.parameter_store import ParameterStore, ParameterStoreError
from salter_aws.task_definition import TaskDefinitionError


PROG = "salter-aws"
ACTIONS = ("get", "put", "put-from-template", "generate", "get-by-prefix")

EXIT_OK = 0
EXIT_FAILURE = 1

USAGE = f"""Usage:
  Individual parameter operations:
    {PROG} -action <get|put> -name <param-name> [-value <param-value>] [-type <type>] [-region <region>]

  Bulk operations from ECS task definition:
    {PROG} -s <filename.json> [-o <output-prefix>] [-region <region>]

  Generate task definition from .env:
    {PROG} -action generate -s <env-file> -o <output.json>

  Get parameters by prefix:
    {PROG} -action get-by-prefix -prefix <prefix> -o <output-base>

  Put from template:
    {PROG} -action put-from-template -s <template.json>"""

ACTION_HELP = {
    "get": f"""Help for 'get' action:
  Retrieve a single parameter from AWS SSM.
  Usage: {PROG} -action get -name <param-name> [-region <region>]
  Example: {PROG} -action get -name /my/param""",
    "put": f"""Help for 'put' action:
  Store or update a single parameter in AWS SSM.
  Usage: {PROG} -action put -name <param-name> -value <value> [-type <type>] [-region <region>]
  Types: string, stringlist, securestring (default: string)
  Example: {PROG} -action put -name /my/param -value 'hello' -type securestring""",
    "put-from-template": f"""Help for 'put-from-template' action:
  Push parameters from a JSON template to AWS SSM.
  Usage: {PROG} -action put-from-template -s <template.json> [-region <region>]
  Template format: ECS task definition with 'secrets' array.
  Example: {PROG} -action put-from-template -s template/task-definition.json""",
    "generate": f"""Help for 'generate' action:
  Generate an ECS task definition JSON from a .env file.
  Usage: {PROG} -action generate -s <env-file> -o <output.json>
  Automatically detects parameter types (string, securestring, etc.).
  Example: {PROG} -action generate -s my.env -o task-def.json""",
    "get-by-prefix": f"""Help for 'get-by-prefix' action:
  Retrieve all parameters under a prefix from AWS SSM.
  Usage: {PROG} -action get-by-prefix -prefix <prefix> -o <output-base> [-region <region>]
  Saves to <output-base>.env and <output-base>.json
  Example: {PROG} -action get-by-prefix -prefix /prod/app/ -o app-params""",
}

GENERAL_HELP = f"""General help:
  Use -action <action> -h for specific help.
  Actions: {", ".join(ACTIONS)}
  Example: {PROG} -action get -h"""

logger = get_logger(__name__)


class UsageError(ValueError):
    """Raised when the flags given do not fit the selected action."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        print(f"Error: {message}", file=sys.stderr)
        raise SystemExit(EXIT_FAILURE)


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=PROG,
        description="Read and write AWS SSM Parameter Store entries",
        add_help=False,
    )
    parser.add_argument(
        "-action",
        default="",
        help="Action to perform: " + ", ".join(ACTIONS),
    )
    parser.add_argument("-name", default="", help="Parameter name")
    parser.add_argument(
        "-value", default="", help="Parameter value (required for 'put')"
    )
    parser.add_argument(
        "-s",
        dest="source_file",
        default="",
        help="Source file (JSON for get/put-from-template, .env for generate)",
    )
    parser.add_argument(
        "-type",
        dest="param_type",
        default="string",
        help="Parameter type: 'string', 'stringlist', or 'securestring'",
    )
    parser.add_argument(
        "-o",
        dest="output",
        default="",
        help="Output prefix for bulk env, or output file for generate/get-by-prefix",
    )
    parser.add_argument(
        "-region", default="", help="AWS region (defaults to config.json)"
    )
    parser.add_argument("-prefix", default="", help="Prefix for get-by-prefix")
    parser.add_argument(
        "-h",
        dest="show_help",
        action="store_true",
        help="Show help for the specified action",
    )
    return parser


def show_help(action: str) -> None:
    print(ACTION_HELP.get(action, GENERAL_HELP))


def _make_store(region: str) -> ParameterStore:
    return ParameterStore(region_name=region)


def _validate(args: argparse.Namespace) -> None:
    action = args.action
    if action == "generate" and not (args.source_file and args.output):
        raise UsageError("-s <env-file> and -o <output.json> required for 'generate'")
    if action == "put-from-template" and not args.source_file:
        raise UsageError("-s <filename.json> is required for 'put-from-template'")
    if args.source_file:
        return
    if action in ("get", "put") and not args.name:
        raise UsageError("-name is required for 'get' and 'put' actions")
    if action == "put" and not args.value:
        raise UsageError("-value is required for 'put' action")
    if action == "put":
        ParameterType.from_cli(args.param_type)
    if action == "get-by-prefix" and not (args.prefix and args.output):
        raise UsageError("-prefix and -o <output-base> required for 'get-by-prefix'")
    if action and action not in ACTIONS:
        raise UsageError(
            "Invalid action. Use 'get', 'put', 'put-from-template', "
            "'generate', or 'get-by-prefix'"
        )


def _dispatch(args: argparse.Namespace, config: ToolConfig) -> int:
    action = args.action
    if action == "generate":
        generate_task_definition(
            args.source_file,
            args.output,
            parameter_prefix=config.parameter_prefix,
        )
        return EXIT_OK

    store = _make_store(args.region)
    if action == "put-from-template":
        put_parameters_from_template(
            store,
            args.source_file,
            parameter_prefix=config.parameter_prefix,
        )
        return EXIT_OK
    if args.source_file:
        get_parameters_from_file(store, args.source_file, args.output or None)
        return EXIT_OK
    if action == "get":
        parameter = store.get_parameter(args.name)
        print(f"Parameter {args.name}: {parameter.value}")
        return EXIT_OK
    if action == "get-by-prefix":
        get_parameters_by_prefix(store, args.prefix, args.output)
        return EXIT_OK
    if action == "put":
        store.put_parameter(
            args.name,
            args.value,
            ParameterType.from_cli(args.param_type),
        )
        print(f"Parameter {args.name} set successfully as {args.param_type}")
        return EXIT_OK
    raise UsageError(f"Unknown action: {action}")


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.show_help:
        show_help(args.action)
        return EXIT_OK

    try:
        configure_logging(log_level_from_env())
        config = load_tool_config()
    except ConfigError as exc:
        print(f"Failed to load config: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    if not args.region:
        args.region = config.region

    if not args.action and not args.source_file:
        print(USAGE)
        return EXIT_FAILURE
    try:
        _validate(args)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    try:
        return _dispatch(args, config)
    except (EnvFileError, TaskDefinitionError) as exc:
        logger.error("file_error_abort", extra={"action": args.action}, exc_info=exc)
        print(f"Failed to run {args.action or 'get-from-file'}: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    except ParameterStoreError as exc:
        logger.error(
            "parameter_store_error_abort",
            extra={"action": args.action},
            exc_info=exc,
        )
        print(f"Failed to run {args.action or 'get-from-file'}: {exc}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
