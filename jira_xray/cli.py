"""
Xray Import CLI.

Uploads a test results file to "Xray for Jira".

Usage:
    xray-import junit reports/junit.xml --config config/jira.yaml --project-key CALC
    xray-import junit reports/junit.xml --project-key CALC --test-environments "iOS;Android"
    xray-import cucumber reports/cucumber.json --issue-data new_exec.json
    xray-import bundle reports/results.zip
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

from loguru import logger

from jira_xray.config.loader import ConfigLoader, ConfigurationError
from jira_xray.jira_client.http_client import JiraClientError
from jira_xray.jira_client.import_request import (
    JSON_IMPORT_KINDS,
    XML_IMPORT_KINDS,
    ImportQuery,
    InvalidArgumentError,
)
from jira_xray.jira_client.xray_client import JiraXrayClient

FORMATS = ("xray",) + JSON_IMPORT_KINDS + XML_IMPORT_KINDS + ("bundle",)

QUERY_OPTIONS = (
    "project_key",
    "test_exec_key",
    "test_plan_key",
    "test_environments",
    "revision",
    "fix_version",
)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_ARGUMENT = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for a results import."""
    parser = argparse.ArgumentParser(
        prog="xray-import",
        description="Import test execution results into Xray for Jira",
    )
    parser.add_argument("format", choices=FORMATS, help="Format of the results file")
    parser.add_argument("results_file", type=Path, help="Path to the results file")
    parser.add_argument(
        "--config",
        type=str,
        default="config/jira.yaml",
        help="Path to the Jira connection file (default: config/jira.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    # --- XML query parameters ---
    parser.add_argument("--project-key", default=None, help="Project for a new Test Execution")
    parser.add_argument("--test-exec-key", default=None, help="Existing Test Execution to update")
    parser.add_argument("--test-plan-key", default=None, help="Associated Test Plan")
    parser.add_argument(
        "--test-environments",
        default=None,
        help='Test environments, ";"-delimited',
    )
    parser.add_argument("--revision", default=None, help="Source code revision under test")
    parser.add_argument("--fix-version", default=None, help="Fix Version of the Test Execution")
    # --- Multipart ---
    parser.add_argument(
        "--issue-data",
        type=Path,
        default=None,
        help="JSON file with Jira issue fields for a new Test Execution",
    )
    args = parser.parse_args(argv)

    # Options the chosen format cannot send
    unused = []
    if args.format not in XML_IMPORT_KINDS:
        unused.extend(
            f"--{option.replace('_', '-')}"
            for option in QUERY_OPTIONS
            if getattr(args, option) is not None
        )
    if args.format not in JSON_IMPORT_KINDS + XML_IMPORT_KINDS and args.issue_data is not None:
        unused.append("--issue-data")
    if unused:
        parser.error(f"{', '.join(unused)} cannot be used with format '{args.format}'")

    return args


def configure_logging(verbose: bool) -> None:
    """Send log output to stderr at INFO, or DEBUG when verbose."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def build_query(args: argparse.Namespace) -> Optional[ImportQuery]:
    """Collect the XML query parameters; None if none were given."""
    query = ImportQuery(
        test_exec_key=args.test_exec_key,
        project_key=args.project_key,
        test_plan_key=args.test_plan_key,
        test_environments=args.test_environments,
        revision=args.revision,
        fix_version=args.fix_version,
    )
    if not query.to_params():
        return None
    return query


def run_import(client: JiraXrayClient, args: argparse.Namespace) -> Any:
    """Dispatch the import for the chosen format."""
    issue_data = None
    if args.issue_data is not None:
        issue_data = json.loads(args.issue_data.read_text(encoding="utf-8"))

    if args.format == "xray":
        results = json.loads(args.results_file.read_text(encoding="utf-8"))
        return client.import_exec_results_from_xray(results)

    if args.format in JSON_IMPORT_KINDS:
        results = json.loads(args.results_file.read_text(encoding="utf-8"))
        importer = getattr(client, f"import_exec_results_from_{args.format}")
        return importer(results, issue_data)

    with args.results_file.open("rb") as results_file:
        if args.format == "bundle":
            return client.import_multiple_exec_results(results_file)
        importer = getattr(client, f"import_exec_results_from_{args.format}")
        return importer(results_file, build_query(args), issue_data)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the xray-import command."""
    args = parse_args(argv)
    configure_logging(args.verbose)

    logger.info(f"[Import] Format: {args.format}")
    logger.info(f"[Import] Results: {args.results_file}")

    try:
        client = JiraXrayClient(config=ConfigLoader().load_client_config(args.config))
    except (ConfigurationError, FileNotFoundError) as e:
        logger.error(f"[Import] Cannot load Jira connection: {e}")
        return EXIT_FAILURE

    try:
        with client:
            response = run_import(client, args)
    except InvalidArgumentError as e:
        logger.error(f"[Import] Invalid arguments: {e}")
        return EXIT_INVALID_ARGUMENT
    except JiraClientError as e:
        logger.error(f"[Import] Import failed: {e}")
        return EXIT_FAILURE
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"[Import] Cannot read input: {e}")
        return EXIT_FAILURE

    print(json.dumps(response, indent=2))
    logger.info("[Import] Finished")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
