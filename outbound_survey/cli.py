#!/usr/bin/env python3
"""
Outbound survey CLI - queues the survey calls and exits.

Call outcomes are gathered afterwards by the callback service
(``outbound_survey.main:app``), not by this process.
"""

import argparse
import logging
import sys
from collections import Counter

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from outbound_survey.config import settings
from outbound_survey.enum import RunState
from outbound_survey.errors import AuthenticationError, InvalidConfiguration
from outbound_survey.logger import get_logger
from outbound_survey.survey import SurveyBuilder, SurveyOrchestrator


console = Console()
logger = get_logger(__name__)


def setup_logging(verbose: bool = False):
    """Route logs through Rich."""
    level = logging.DEBUG if verbose else settings.get_log_level
    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=verbose,
        rich_tracebacks=verbose,
    )
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    # Quiet noisy libraries unless verbose
    for name in ("urllib3", "twilio.http_client"):
        logging.getLogger(name).setLevel(logging.WARNING if not verbose else logging.INFO)


def create_argument_parser():
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        prog="outbound-survey",
        description=f"{settings.app_name} - call every number of a survey that hasn't been reached yet",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Credentials and URLs from the environment (TWILIO_ACCOUNT_SID, CALL_HANDLER_URL, ...)
  %(prog)s -n numbers.csv

  # Everything on the command line, numbers without the country code
  %(prog)s -n numbers.csv -d survey.db -i +351 \\
      -c https://example.org/v1/survey/call-handler \\
      -r https://example.org/v1/survey/call-result \\
      -s ACxxxxxxxx -a token -p +351210000000
        """
    )

    parser.add_argument("--numbers", "-n", required=True, help="Path to the CSV file containing the list of phone numbers")
    parser.add_argument("--database", "-d", default=settings.database_url, help="Result store: a database URL or a SQLite file path")
    parser.add_argument("--callhandler", "-c", default=settings.call_handler_url, help="URL of the endpoint that handles the call once it's established")
    parser.add_argument("--resulthandler", "-r", default=settings.call_result_url, help="URL of the endpoint that receives the result of the call")
    parser.add_argument("--sid", "-s", default=settings.twilio_account_sid, help="The SID of your Twilio account")
    parser.add_argument("--authtoken", "-a", default=settings.twilio_auth_token, help="The authentication token for your Twilio account")
    parser.add_argument("--callerphone", "-p", default=settings.twilio_phone_number, help="The Twilio phone number used to make the calls")
    parser.add_argument("--internationalprefix", "-i", help="International prefix added to every number being called")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return parser


def build_survey(args) -> SurveyOrchestrator:
    builder = (
        SurveyBuilder()
        .with_numbers_csv(args.numbers)
        .with_database(args.database)
        .with_call_handler_url(args.callhandler)
        .with_call_result_url(args.resulthandler)
        .with_account_sid(args.sid)
        .with_auth_token(args.authtoken)
        .with_caller_number(args.callerphone)
    )
    if args.internationalprefix and args.internationalprefix.strip():
        builder.with_international_prefix(args.internationalprefix)

    return builder.build()


def print_summary(summary: Counter):
    table = Table(title="Survey calls", box=box.SIMPLE_HEAD, expand=False)
    table.add_column("Status", style="bold")
    table.add_column("Calls", justify="right")
    for status, count in summary.most_common():
        table.add_row(str(status), str(count))
    table.add_row("total", str(sum(summary.values())), style="dim")
    console.print(table)


def main(argv=None) -> int:
    """Main function."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger.debug(
        "All arguments read successfully: %s",
        {**vars(args), "authtoken": "***" if args.authtoken else None},
    )

    try:
        orchestrator = build_survey(args)
    except InvalidConfiguration as e:
        logger.error("Invalid survey configuration: %s", e)
        return 2
    except AuthenticationError as e:
        logger.error("%s", e)
        return 1

    for result in orchestrator.execute():
        logger.debug("Call to %s is %s", result.destination, result.status)

    if orchestrator.state == RunState.FAILED:
        return 1

    print_summary(orchestrator.summary)
    logger.info(
        "Survey executed. Please note that this operation is asynchronous, the survey was merely queued. "
        "Results will be gathered in the following minutes."
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
