"""Command-line interface for zinio-distiller."""

import argparse
import logging
import os
import signal
import sys
from pathlib import Path

from zinio_distiller.assembly import PageFetcher, RunContext
from zinio_distiller.clients import ClientError, ZinioClient
from zinio_distiller.pipeline import IssueDownloadOrchestrator, download_all_issues
from schemas.magazine import Magazine

DEFAULT_OUTPUT_DIR = Path(".")
DEFAULT_ZINIO_BASE_URL = "https://www.zinio.com"
EMAIL_ENV = "ZINIO_EMAIL"
PASSWORD_ENV = "ZINIO_PASSWORD"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def resolve_credentials(args: argparse.Namespace) -> tuple[str, str] | None:
    """Take credentials from the arguments, falling back to the environment."""
    email = args.email or os.environ.get(EMAIL_ENV, "")
    password = args.password or os.environ.get(PASSWORD_ENV, "")
    if not email or not password:
        return None
    return email, password


def client_config(args: argparse.Namespace) -> dict:
    return {
        "base_url": args.base_url,
        "headers": {
            "User-Agent": "zinio-distiller/1.0",
        },
    }


def install_signal_handlers(context: RunContext) -> None:
    """Cancel the run context on SIGTERM and SIGINT.

    The page being fetched is aborted and no further page or issue is
    started; a save already in progress completes atomically.
    """
    logger = logging.getLogger(__name__)

    def _handle_shutdown(signum, frame) -> None:
        logger.info("Shutdown signal received, cancelling downloads")
        context.cancel()

    signal.signal(signal.SIGTERM, _handle_shutdown)
    signal.signal(signal.SIGINT, _handle_shutdown)


def select_issues(
    magazines: list[Magazine],
    magazine_id: str | None = None,
    issue_id: str | None = None,
) -> list[Magazine]:
    """Narrow the library to one magazine and/or one issue."""
    selected = []
    for magazine in magazines:
        if magazine_id is not None and magazine.id != magazine_id:
            continue
        if issue_id is not None:
            issues = [i for i in magazine.issues if i.id == issue_id]
            if not issues:
                continue
            magazine = magazine.model_copy(update={"issues": issues})
        selected.append(magazine)
    return selected


def list_magazines(args: argparse.Namespace) -> int:
    """Execute the list command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    credentials = resolve_credentials(args)
    if credentials is None:
        logger.error(f"Must specify --email and --password or set {EMAIL_ENV} and {PASSWORD_ENV}")
        return 1

    try:
        with ZinioClient(client_config(args)) as client:
            logger.info(f"Logging in as {credentials[0]}")
            session = client.login(*credentials)
            magazines = client.get_magazines(session)

    except ClientError as e:
        logger.error(f"Failed to list magazines: {e}")
        return 1

    for magazine in magazines:
        print(f"{magazine.id}\t{magazine.title}")
        for issue in magazine.issues:
            print(f"  {issue.id}\t{issue.title}")

    return 0


def download(args: argparse.Namespace) -> int:
    """Execute the download command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 if every issue was downloaded or skipped, 1 otherwise)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    credentials = resolve_credentials(args)
    if credentials is None:
        logger.error(f"Must specify --email and --password or set {EMAIL_ENV} and {PASSWORD_ENV}")
        return 1

    output_dir = args.output
    output_dir.mkdir(parents=True, exist_ok=True)

    context = RunContext()
    install_signal_handlers(context)

    try:
        with ZinioClient(client_config(args)) as client, PageFetcher(
            transport_retries=args.retries
        ) as fetcher:
            logger.info(f"Logging in as {credentials[0]}")
            session = client.login(*credentials)

            logger.info("Downloading list of all magazines")
            magazines = select_issues(
                client.get_magazines(session), args.magazine, args.issue
            )
            if not magazines:
                logger.warning("No matching issues in library")

            orchestrator = IssueDownloadOrchestrator(client, fetcher=fetcher)
            report = download_all_issues(
                context, orchestrator, session, magazines, output_dir
            )

    except ClientError as e:
        logger.error(f"Download failed: {e}")
        return 1

    logger.info(f"Downloaded: {len(report.downloaded)}")
    logger.info(f"Skipped: {len(report.skipped)}")
    if report.failed:
        logger.warning(f"Failed: {len(report.failed)}")
        for result in report.failed:
            logger.warning(f"  - {result.destination.name}: {result.error}")
        return 1

    return 0


def add_credential_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--email",
        type=str,
        default=None,
        help=f"Account email (default: ${EMAIL_ENV})",
    )
    parser.add_argument(
        "--password",
        type=str,
        default=None,
        help=f"Account password (default: ${PASSWORD_ENV})",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=DEFAULT_ZINIO_BASE_URL,
        help=f"Zinio API base URL (default: {DEFAULT_ZINIO_BASE_URL})",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="zinio-distiller",
        description="Download Zinio magazine issues as unlocked PDFs",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    list_parser = subparsers.add_parser(
        "list",
        help="List the magazines and issues in the library",
        description="Log in and print the id and title of every magazine and issue in the library.",
    )
    add_credential_arguments(list_parser)
    list_parser.set_defaults(func=list_magazines)

    download_parser = subparsers.add_parser(
        "download",
        help="Download issues as unlocked PDFs",
        description="Download every issue in the library (or a selected magazine or issue), unlock its pages and save one PDF per issue.",
    )
    add_credential_arguments(download_parser)
    download_parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory for magazine folders (default: {DEFAULT_OUTPUT_DIR})",
    )
    download_parser.add_argument(
        "--magazine",
        type=str,
        default=None,
        help="Only download issues of this magazine id",
    )
    download_parser.add_argument(
        "--issue",
        type=str,
        default=None,
        help="Only download the issue with this id",
    )
    download_parser.add_argument(
        "--retries",
        type=int,
        default=0,
        help="Connection retries for page downloads (default: 0)",
    )
    download_parser.set_defaults(func=download)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
