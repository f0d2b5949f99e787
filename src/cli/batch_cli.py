"""
Command-line interface for the movie ETL pipeline.

Usage:
    python -m src.cli.batch_cli process --input <file_path> [options]

Exit status is 0 when the run succeeds and 1 when any stage fails.
"""

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError as ConfigError

from src.batch.pipeline import BatchPipeline
from src.batch.readers import CSVReader
from src.core.config import PipelineConfig, load_config
from src.core.errors import StoreError
from src.observability.logger import get_logger
from src.observability.metrics import write_metrics_file
from src.utils.validation import ValidationError, validate_file_path
from src.warehouse.connection import DatabaseConnectionPool
from src.warehouse.movie_store import MovieStore


logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1


def build_config(args: argparse.Namespace) -> PipelineConfig:
    """
    Merge the YAML/env configuration with command-line overrides.

    Args:
        args: Command-line arguments

    Returns:
        PipelineConfig
    """
    config = load_config(args.config)
    overrides = {}
    if args.input:
        overrides["input_path"] = args.input
    if args.table:
        overrides["table_name"] = args.table
    if args.sample_limit is not None:
        overrides["sample_limit"] = args.sample_limit
    if args.delimiter:
        overrides["delimiter"] = args.delimiter
    if args.no_clear:
        overrides["clear_before_load"] = False

    return PipelineConfig(**{**config.model_dump(), **overrides})


def process_command(args: argparse.Namespace) -> int:
    """
    Execute one pipeline run.

    Args:
        args: Command-line arguments

    Returns:
        Process exit status
    """
    try:
        config = build_config(args)
        input_path = validate_file_path(config.input_path, "input")
    except (ConfigError, ValidationError, FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_FAILED

    if not Path(input_path).exists():
        logger.error(f"Input file not found: {input_path}")
        return EXIT_FAILED

    logger.info(f"Input file: {input_path}")
    logger.info("Initializing database connection...")
    try:
        pool = DatabaseConnectionPool(
            host=args.db_host,
            port=args.db_port,
            database=args.db_name,
            user=args.db_user,
            password=args.db_password,
            timeout=config.connect_timeout,
            statement_timeout=config.statement_timeout,
        )
        pool.open()
    except (ValueError, StoreError) as e:
        logger.error(f"Cannot connect to database: {e}")
        return EXIT_FAILED

    try:
        pipeline = BatchPipeline(
            store=MovieStore(pool, table_name=config.table_name),
            reader=CSVReader(delimiter=config.delimiter),
            sample_limit=config.sample_limit,
            clear_before_load=config.clear_before_load,
            source_id=Path(input_path).stem,
        )
        result = pipeline.run(input_path)
    finally:
        pool.close()

    if args.metrics_file:
        write_metrics_file(args.metrics_file)
        logger.info(f"Metrics written to {args.metrics_file}")

    return EXIT_OK if result.succeeded else EXIT_FAILED


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Movie ETL pipeline: CSV -> clean -> PostgreSQL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Load the FilmTV export into the movie table
  python -m src.cli.batch_cli process --input dataset/filmtv_movies.csv

  # Upsert into an existing table without dropping it first
  python -m src.cli.batch_cli process --input data/movies.csv --no-clear

  # Semicolon-delimited file, custom table, show 5 rows after loading
  python -m src.cli.batch_cli process --input data/movies.csv \\
      --delimiter ";" --table movie_staging --sample-limit 5
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser = subparsers.add_parser("process", help="Load a movie CSV file")
    process_parser.add_argument(
        "--input",
        help="Path to input file (default: input_path from the config)"
    )
    process_parser.add_argument(
        "--config",
        help="Path to pipeline YAML config (default: config/pipeline.yaml if present)"
    )
    process_parser.add_argument("--table", help="Destination table name")
    process_parser.add_argument("--delimiter", help="Field delimiter")
    process_parser.add_argument(
        "--sample-limit",
        type=int,
        help="Rows to read back after loading"
    )
    process_parser.add_argument(
        "--no-clear",
        action="store_true",
        help="Keep existing rows instead of dropping the table first"
    )
    process_parser.add_argument(
        "--metrics-file",
        help="Write Prometheus metrics of the run to this file"
    )

    # Database connection arguments (fall back to DB_* env vars)
    process_parser.add_argument("--db-host", help="Database host")
    process_parser.add_argument("--db-port", type=int, help="Database port")
    process_parser.add_argument("--db-name", help="Database name")
    process_parser.add_argument("--db-user", help="Database user")
    process_parser.add_argument("--db-password", help="Database password")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_FAILED

    if args.command == "process":
        return process_command(args)

    return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
