"""depfetch - Maven artifact downloader with transitive dependency resolution

    Reads group:artifact:version lines from a file or standard input and
    downloads each artifact together with everything its POM pulls in.

    Returns:
        int: Exit code
"""
import logging
import os
import sys
from contextlib import nullcontext
from typing import IO, Iterable, Iterator, Optional

from constants import Constants, ExitCodes
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import build_config, load_config_file
from registry.maven.coordinates import Coordinate, InputError
from registry.maven.resolver import Resolver, ResolverConfig, ResolutionStats

logger = logging.getLogger(__name__)


def _setup_logging(args):
    """Configure logging based on CLI arguments."""
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.LOG_LEVEL_ENV] = str(args.LOG_LEVEL).upper()
    configure_logging()

    if getattr(args, "QUIET", False):
        for handler in logging.getLogger().handlers:
            handler.setLevel(logging.ERROR)

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
        file_handler.setFormatter(formatter)
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def open_seed_source(file_name: Optional[str]) -> IO[str]:
    """Open the seed input: the named file, or standard input when None.

    Raises:
        InputError: If the file does not exist or cannot be read.
    """
    if file_name is None:
        return sys.stdin
    try:
        return open(file_name, encoding="utf-8")
    except OSError as e:
        raise InputError(f"File does not exist or cannot be read: {file_name} ({e})") from e


def _read_lines(lines: Iterable[str]) -> Iterator[str]:
    """Yield lines, turning decode and read failures into InputError."""
    source = iter(lines)
    while True:
        try:
            line = next(source)
        except StopIteration:
            return
        except (UnicodeDecodeError, OSError) as e:
            raise InputError(f"Seed input cannot be read: {e}") from e
        yield line


def iter_seeds(lines: Iterable[str]) -> Iterator[Coordinate]:
    """Yield coordinates from input lines, skipping blanks and # comments.

    Raises:
        InputError: On the first malformed line, or when the input cannot be
            read or decoded.
    """
    for number, line in enumerate(_read_lines(lines), start=1):
        text = line.strip()
        if not text or text.startswith(Constants.COMMENT_PREFIX):
            continue
        try:
            yield Coordinate.parse(text)
        except InputError as e:
            raise InputError(f"line {number}: {e}") from e


def ensure_directories(config: ResolverConfig) -> None:
    """Create the output and POM directories when missing."""
    for directory in (config.output_dir, config.pom_dir):
        os.makedirs(directory, exist_ok=True)


def log_summary(stats: ResolutionStats) -> None:
    logger.info(
        "Resolved %d coordinates: %d downloaded, %d already present, "
        "%d excluded, %d declarations dropped, %d failures",
        stats.visited,
        stats.artifacts_downloaded,
        stats.artifacts_existing,
        stats.excluded,
        stats.dropped,
        stats.failures,
    )


def run(args, fetcher=None) -> int:
    """Run a resolution for parsed arguments and return the exit code.

    Args:
        args: Parsed CLI arguments namespace.
        fetcher: Optional fetcher passed through to the Resolver.
    """
    try:
        config = build_config(args, load_config_file(getattr(args, "CONFIG", None)))
    except InputError as e:
        logger.error("%s", e)
        return ExitCodes.FILE_ERROR.value

    if is_debug_enabled(logger):
        logger.debug(
            "Configuration assembled",
            extra=extra_context(
                event="function_entry",
                component="cli",
                action="run",
                target=config.base_url,
                exclusion_key_mode=config.exclusion_key_mode.value,
            )
        )

    try:
        ensure_directories(config)
    except OSError as e:
        logger.error("Cannot create output directory: %s", e)
        return ExitCodes.FILE_ERROR.value

    try:
        source = open_seed_source(getattr(args, "INPUT_FILE", None))
    except InputError as e:
        logger.error("%s", e)
        return ExitCodes.FILE_ERROR.value

    resolver = Resolver(config, fetcher=fetcher)
    try:
        with source if source is not sys.stdin else nullcontext(source) as fh:
            resolver.resolve_all(iter_seeds(fh))
    except InputError as e:
        logger.error("Invalid input, aborting: %s", e)
        log_summary(resolver.stats)
        return ExitCodes.FILE_ERROR.value

    log_summary(resolver.stats)
    if getattr(args, "ERROR_ON_WARNINGS", False) and resolver.stats.failures:
        logger.error("Failures present, exiting with non-zero status code.")
        return ExitCodes.EXIT_WARNINGS.value
    return ExitCodes.SUCCESS.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)
    logging.info("Arguments parsed.")
    sys.exit(run(args))


if __name__ == "__main__":
    main()
