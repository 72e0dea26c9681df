#!/usr/bin/env python3
"""
Command-line interface for the Hash Ripper.
"""

import argparse
import platform
import sys
import time
from typing import List, Optional

from tqdm import tqdm

from hash_ripper.core.algorithms import (
    HASH_ALGORITHMS,
    KeyedAlgorithm,
    algorithm_name,
    encode_all,
    parse_algorithm,
)
from hash_ripper.core.catalog import DictionaryCatalog
from hash_ripper.core.session import (
    HashMatchSession,
    KeyedMatchSession,
    LuckyMatchSession,
    MatchSession,
)
from hash_ripper.utils.config import Config, verbosity_to_level
from hash_ripper.utils.exceptions import ConfigError, HashRipperError
from hash_ripper.utils.logger import Logger


def create_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser"""
    parser = argparse.ArgumentParser(
        prog="hash-ripper",
        description="Recover the plaintext behind a hash digest",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument("target", nargs="?", help="Digest to recover the plaintext of")

    # Word source options
    source_group = parser.add_argument_group("Word Source Options")
    source_group.add_argument(
        "-w", "--wordlist", nargs="+", help="Word list files to search, in order"
    )
    source_group.add_argument(
        "-g",
        "--generate",
        action="store_true",
        help="Generate every word over --alphabet up to --max-length instead of using word lists",
    )
    source_group.add_argument("--alphabet", help="Characters for generated words")
    source_group.add_argument(
        "--max-length", type=int, help="Longest generated word"
    )

    # Algorithm options
    algorithm_group = parser.add_argument_group("Algorithm Options")
    algorithm_group.add_argument(
        "-a", "--algorithm", help="Algorithm name or id (see --list-algorithms)"
    )
    algorithm_group.add_argument(
        "-l",
        "--lucky",
        action="store_true",
        help="Try every hash algorithm in turn",
    )
    algorithm_group.add_argument(
        "-k",
        "--keylist",
        nargs="+",
        help="Key list files for keyed algorithms; each key is tried against every word",
    )

    # Search options
    search_group = parser.add_argument_group("Search Options")
    search_group.add_argument(
        "-b", "--budget", type=float, help="Milliseconds per search slice"
    )
    search_group.add_argument(
        "-c", "--chunk-size", type=int, help="Words checked between clock reads"
    )

    # Tools
    tools_group = parser.add_argument_group("Tools")
    tools_group.add_argument(
        "-e", "--encode", metavar="WORD", help="Print every hash of WORD and exit"
    )
    tools_group.add_argument(
        "--list-algorithms", action="store_true", help="List supported algorithms and exit"
    )

    # Output options
    output_group = parser.add_argument_group("Output Options")
    output_group.add_argument(
        "-v",
        "--verbosity",
        choices=["debug", "info", "warning", "error", "critical"],
        help="Logging verbosity level",
    )
    output_group.add_argument("--log-file", help="Save log output to this file")
    output_group.add_argument("--output-file", help="Save the match to this file")
    output_group.add_argument(
        "-q", "--quiet", action="store_true", help="Suppress standard output messages"
    )

    # Config management
    config_group = parser.add_argument_group("Configuration")
    config_group.add_argument("--config", help="Path to configuration file")
    config_group.add_argument(
        "--save-config",
        action="store_true",
        help="Save current settings as default configuration",
    )

    return parser


def setup_logger(args, config: Config) -> Logger:
    """Set up logging based on command-line arguments and config"""
    verbosity = args.verbosity or config.get("verbosity", "info")
    log_file = args.log_file or config.get("log_file")

    return Logger(
        log_file=log_file,
        level=verbosity_to_level(verbosity),
        console=not args.quiet,
    )


def print_system_info(logger) -> None:
    """Print system information useful for debugging"""
    import Crypto

    logger.debug("=== System Information ===")
    logger.debug(f"Python version: {platform.python_version()}")
    logger.debug(f"Platform: {platform.platform()}")
    logger.debug(f"pycryptodome version: {Crypto.__version__}")
    logger.debug("=========================")


def save_config_from_args(args, config: Config) -> None:
    """Save configuration from command-line arguments"""
    if args.chunk_size:
        config.set("chunk_size", args.chunk_size)
    if args.budget:
        config.set("budget_ms", args.budget)
    if args.verbosity:
        config.set("verbosity", args.verbosity)
    if args.log_file:
        config.set("log_file", args.log_file)
    if args.algorithm:
        config.set("algorithm", args.algorithm)
    if args.alphabet:
        config.set("alphabet", args.alphabet)
    if args.max_length:
        config.set("max_length", args.max_length)

    config.save()


def list_algorithms() -> None:
    """Print the supported algorithm ids and names"""
    for algorithm in list(HASH_ALGORITHMS) + list(KeyedAlgorithm):
        print(f"{int(algorithm):>3}  {algorithm_name(algorithm)}")


def print_encodings(word: str) -> None:
    """Print every hash of a word"""
    for algorithm, digest in encode_all(word):
        print(f"{algorithm_name(algorithm):>10}  {digest}")


def build_catalog(args, config: Config) -> DictionaryCatalog:
    """Build the word catalog from word list files or generator settings"""
    catalog = DictionaryCatalog()

    if args.generate:
        catalog.use_generated(
            args.alphabet or config.get("alphabet"),
            args.max_length or config.get("max_length"),
        )
    else:
        names = [catalog.add_file(path, name=path) for path in args.wordlist]
        catalog.select(names)

    return catalog


def find_option_conflict(args) -> Optional[str]:
    """Describe a combination of search modes that cannot be honoured, if any"""
    if args.lucky and args.keylist:
        return "--lucky tries unkeyed algorithms only and cannot be combined with --keylist"
    if args.lucky and args.algorithm:
        return "--lucky tries every algorithm and cannot be combined with --algorithm"
    return None


def build_session(args, config: Config, catalog: DictionaryCatalog) -> MatchSession:
    """Create and configure the session kind the arguments ask for"""
    chunk_size = args.chunk_size or config.get("chunk_size")

    if args.keylist:
        keys = DictionaryCatalog()
        keys.select([keys.add_file(path, name=path) for path in args.keylist])

        session = KeyedMatchSession(
            chunk_size=chunk_size, key_source=keys.build_source()
        )
        session.select_algorithm(parse_algorithm(args.algorithm or KeyedAlgorithm.HMAC_MD5))
    elif args.lucky:
        session = LuckyMatchSession(chunk_size=chunk_size)
        session.select_algorithms()
    else:
        session = HashMatchSession(chunk_size=chunk_size)
        session.select_algorithm(parse_algorithm(args.algorithm or config.get("algorithm")))

    session.use_catalog(catalog)
    session.set_target(args.target)
    return session


def expected_total(session: MatchSession) -> int:
    """Number of candidates a full search of the session would check"""
    total = session.source.capacity()
    if isinstance(session, LuckyMatchSession):
        total *= len(session.algorithms)
    elif isinstance(session, KeyedMatchSession):
        total *= session.key_source.capacity()
    return total


def run_session(session: MatchSession, budget_ms: float, quiet: bool = False) -> Optional[str]:
    """Drive a session slice by slice until it matches or runs out

    Args:
        session: Configured session
        budget_ms: Milliseconds per check call
        quiet: Whether to hide the progress bar

    Returns:
        The match, or None if the search was exhausted
    """
    session.start_matching()

    progress_bar = tqdm(total=expected_total(session), unit="word", disable=quiet)
    try:
        while session.is_checking():
            session.check(budget_ms)
            progress_bar.update(session.get_progress() - progress_bar.n)
            progress_bar.set_description(f"Last: {session.get_last_word()}")
    finally:
        progress_bar.close()

    return session.get_match()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the hash ripper CLI

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = Config(args.config)
    except ConfigError as e:
        parser.error(str(e))

    logger = setup_logger(args, config).get_logger()

    try:
        print_system_info(logger)

        if args.save_config:
            save_config_from_args(args, config)
            logger.info(f"Configuration saved to {config.config_path}")

        if args.list_algorithms:
            list_algorithms()
            return 0

        if args.encode is not None:
            print_encodings(args.encode)
            return 0

        if not args.target:
            logger.error("A target digest is required")
            return 1

        if not args.generate and not args.wordlist:
            logger.error("Give word lists with --wordlist or use --generate")
            return 1

        conflict = find_option_conflict(args)
        if conflict:
            logger.error(conflict)
            return 1

        catalog = build_catalog(args, config)
        session = build_session(args, config, catalog)
        budget_ms = args.budget or config.get("budget_ms")

        start_time = time.time()
        match = run_session(session, budget_ms, quiet=args.quiet)

        if match is not None:
            logger.info("Match found!")
            logger.info(f"Word: {match}")
            if isinstance(session, KeyedMatchSession):
                logger.info(f"Key: {session.get_match_key()}")
            if isinstance(session, LuckyMatchSession):
                logger.info(f"Algorithm: {algorithm_name(session.get_current_algorithm())}")
            logger.info(f"Total time: {time.time() - start_time:.2f} seconds")

            if args.output_file:
                with open(args.output_file, "w") as f:
                    f.write(f"Digest: {args.target}\nWord: {match}\n")
                logger.info(f"Match saved to {args.output_file}")

            return 0

        if not args.quiet:
            print("\n" + "=" * 60)
            print("NO MATCH AFTER EXHAUSTING ALL CANDIDATES")
            print("=" * 60)

        logger.warning(f"Checked {session.get_progress():,} candidates without a match")
        logger.info(f"Total time spent: {time.time() - start_time:.2f} seconds")

        if not args.quiet:
            print("\nSuggestions for next steps:")
            print("1. Add more word lists (-w english.txt french.txt)")
            print("2. Generate candidates instead (-g --alphabet abc123 --max-length 5)")
            print("3. Try every hash algorithm (--lucky)")

        return 1

    except HashRipperError as e:
        logger.error(f"Error: {str(e)}")
        return 1
    except KeyboardInterrupt:
        logger.info("\nInterrupted by user.")
        return 130
    except Exception as e:
        logger.exception(f"Unexpected error: {str(e)}")
        return 1


def display_examples():
    """Display usage examples"""
    examples = [
        "Search word lists with MD5:",
        "  hash-ripper e4eac943e400cd75335ce2a751e794f4 -w english.txt",
        "",
        "Pick another algorithm:",
        "  hash-ripper <digest> -w english.txt -a sha256",
        "",
        "Try every hash algorithm:",
        "  hash-ripper <digest> -w english.txt --lucky",
        "",
        "Generate candidates instead of using word lists:",
        "  hash-ripper <digest> -g --alphabet 0123456789 --max-length 6",
        "",
        "Keyed search (HMAC) with a key list:",
        "  hash-ripper <digest> -w words.txt -k keys.txt -a hmac-sha256",
        "",
        "Show every hash of a word:",
        "  hash-ripper --encode 'Hello world!'",
        "",
        "Save configuration for future use:",
        "  hash-ripper <digest> -w english.txt -a sha1 -b 250 --save-config",
        "",
        "For more options:",
        "  hash-ripper -h",
    ]

    print("\n".join(examples))


if __name__ == "__main__":
    if len(sys.argv) == 1:
        display_examples()
        sys.exit(1)

    sys.exit(main())
