"""
LessWatch Command Line Interface.

Watches a folder of Less files and compiles them into CSS.

Usage:
    less-watch-compiler [options] <source_dir> <destination_dir> [main_file_name]

Examples:
    less-watch-compiler less css
    less-watch-compiler --main-file style.less less css
    less-watch-compiler --run-once --source-map less css
"""

import argparse
import signal
import sys
from pathlib import Path
from typing import Any

from compiler.less_compiler import LessCompiler
from engine.watch_loop import WatchLoop
from utils.config import DEFAULT_CONFIG_FILE, build_watch_config, get_settings, load_config_file
from utils.exceptions import LessWatchError, MissingArgumentsError, StartupConfigError
from utils.logger import configure_logging, get_logger

logger = get_logger("cli")

USAGE_HELP = """Missing arguments. Example:
\tless-watch-compiler FOLDER_TO_WATCH FOLDER_TO_OUTPUT
\tExample 1: To watch all files under the folder "less" and compile all into a folder "css".
\t\t less-watch-compiler less css"""


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="less-watch-compiler",
        description="Watch a folder (and subfolders) and compile Less files into CSS",
    )
    parser.add_argument("source_dir", nargs="?", help="Folder to watch")
    parser.add_argument("destination_dir", nargs="?", help="Folder to write CSS into")
    parser.add_argument("main_file_name", nargs="?", help="Single file to always re-compile")
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {get_settings().app_version}",
    )
    parser.add_argument(
        "--main-file",
        metavar="FILE",
        help="Specify FILE as the file to always re-compile e.g. '--main-file style.less'",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        type=Path,
        default=Path(DEFAULT_CONFIG_FILE),
        help="Custom configuration file path",
    )
    parser.add_argument(
        "--run-once",
        action="store_true",
        default=None,
        help="Run the compiler once without waiting for additional changes",
    )
    parser.add_argument(
        "--include-hidden",
        action="store_true",
        default=None,
        help="Also compile files whose names start with an underscore",
    )
    parser.add_argument(
        "--enable-js",
        action="store_true",
        default=None,
        help="Less option: enable inline JavaScript in Less files",
    )
    parser.add_argument(
        "--source-map",
        action="store_true",
        default=None,
        help="Less option: generate source maps for CSS files",
    )
    parser.add_argument(
        "--plugins",
        metavar="PLUGIN_A,PLUGIN_B",
        help="Less option: plugins separated by commas",
    )
    parser.add_argument(
        "--less-args",
        metavar="ARG=VALUE,ARG2=VALUE2",
        help="Less option: any other lessc options e.g. 'math=strict,strict-units=on'",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (overrides LOG_LEVEL)",
    )
    return parser


def cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Map parsed arguments to config keys; None means not given."""
    return {
        "watchFolder": args.source_dir,
        "outputFolder": args.destination_dir,
        "mainFile": args.main_file or args.main_file_name,
        "runOnce": args.run_once,
        "includeHidden": args.include_hidden,
        "enableJs": args.enable_js,
        "sourceMap": args.source_map,
        "plugins": args.plugins,
        "lessArgs": args.less_args,
    }


def main(argv: list[str] | None = None, compiler: Any = None) -> int:
    """
    Main entry point.

    Args:
        argv: Arguments, defaults to sys.argv[1:]
        compiler: Compile adapter, defaults to LessCompiler

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    config_path = args.config if args.config.is_absolute() else Path.cwd() / args.config

    try:
        file_values = load_config_file(config_path)
        if file_values:
            logger.info("config_file_loaded", path=str(config_path))
        config = build_watch_config(file_values, cli_overrides(args))
    except MissingArgumentsError:
        print(USAGE_HELP)
        return 1
    except StartupConfigError as e:
        print(f"Error: {e}")
        return 1

    loop = WatchLoop(config, compiler or LessCompiler())

    def _request_stop(signum: int, frame: Any) -> None:
        loop.stop()

    if config.run_once:
        print("Running less-watch-compiler once.")
    else:
        signal.signal(signal.SIGTERM, _request_stop)

    try:
        return loop.run()
    except LessWatchError as e:
        print(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        loop.stop()
        print("\nWatcher stopped.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
