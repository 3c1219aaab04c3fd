import logging

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fswatcher import ConfigError, __version__
from fswatcher import config
from fswatcher.dispatcher import EventDispatcher
from fswatcher.lifecycle import WatchLifecycle
from fswatcher.logger import parse_level, setup_logger
from fswatcher.sources import ProcessSignals, WatchdogSource

LOGGER_NAME = "fswatcher"
LOG_LEVELS = ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"]

logger = logging.getLogger(LOGGER_NAME)


def print_config(watch_config, settings, config_path=None):
    """Print the resolved configuration as a table."""
    table = Table(title="FSWatcher Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")
    table.add_row("Config file", escape(str(config_path or "-")))
    table.add_row("Path", escape(watch_config.path))
    table.add_row("Recursive", str(watch_config.recursive))
    table.add_row("Ignores", escape(", ".join(watch_config.ignore_patterns)) or "-")
    table.add_row("Show ignored", str(watch_config.show_ignored))
    table.add_row("Polling", str(settings["polling"]))
    table.add_row("Log level", str(settings["log_level"]).upper())
    table.add_row("Log dir", escape(str(settings["log_dir"] or "-")))
    Console().print(table)


def run_watch(watch_config, source, signals=None, sink=None):
    """
    Watch until a shutdown signal stops the lifecycle.

    Args:
        watch_config (WatchConfig): Resolved watch settings.
        source (WatchSource): Backend delivering raw notifications.
        signals (ShutdownSignals): Backend reporting termination requests.
        sink: Object with ``log(level, msg)``; defaults to the fswatcher logger.

    Returns:
        int: The process exit code.
    """
    logger.info("Watching Path: %s, Recursive: %s", watch_config.path, watch_config.recursive)
    # Logged even when no patterns are configured.
    logger.info("Ignoring: %s", ", ".join(watch_config.ignore_patterns))
    logger.info("Ignored files are visible on %s", "INFO" if watch_config.show_ignored else "TRACE")

    dispatcher = EventDispatcher(watch_config, sink if sink is not None else logger)
    lifecycle = WatchLifecycle(source, signals)
    lifecycle.start(watch_config, dispatcher.handle, dispatcher.report_dropped)
    logger.info("Watcher started, press CTRL-C to exit.")
    lifecycle.wait_until_stopped()
    return 0


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="fswatcher")
@click.option("--path", "-p", default=None, help="Directory path to watch.")
@click.option(
    "--ignores",
    "-i",
    multiple=True,
    help=(
        "File/directory regex to ignore. Give -i once per pattern (-i a -i b). "
        "Uses regex search against the absolute path."
    ),
)
@click.option("--no-recursive", is_flag=True, help="Disables scanning of sub directories.")
@click.option(
    "--show-ignored",
    is_flag=True,
    help="Ignored files are normally only shown at TRACE level. This option raises them to INFO.",
)
@click.option("--config", "-c", "config_path", default=None, help="Path to a TOML or YAML configuration file.")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging level (default: INFO).",
)
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.option("--log-dir", default=None, help="Also write the log to DIR/fswatcher.log.")
@click.option("--polling", is_flag=True, help="Poll the directory instead of using OS notifications.")
@click.option("--show-config", is_flag=True, help="Show the resolved configuration and exit.")
def watch(path, ignores, no_recursive, show_ignored, config_path, log_level, debug, log_dir, polling, show_config):
    """
    FSWatcher: log every change under a directory until interrupted.
    """
    file_config, resolved_config_path = config.load_config(config_path)
    settings = config.merge_settings(
        config.settings_from_file(file_config, resolved_config_path),
        path=path,
        ignores=ignores or None,
        recursive=False if no_recursive else None,
        show_ignored=True if show_ignored else None,
        polling=True if polling else None,
        log_level="DEBUG" if debug else log_level,
        log_dir=log_dir,
    )

    setup_logger(LOGGER_NAME, settings["log_dir"], level=parse_level(settings["log_level"]))

    watch_config = config.build_watch_config(
        settings["path"],
        recursive=settings["recursive"],
        ignores=settings["ignores"],
        show_ignored=settings["show_ignored"],
    )

    if show_config:
        print_config(watch_config, settings, resolved_config_path)
        return 0

    return run_watch(
        watch_config,
        source=WatchdogSource(use_polling=settings["polling"]),
        signals=ProcessSignals(),
    )


def main(argv=None):
    """
    Run the command line and return its exit code.

    0 on graceful shutdown or help/version output, 1 on any configuration
    or argument error.
    """
    setup_logger(LOGGER_NAME)
    logger.info("Program starting")
    try:
        exit_code = watch.main(args=argv, prog_name="fswatcher", standalone_mode=False)
    except click.ClickException as e:
        e.show()
        exit_code = 1
    except click.Abort:
        click.echo("Aborted!", err=True)
        exit_code = 1
    except ConfigError as e:
        logger.error("%s", e)
        exit_code = 1
    if exit_code is None:
        exit_code = 0

    logger.info("Program finished with exitcode %s", exit_code)
    return exit_code


def run():
    raise SystemExit(main())


if __name__ == "__main__":
    run()
