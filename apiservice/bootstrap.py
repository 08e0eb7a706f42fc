"""Start-up: environment, configuration, logging, data access and servers."""

from __future__ import annotations

import argparse
import os
import sys
from datetime import datetime

from .config import Config, load_config
from .dal import initialize_dal
from .logger import LoggerConfig, new_logger
from .server import start_servers
from .utils import ENV_DEFAULT, ENV_KEY, get_env, is_empty
from .web import Deps


def get_environment() -> str:
    """Return the deployment environment, defaulting when ENV is blank."""
    env = get_env(ENV_KEY)
    return ENV_DEFAULT if is_empty(env) else env


def logger_config(env: str, config: Config) -> LoggerConfig:
    """Derive the logger identity from the configuration."""
    return LoggerConfig(
        env=env,
        app_name=config.app.name,
        app_version=config.app.version,
        debug_enabled=config.logger.debug,
        caller_skip_no=config.logger.caller_skip_no,
    )


def initialize(base_dir: str | os.PathLike[str] | None = None) -> None:
    """Load everything the service needs and run it until shutdown."""
    env = get_environment()
    config = load_config(env, base_dir)

    logger = new_logger(logger_config(env, config))
    logger.info("logger initialised ...")

    dal = initialize_dal(config)
    logger.info("data access layer initialised ...")

    start_servers(Deps(config=config, logger=logger, dal=dal))


def main(argv: list[str] | None = None) -> int:
    """Run the API server; exit with status 1 if it cannot start."""
    parser = argparse.ArgumentParser(
        prog="apiservice", description="Run the API server."
    )
    parser.parse_args(argv)
    try:
        initialize()
    except Exception as exc:
        stamp = datetime.now().strftime("%Y/%m/%d %H:%M:%S")
        print(f"{stamp} api server initialization failed: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    return 0


if __name__ == "__main__":
    sys.exit(main())