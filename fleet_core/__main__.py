#!/usr/bin/env python3

import os
import sys
import argparse
import logging.config
from typing import Optional, Union

import uvicorn
import alembic.command
import alembic.config
import fastapi
import sqlalchemy.exc

from fleet_core import settings as _settings
from fleet_core.api.api import create_app
from fleet_core.persistence import database, models


APP_IMPORT_STRING: str = "fleet_core.api.api:api.app"
"""
import string of the application used by uvicorn when it has to spawn the app on its own
"""


def get_parser(program: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=program)

    commands = parser.add_subparsers(
        description="Available sub-commands: init, run, auto",
        dest="command",
        required=True,
        metavar="<command>",
        help="what to do"
    )

    parser_init = commands.add_parser(
        "init",
        description="Write the config file (if missing) and bring the database schema up to date"
    )
    parser_init.add_argument(
        "--database",
        type=str,
        metavar="url",
        help="SQLAlchemy URL of the database used for the new config file"
    )
    parser_init.add_argument(
        "--no-migrations",
        action="store_true",
        help="Create missing tables directly instead of running the alembic migrations"
    )

    parser_run = commands.add_parser(
        "run",
        description="Serve the fleet core REST API with the 'uvicorn' ASGI server"
    )
    parser_run.add_argument("--host", type=str, metavar="host", help="Listen on this host instead of the configured one")
    parser_run.add_argument("--port", type=int, metavar="port", help="Listen on this port instead of the configured one")
    parser_run.add_argument(
        "--config",
        type=str,
        metavar="path",
        default="config.json",
        help="Path of the JSON config file (default: 'config.json')"
    )
    parser_run.add_argument("--debug", action="store_true", help="Lower the level of every log handler to DEBUG")
    parser_run.add_argument("--debug-sql", action="store_true", help="Echo the SQL statements issued by SQLAlchemy")
    parser_run.add_argument("--reload", action="store_true", help="Restart the server when source files change")
    parser_run.add_argument(
        "--workers",
        type=int,
        default=None,
        metavar="n",
        help="Spawn n worker processes (can't be combined with --reload)"
    )
    parser_run.add_argument("--no-access-log", action="store_true", help="Don't write the uvicorn access log")
    parser_run.add_argument("--use-colors", action="store_true", help="Colorize the log output of uvicorn")
    parser_run.add_argument(
        "--root-path",
        type=str,
        default="",
        metavar="p",
        help="Path prefix of the API when it's served behind a proxy"
    )

    parser_auto = commands.add_parser(
        "auto",
        description="Set up the config file and database from environment variables, then serve the API"
    )
    parser_auto.add_argument("--host", type=str, metavar="host", help="Listen on this host, ignoring config and env")
    parser_auto.add_argument("--port", type=int, metavar="port", help="Listen on this port, ignoring config and env")
    parser_auto.add_argument("--debug-sql", action="store_true", help="Echo the SQL statements issued by SQLAlchemy")
    parser_auto.add_argument(
        "--root-path",
        type=str,
        default="",
        metavar="p",
        help="Path prefix of the API when it's served behind a proxy"
    )

    return parser


def run_migrations(connection: str):
    """
    Upgrade the database schema to the latest alembic revision
    """

    config = alembic.config.Config()
    config.set_main_option("script_location", os.path.join(os.path.dirname(database.__file__), "alembic"))
    config.set_main_option("sqlalchemy.url", connection)
    alembic.command.upgrade(config, "head")


def export_settings(settings: _settings.Settings, config_path: str):
    """
    Make the settings available to app instances created by uvicorn in other processes

    Those processes build their app from ``APP_IMPORT_STRING`` and read the
    settings on their own. The config file path and the sections that may have
    been changed by command-line arguments are therefore put into the environment,
    which takes precedence over the config file.
    """

    os.environ["CONFIG_PATH"] = os.path.abspath(config_path)
    os.environ["DATABASE"] = settings.database.model_dump_json()
    os.environ["LOGGING"] = settings.logging.model_dump_json()


def _serve(app: Union[str, fastapi.FastAPI], settings: _settings.Settings, host: str, port: int, **kwargs) -> int:
    logging.getLogger("fleet_core").info(f"Server running at host {host} port {port}")
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_config=settings.logging.model_dump(),
        proxy_headers=True,
        **kwargs
    )
    return 0


def run_server(args: argparse.Namespace) -> int:
    if args.debug:
        print("The debug mode should not be used in production!", file=sys.stderr)
    if args.reload and args.workers is not None and args.workers > 1:
        print("The options --reload and --workers can't be combined.", file=sys.stderr)
        return 1

    _settings.CONFIG_PATHS.insert(0, args.config)
    try:
        settings = _settings.Settings()
    except ValueError:
        print("The configuration is invalid. Please correct the errors above.", file=sys.stderr)
        raise

    if args.debug:
        settings.logging.root["level"] = "DEBUG"
        for handler in settings.logging.handlers.values():
            handler["level"] = "DEBUG"
    if args.debug_sql:
        settings.database.debug_sql = True

    if args.reload or (args.workers or 1) > 1:
        export_settings(settings, args.config)
        app = APP_IMPORT_STRING
    else:
        app = create_app(settings=settings)

    return _serve(
        app,
        settings,
        args.host or settings.server.host,
        args.port or settings.server.port,
        reload=args.reload,
        workers=args.workers,
        log_level="debug" if args.debug else "info",
        access_log=not args.no_access_log,
        use_colors=args.use_colors,
        root_path=args.root_path
    )


def _setup_config(db: Optional[str] = None, init: bool = False) -> _settings.Settings:
    path = _settings.find_config_file()
    if path is None:
        if init:
            print("No config file found. Creating a default one now.")
        _settings.store_configuration(_settings.get_default_core_config(db))
    elif init:
        print(
            f"Using the existing config file {path!r}. Remove it and clear "
            f"the database before running this command for a fresh setup."
        )

    settings = _settings.Settings()
    if db:
        settings.database.connection = db
    return settings


def init_project(args: argparse.Namespace, no_hint: bool = False) -> int:
    settings = _setup_config(args.database or _settings.get_db_from_env(), not no_hint)
    if not args.no_migrations:
        run_migrations(settings.database.connection)
    database.init(settings.database.connection, settings.database.debug_sql, create_all=args.no_migrations)

    with database.get_new_session() as session:
        try:
            count = session.query(models.Aircraft).count()
        except sqlalchemy.exc.DatabaseError:
            print(
                "The database has no 'aircraft' table. Run the 'init' command "
                "without '--no-migrations' to create the schema.",
                file=sys.stderr
            )
            return 1

    if not no_hint:
        print(f"Done. The database contains {count} aircraft.")
    return 0


def run_in_auto_mode(args: argparse.Namespace) -> int:
    db = _settings.get_db_from_env()
    if db is None and _settings.find_config_file() is None:
        print(
            "The auto mode needs a config file or one of the environment "
            "variables 'DATABASE__CONNECTION' or 'DATABASE_CONNECTION'!",
            file=sys.stderr
        )
        return 1
    try:
        settings = _setup_config(db, False)
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    logging.config.dictConfig(settings.logging.model_dump())
    run_migrations(settings.database.connection)

    if args.debug_sql:
        settings.database.debug_sql = True
    return _serve(
        create_app(settings=settings, configure_logging=False),
        settings,
        args.host or settings.server.host,
        args.port or settings.server.port,
        root_path=args.root_path
    )


if __name__ == '__main__':
    program_name = sys.argv[0] if not sys.argv[0].endswith("__main__.py") else "fleet_core"
    namespace = get_parser(program_name).parse_args(sys.argv[1:])

    command_functions = {
        "run": run_server,
        "init": init_project,
        "auto": run_in_auto_mode
    }
    sys.exit(command_functions[namespace.command](namespace))
