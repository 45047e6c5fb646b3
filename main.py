"""Command-line interface for the users service."""

from __future__ import annotations
import argparse
import logging
import sys
from typing import Sequence

from app.config import Settings, load_settings_from_env
from app.database import Database
from app.reports import filter_by_year
from app.seeds import seed_users

logger = logging.getLogger("usersapi.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Users service utilities")
    parser.add_argument(
        "--env",
        default=None,
        help="Configuration environment to use (default: USERS_API_ENV or development)",
    )
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", help="Create the users table")
    subparsers.add_parser("seed", help="Replace every user with the seed data")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP users service")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=3000,
        help="Port for the HTTP API (default: 3000)",
    )

    list_parser = subparsers.add_parser("list-users", help="Print the stored users")
    list_parser.add_argument(
        "--since-year",
        type=int,
        default=None,
        help="Only list users created during this year or later",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "init-db", "seed", "list-users"}

    # Global options come first; a bare option list without a subcommand means serve.
    index = 0
    while index < len(args_list):
        if args_list[index] == "--env":
            index += 2
        elif args_list[index].startswith("--env="):
            index += 1
        else:
            break
    rest = args_list[index:]

    if not rest:
        args_list = [*args_list[:index], "serve"]
    else:
        first = rest[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in rest for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = [*args_list[:index], "serve", *rest]

    return parser.parse_args(args_list)


def _initialise_database(settings: Settings) -> Database:
    database = Database(settings.database_path)
    database.initialize()
    logger.info("Database initialised at %s", settings.database_path)
    return database


def _serve(*, database: Database, host: str, port: int) -> None:
    from app.api import create_app
    import uvicorn

    logger.info("Starting users API on http://%s:%s", host, port)

    app = create_app(database=database)
    uvicorn.run(app, host=host, port=port, log_level="info")


def _list_users(database: Database, *, since_year: int | None = None) -> int:
    result = database.fetch_all()
    if result.error is not None:
        print(f"Failed to list users: {result.error}", file=sys.stderr)
        return 1

    users = result.rows
    if since_year is not None:
        users = filter_by_year(users, since_year)

    if not users:
        print("No users found.")
        return 0

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':>4}  {'Username':<24}  {'Email':<32}  Created")
    print("-" * 80)
    for user in users:
        created = user.created_at.strftime("%Y-%m-%d %H:%M:%S %Z")
        print(f"{user.id:>4}  {user.username:<24}  {user.email:<32}  {created}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    settings = load_settings_from_env(args.env)
    database = _initialise_database(settings)

    if args.command == "serve":
        _serve(database=database, host=args.host, port=args.port)
    elif args.command == "list-users":
        return _list_users(database, since_year=args.since_year)
    elif args.command == "seed":
        users = seed_users(database)
        print(f"Seeded {len(users)} user(s).")
    elif args.command == "init-db":
        # Only init-db applies the environment seed flag; seeding replaces every row.
        if settings.seed:
            seed_users(database)
        print("Database initialisation complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
