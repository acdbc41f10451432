"""
Command-line interface for sprest.

Small operational commands against one web, printing JSON to stdout:
- web: Title, url and id of the web
- subwebs: Title and url of the direct subwebs
- ensure-user: Resolve (and add if needed) a user by login name
- storage-get / storage-set / storage-remove: Tenant properties (storage entities)

Usage:
    sprest web
    sprest --site https://contoso.sharepoint.com/sites/dev subwebs
    sprest ensure-user "i:0#.f|membership|jane@contoso.com"
    sprest storage-set MyKey MyValue --description "Used by the intranet"

Environment Variables:
    SP_SITE_URL: Web to talk to (overridden by --site)
    SP_ACCESS_TOKEN: Bearer token for the Authorization header
    SP_TIMEOUT_SECONDS, SP_VERIFY_SSL, SP_USER_AGENT, SP_LOG_LEVEL, SP_LOG_FORMAT
"""

import argparse
import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from typing import Any

from sprest.client import SPClient
from sprest.config import ClientConfig, configure_logging, load_config
from sprest.transport.errors import SPHttpError

Command = Callable[[SPClient, argparse.Namespace], Awaitable[Any]]


def build_config(args: argparse.Namespace) -> ClientConfig:
    """
    Load configuration and apply command-line overrides.

    Configuration Priority:
        1. CLI arguments (--site, --timeout, --log-level)
        2. Environment variables (SP_*)
        3. Config file (--config, or config/client.ini)
    """
    cfg = load_config(getattr(args, "config", None))

    if getattr(args, "site", None):
        cfg.connection.site_url = args.site.rstrip("/")
    if getattr(args, "timeout", None) is not None:
        cfg.connection.timeout_seconds = args.timeout
    if getattr(args, "log_level", None):
        cfg.logging.level = args.log_level.upper()

    return cfg


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


# ============================================================================
# COMMANDS
# ============================================================================


async def cmd_web(sp: SPClient, args: argparse.Namespace) -> Any:
    return await sp.web.select("Title", "Url", "Id").get()


async def cmd_subwebs(sp: SPClient, args: argparse.Namespace) -> Any:
    return await sp.web.webs.select("Title", "Url").get()


async def cmd_ensure_user(sp: SPClient, args: argparse.Namespace) -> Any:
    result = await sp.web.ensure_user(args.login_name)
    return result.data


async def cmd_storage_get(sp: SPClient, args: argparse.Namespace) -> Any:
    return await sp.web.get_storage_entity(args.key)


async def cmd_storage_set(sp: SPClient, args: argparse.Namespace) -> Any:
    await sp.web.set_storage_entity(
        args.key, args.value, description=args.description, comments=args.comments
    )
    return {"key": args.key, "status": "set"}


async def cmd_storage_remove(sp: SPClient, args: argparse.Namespace) -> Any:
    await sp.web.remove_storage_entity(args.key)
    return {"key": args.key, "status": "removed"}


async def run_command(cfg: ClientConfig, command: Command, args: argparse.Namespace) -> Any:
    async with SPClient(cfg) as sp:
        return await command(sp, args)


def execute(args: argparse.Namespace) -> int:
    """
    Run the selected command and print its result.

    Returns:
        0 on success, 1 on configuration or HTTP errors
    """
    try:
        cfg = build_config(args)
        configure_logging(cfg.logging)
        result = asyncio.run(run_command(cfg, args.func, args))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except SPHttpError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_json(result)
    return 0


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sprest",
        description="Query and manage a SharePoint web over its REST API",
    )
    parser.add_argument("--site", type=str, help="Web url (default: SP_SITE_URL or config file)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument("--config", type=str, help="Path to an INI config file")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    web_parser = subparsers.add_parser("web", help="Show title, url and id of the web")
    web_parser.set_defaults(func=cmd_web)

    subwebs_parser = subparsers.add_parser("subwebs", help="List the direct subwebs")
    subwebs_parser.set_defaults(func=cmd_subwebs)

    ensure_parser = subparsers.add_parser(
        "ensure-user",
        help="Resolve a user by login name, adding it to the web if needed",
    )
    ensure_parser.add_argument("login_name", help="Claims login name")
    ensure_parser.set_defaults(func=cmd_ensure_user)

    get_parser = subparsers.add_parser("storage-get", help="Read a tenant property")
    get_parser.add_argument("key")
    get_parser.set_defaults(func=cmd_storage_get)

    set_parser = subparsers.add_parser(
        "storage-set",
        help="Write a tenant property",
        description="Write a tenant property. The site must be the tenant app catalog.",
    )
    set_parser.add_argument("key")
    set_parser.add_argument("value")
    set_parser.add_argument("--description", default="", help="Property description")
    set_parser.add_argument("--comments", default="", help="Property comments")
    set_parser.set_defaults(func=cmd_storage_set)

    remove_parser = subparsers.add_parser("storage-remove", help="Remove a tenant property")
    remove_parser.add_argument("key")
    remove_parser.set_defaults(func=cmd_storage_remove)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return execute(args)


if __name__ == "__main__":
    sys.exit(main())
