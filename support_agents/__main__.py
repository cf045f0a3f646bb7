"""Manage support agents from the command line.

Usage:
    # List grantable capabilities
    python -m support_agents caps

    # Add a host user account
    python -m support_agents add-user jane jane@example.com --caps list_users edit_users

    # Create a support agent from an existing user, or invite a new one
    python -m support_agents create --user-id 3 --caps wu_read_customers
    python -m support_agents create --username bob --email bob@example.com

    # List agents, change capabilities, check one, delete
    python -m support_agents list
    python -m support_agents grant 1 wu_read_customers wu_read_payments
    python -m support_agents check 1 wu_read_payments
    python -m support_agents delete 1
"""

import argparse
import json
import sys
from typing import Any

from dotenv import load_dotenv

from .core.config import Settings
from .plugin import SupportAgentsPlugin
from .utils.errors import SupportAgentsError
from .utils.logging_config import setup_logging_from_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="support_agents",
        description="Manage support agents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("caps", help="List grantable capabilities by group")

    user_parser = subparsers.add_parser("add-user", help="Add a user account")
    user_parser.add_argument("username", help="Login name")
    user_parser.add_argument("email", help="Email address")
    user_parser.add_argument("--password", help="Password")
    user_parser.add_argument("--display-name", default="", help="Display name")
    user_parser.add_argument("--caps", nargs="*", default=[], help="Capabilities held")
    user_parser.add_argument("--super-admin", action="store_true", help="Make a super admin")

    subparsers.add_parser("list", help="List support agents")

    create_parser = subparsers.add_parser("create", help="Create a support agent")
    create_parser.add_argument("--user-id", type=int, help="Existing user id")
    create_parser.add_argument("--username", help="New user's login name")
    create_parser.add_argument("--email", help="New user's email address")
    create_parser.add_argument("--password", help="New user's password")
    create_parser.add_argument("--caps", nargs="*", default=[], help="Capabilities to grant")
    create_parser.add_argument("--granted-by", type=int, help="Granting admin user id")

    grant_parser = subparsers.add_parser("grant", help="Replace an agent's capabilities")
    grant_parser.add_argument("agent_id", type=int, help="Support agent id")
    grant_parser.add_argument("caps", nargs="*", help="Capabilities to grant")
    grant_parser.add_argument("--granted-by", type=int, help="Granting admin user id")

    check_parser = subparsers.add_parser("check", help="Check an agent's capability")
    check_parser.add_argument("agent_id", type=int, help="Support agent id")
    check_parser.add_argument("capability", help="Capability key")

    delete_parser = subparsers.add_parser("delete", help="Delete a support agent")
    delete_parser.add_argument("agent_id", type=int, help="Support agent id")

    return parser


def run_command(plugin: SupportAgentsPlugin, args: argparse.Namespace) -> Any:
    """Execute a parsed command and return a JSON-serializable result."""
    if args.command == "caps":
        return {
            group: [cap.to_dict() for cap in caps]
            for group, caps in plugin.registry.all_capabilities().items()
        }

    if args.command == "add-user":
        user = plugin.users.create_user(
            args.username,
            args.email,
            password=args.password,
            display_name=args.display_name,
            capabilities=args.caps,
            is_super_admin=args.super_admin,
        )
        data = user.to_dict()
        data.pop("password_hash")
        return data

    if args.command == "list":
        return [row.to_dict() for row in plugin.list_table.rows()]

    if args.command == "create":
        request: dict[str, Any] = {
            "granted_capabilities": args.caps,
            "granted_by": args.granted_by,
        }
        if args.username or args.email:
            request.update(
                type="new", username=args.username, email=args.email, password=args.password
            )
        else:
            request.update(type="existing", user_id=args.user_id)
        return plugin.manager.create_support_agent(request).to_dict()

    if args.command == "grant":
        agent = plugin.manager.update_capabilities(
            args.agent_id, args.caps, granted_by=args.granted_by
        )
        return agent.to_dict()

    if args.command == "check":
        agent = plugin.manager.require_support_agent(args.agent_id)
        return {
            "agent_id": agent.id,
            "capability": args.capability,
            "allowed": plugin.resolver.has_capability(agent, args.capability),
            "effective_capabilities": sorted(plugin.resolver.effective_capabilities(agent)),
        }

    if args.command == "delete":
        agent = plugin.manager.delete_support_agent(args.agent_id)
        return {"deleted": agent.id, "user_id": agent.user_id}

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    load_dotenv()
    settings = settings or Settings()
    setup_logging_from_settings(settings, "cli")

    try:
        plugin = SupportAgentsPlugin(settings=settings)
        result = run_command(plugin, args)
    except SupportAgentsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
