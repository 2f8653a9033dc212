"""
ConfigCommand — View or set configuration

    gadgetmeta config                       # show effective config
    gadgetmeta config fetch.timeout         # show one value
    gadgetmeta config fetch.timeout 10      # set in project config
    gadgetmeta config pool.workers 16 --user
"""

from .base import BaseCommand


class ConfigCommand(BaseCommand):
    """Command for configuration management."""

    def show_config(self) -> int:
        self.write_json(self.config_manager.load().to_dict())
        return 0

    def get_config(self, key: str) -> int:
        value = self.config_manager.get(key)
        if value is None:
            self.error(f"Unknown config key: {key}")
            return 2
        self.out.write(f"{value}\n")
        return 0

    def set_config(self, key: str, value: str, scope: str = "project") -> int:
        error = self.config_manager.set(key, value, scope)
        if error:
            self.error(error)
            return 2
        self.out.write(f"Set {key} = {value} ({scope})\n")
        return 0


def register_parser(subparsers):
    """Register config command parser."""
    p = subparsers.add_parser('config', help='View or set configuration')
    p.add_argument('key', nargs='?', help='Dotted key (e.g., fetch.timeout)')
    p.add_argument('value', nargs='?', help='New value')
    p.add_argument('--user', action='store_true',
                   help='Apply to user config instead of project')
    return p


def handle(cli, args):
    """Handle config command dispatch."""
    command = ConfigCommand(cli)
    if args.key is None:
        return command.show_config()
    if args.value is None:
        return command.get_config(args.key)
    scope = "user" if args.user else "project"
    return command.set_config(args.key, args.value, scope)
