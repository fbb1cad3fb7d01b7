"""Interactive shell for loading, reloading and inspecting classes."""

from __future__ import annotations

import argparse
import logging
import readline  # noqa: F401 - enables line editing in input()
import sys
from pathlib import Path

from hotclass.system import ClassSystem, ClassSystemConfig
from hotclass.types import ClassRecord

HELP_TEXT = """\
Commands:
  load <Name>      Load a class, or reload it and its subclasses
  require <Name>   Load a class unless it is already loaded
  show <Name>      Show a class's ancestors, subclasses and members (loads it if needed)
  list             List every known class
  refresh          Reload every class whose source changed
  help             Show this help
  exit, quit       Leave the shell"""


def format_members(keys: list) -> str:
    """Format member keys for display, sorted with strings before integers."""
    if not keys:
        return "(none)"
    return ", ".join(str(k) for k in sorted(keys, key=lambda k: (not isinstance(k, str), str(k))))


def describe_class(record: ClassRecord) -> str:
    """Multi-line description of a class record."""
    lines = [f"class {record.full_name}"]
    ancestors = record.ancestors.names()
    lines.append(f"  ancestors:  {' -> '.join(ancestors) if ancestors else '(none)'}")
    lines.append(f"  subclasses: {format_members(list(record.subclasses))}")
    lines.append(f"  static:     {format_members(record.static.keys())}")
    lines.append(f"  methods:    {format_members(record.dispatch.keys())}")
    properties = [
        f"{key}{' (read-only)' if descriptor.read_only else ''}"
        for key, descriptor in record.properties.items()
    ]
    lines.append(f"  properties: {', '.join(properties) if properties else '(none)'}")
    lines.append(f"  loads:      {record.load_count}")
    return "\n".join(lines)


def execute_command(system: ClassSystem, line: str) -> str:
    """Execute one shell command and return its output.

    Raises:
        ValueError: For unknown commands or missing arguments.
        ClassSystemError: When loading a class fails.
    """
    parts = line.split()
    if not parts:
        return ""
    command, args = parts[0].lower(), parts[1:]

    if command == "help":
        return HELP_TEXT

    if command == "list":
        if not len(system.catalog):
            return "(no classes loaded)"
        rows = []
        for record in system.catalog:
            superclass = record.superclass
            rows.append(f"{record.full_name}" + (f" ({superclass.full_name})" if superclass else ""))
        return "\n".join(rows)

    if command == "refresh":
        reloaded = system.reload_modified()
        if not reloaded:
            return "(nothing changed)"
        return f"Reloaded: {', '.join(reloaded)}"

    if command in ("load", "require", "show"):
        if len(args) != 1:
            raise ValueError(f"Usage: {command} <Name>")
        name = args[0]
        if command == "load":
            existed = name in system.catalog
            system.load_class(name)
            return f"{'Reloaded' if existed else 'Loaded'} {name}"
        if command == "require":
            system.require_class(name)
            return f"Loaded {name}"
        return describe_class(system.reloader.lookup_or_create(name))

    raise ValueError(f"Unknown command '{parts[0]}'. Type 'help' for commands.")


def run_repl(system: ClassSystem) -> int:
    """Run the interactive shell."""
    print("hotclass shell")
    print(f"Class root: {system.config.class_root}")
    print("Type 'help' for commands, 'exit' to quit.\n")

    history_file = Path.home() / ".hotclass_history"
    try:
        readline.read_history_file(history_file)
    except FileNotFoundError:
        pass

    try:
        while True:
            try:
                line = input("hc> ").strip()
            except EOFError:
                print()
                break

            if not line:
                continue
            if line.lower() in ("exit", "quit"):
                break

            try:
                print(execute_command(system, line))
            except Exception as e:
                print(f"Error: {e}")
            print()
    except KeyboardInterrupt:
        print()
    finally:
        try:
            readline.write_history_file(history_file)
        except OSError:
            pass

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Interactive shell for hot-reloadable classes"
    )
    arg_parser.add_argument(
        "class_root",
        type=Path,
        nargs="?",
        default=Path("classes"),
        help="Directory holding the class bodies (default: ./classes)",
    )
    arg_parser.add_argument(
        "-c", "--command",
        type=str,
        help="Execute a single command and exit",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every load and link",
    )

    args = arg_parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.class_root.is_dir():
        print(f"Error: Class directory not found: {args.class_root}", file=sys.stderr)
        return 1

    system = ClassSystem(ClassSystemConfig(class_root=args.class_root.as_posix()))

    if args.command:
        try:
            print(execute_command(system, args.command))
            return 0
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    return run_repl(system)


if __name__ == "__main__":
    sys.exit(main())
