"""venvkeeper CLI - manage the venv, its packages and pip from the shell"""
from __future__ import annotations  # Python 3.6+ compatibility

import argparse
import sys
from typing import List, Optional

from .common_utils import print_header, safe_print
from .config import Settings
from .core import VenvKeeper
from .errors import VenvKeeperError
from .execution import process_context
from .i18n import SUPPORTED_LANGUAGES, _
from .log import configure_logging


def get_version():
    from venvkeeper import __version__

    return __version__


def build_parser() -> argparse.ArgumentParser:
    epilog_parts = [
        _("🛠️ Examples:"),
        _("  venvkeeper ensure requests==2.31.0"),
        _("  venvkeeper install funppy==0.5.0"),
        _("  venvkeeper assert funppy 0.5.0"),
        _("  venvkeeper --python ~/.venvkeeper/venv/bin/python3 uninstall funppy"),
        _("  venvkeeper shell 'echo $PATH'"),
    ]
    parser = argparse.ArgumentParser(
        prog="venvkeeper",
        description=_("🐍 Bootstrap and maintain a Python 3 venv and its packages"),
        formatter_class=argparse.RawTextHelpFormatter,
        epilog="\n".join(epilog_parts),
    )
    parser.add_argument(
        "-v", "--version", action="version", version=_("%(prog)s {}").format(get_version())
    )
    parser.add_argument(
        "--python",
        metavar="PATH",
        help=_("Interpreter to operate on (default: the active interpreter)"),
    )
    parser.add_argument(
        "--lang",
        metavar="CODE",
        choices=sorted(SUPPORTED_LANGUAGES),
        help=_("Override the display language for this command"),
    )
    parser.add_argument(
        "--verbose",
        "-V",
        action="store_true",
        help=_("Enable verbose output for detailed debugging"),
    )
    subparsers = parser.add_subparsers(dest="command", help=_("Available commands:"))

    ensure_parser = subparsers.add_parser(
        "ensure", help=_("Create or reuse the venv and print its interpreter")
    )
    ensure_parser.add_argument("--venv", metavar="DIR", help=_("Venv directory"))
    ensure_parser.add_argument("packages", nargs="*", help=_("Packages to pre-install"))

    assert_parser = subparsers.add_parser(
        "assert", help=_("Check that a package is importable (and at a version)")
    )
    assert_parser.add_argument("name", help=_("Import name of the package"))
    assert_parser.add_argument("version", nargs="?", help=_("Required version"))

    install_parser = subparsers.add_parser("install", help=_("Install packages"))
    install_parser.add_argument(
        "packages", nargs="+", help=_('Packages to install (e.g., "funppy==0.5.0")')
    )

    uninstall_parser = subparsers.add_parser("uninstall", help=_("Uninstall packages"))
    uninstall_parser.add_argument("packages", nargs="+", help=_("Packages to uninstall"))

    subparsers.add_parser("list", help=_("List installed packages"))
    subparsers.add_parser("install-pip", help=_("Install pip into the interpreter"))
    subparsers.add_parser("uninstall-pip", help=_("Remove pip from the interpreter"))

    run_parser = subparsers.add_parser(
        "run", help=_("Run python -m MODULE with the active interpreter")
    )
    run_parser.add_argument("module", help=_("Module to run"))
    run_parser.add_argument("args", nargs=argparse.REMAINDER, help=_("Module arguments"))

    shell_parser = subparsers.add_parser(
        "shell", help=_("Run a command line through the platform shell")
    )
    shell_parser.add_argument("command_line", help=_("Command line to run"))

    exec_parser = subparsers.add_parser(
        "exec", help=_("Run a program with its directory added to PATH")
    )
    exec_parser.add_argument("program", help=_("Program to run"))
    exec_parser.add_argument("args", nargs=argparse.REMAINDER, help=_("Program arguments"))
    return parser


def _dispatch(keeper: VenvKeeper, args) -> int:
    python = args.python
    if python:
        keeper.context.interpreter = python

    if args.command == "ensure":
        interpreter = keeper.ensure_interpreter(args.venv, args.packages)
        safe_print(interpreter)
        return 0

    if args.command == "assert":
        status = keeper.assert_package(python, args.name, args.version)
        if status.installed_version:
            safe_print(_("✅ {} {} is ready").format(status.name, status.installed_version))
        else:
            safe_print(_("✅ {} is ready").format(status.name))
        return 0

    if args.command == "install":
        for spec in args.packages:
            status = keeper.install_package(python, spec)
            safe_print(_("✅ {} {} installed").format(status.name, status.installed_version))
        return 0

    if args.command == "uninstall":
        for spec in args.packages:
            keeper.uninstall_package(python, spec)
            safe_print(_("✅ {} uninstalled").format(spec))
        return 0

    if args.command == "list":
        return 0 if keeper.list_packages(python) else 1

    if args.command == "install-pip":
        keeper.install_pip(python)
        safe_print(_("✅ pip is installed"))
        return 0

    if args.command == "uninstall-pip":
        keeper.uninstall_pip(python)
        safe_print(_("✅ pip is removed"))
        return 0

    if args.command == "run":
        keeper.run_module(args.module, *args.args)
        return 0

    if args.command == "shell":
        exit_code, error = keeper.run_shell(args.command_line)
        return exit_code

    if args.command == "exec":
        keeper.run_command(args.program, *args.args)
        return 0

    return 2


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        print_header(_("venvkeeper {}").format(get_version()))
        parser.print_help()
        return 1

    settings = Settings()
    lang = args.lang or settings.language
    if lang:
        _.set_language(lang)
    configure_logging(verbose=args.verbose)

    keeper = VenvKeeper(context=process_context(), settings=settings)
    try:
        return _dispatch(keeper, args)
    except VenvKeeperError as e:
        safe_print(_("❌ {}").format(e), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        safe_print(_("\n⚠️  Command cancelled by user (Ctrl+C)"), file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
