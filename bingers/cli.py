import argparse
import sys

from . import __version__
from .core import App
from .display import DisplayManager
from .errors import BingersError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bingers",
        description="Manage your TV shows from the command line",
        epilog="CREDITS: Data provided by TVmaze.com",
    )
    parser.add_argument("--debug", "-d", action="store_true")
    parser.add_argument("--config", help="Config file path")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    add_parser = subparsers.add_parser("add", help="Add TV show")
    add_parser.add_argument("tv_show", metavar="SHOW")
    add_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    remove_parser = subparsers.add_parser("remove", help="Remove TV show")
    remove_parser.add_argument("tv_show", metavar="SHOW")
    remove_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    list_parser = subparsers.add_parser(
        "list",
        help="List TV shows or episodes",
        description="List TV shows or episodes. When no flag is given, shows will be listed.",
    )
    list_group = list_parser.add_mutually_exclusive_group()
    list_group.add_argument("--shows", "-s", action="store_true", help="List shows (default)")
    list_group.add_argument("--episodes", "-e", action="store_true", help="List unwatched episodes")

    watched_parser = subparsers.add_parser(
        "watched",
        help="Mark episode as watched",
        description="Mark episode as watched. If not specified otherwise, will mark the next "
                    "unwatched episode as watched. Use --season and --episode to override.",
    )
    watched_parser.add_argument("tv_show", metavar="SHOW")
    watched_parser.add_argument(
        "--season", "-s", type=int,
        help="Specify season. If used without --episode, will mark whole season as watched.",
    )
    watched_parser.add_argument("--episode", "-e", type=int, help="Specify episode")

    update_parser = subparsers.add_parser("update", help="Update TV shows and episodes")
    update_parser.add_argument("--force", "-f", action="store_true", help="Force update of all shows and episodes")

    return parser


def run(args: argparse.Namespace, display: DisplayManager):
    app = App(
        config_path=args.config,
        debug=args.debug,
        assume_yes=getattr(args, "yes", False),
        display=display,
    )

    if args.command == "add":
        app.add_show(args.tv_show)
    elif args.command == "remove":
        app.remove_show(args.tv_show)
    elif args.command == "list":
        if args.episodes:
            app.list_episodes()
        else:
            app.list_shows()
    elif args.command == "watched":
        app.mark_as_watched(args.tv_show, args.season, args.episode)
    elif args.command == "update":
        app.update(force=args.force)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        print(parser.format_usage())
        print("For more information try --help")
        return 0

    if args.command == "watched" and args.episode is not None and args.season is None:
        parser.error("--episode requires --season")

    display = DisplayManager()
    try:
        run(args, display)
    except BingersError as e:
        display.error(str(e))
        return 1
    except KeyboardInterrupt:
        display.error("Aborted")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
