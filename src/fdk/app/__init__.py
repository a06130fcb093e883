from .cli import LauncherError, build_parser, load_callable, main, parse_args, run

__all__ = ["LauncherError", "build_parser", "load_callable", "main", "parse_args", "run"]
