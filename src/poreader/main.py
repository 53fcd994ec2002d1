from __future__ import annotations

import argparse
import builtins
import configparser
import contextlib
import functools
import json
import logging
import os.path
import sys
import time
import traceback
from pathlib import Path
from typing import (
  IO, Any, Callable, Generator, Mapping, NoReturn, TypeVar, overload
)

from tqdm import tqdm

from . import BINARY_NAME
from .catalogue import (
  CatalogueError, Message, MessageEmpty, MessagePlural, MessageSingular, Origin,
  OriginDeveloper, OriginTag, OriginTranslator, State, Unit
)
from .cli import (
  ArgumentError, ArgumentNamespace, ArgumentParser, ArgumentParserExit, catalogue_path,
  json_indent
)
from .gettext_po import escape
from .reader import PoReader
from .utils import unreachable

_T = TypeVar("_T")
_UNSET: Any = object()

logger = logging.getLogger(__name__)


def run_main() -> NoReturn:
  bin_name = BINARY_NAME
  try:
    bin_name = os.path.basename(sys.argv[0])
    exit_code = _Main().main(sys.argv[1:], bin_name)
  except ArgumentError as err:
    parser: ArgumentParser = getattr(err, "parser")
    parser.exit_on_error = True
    parser.error(str(err))
  except ArgumentParserExit as err:
    sys.exit(err.code)
  except Exception:
    print(f"{bin_name}: error:\n\n{traceback.format_exc()}", file=sys.stderr)
    sys.exit(1)
  else:
    sys.exit(exit_code)


def main(args: list[str], bin_name: str = BINARY_NAME) -> int:
  return _Main().main(args, bin_name)


class _Main:

  def main(self, raw_args: list[str], bin_name: str) -> int:
    self.arg_parser: ArgumentParser = self.build_arg_parser(bin_name)

    try:
      self.cli_args: ArgumentNamespace = self.arg_parser.parse_args(raw_args)
    except (ArgumentError, ArgumentParserExit) as err:
      setattr(err, "parser", self.arg_parser)
      raise err

    self.settings: Settings = Settings(self.cli_args.config)
    logging.basicConfig(
      level=self.settings.get_conf("logging", "level", self.settings.get_conf_log_level),
      format=self.settings.get_conf("logging", "format", raw=True),
    )

    self.encoding: str = self.settings.get_conf("reader", "encoding")
    self.progress_bars: bool = self.cli_args.progress_bars

    with self.wrap_print_for_tqdm():
      start_time = time.perf_counter()
      exit_code: int = self.cli_args.command_fn()
      elapsed_time = time.perf_counter() - start_time
      logger.info("Done in %.2fs", elapsed_time)
      return exit_code

  def build_arg_parser(self, bin_name: str) -> ArgumentParser:
    parser = ArgumentParser(prog=bin_name, exit_on_error=False)

    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--progress-bars", action=argparse.BooleanOptionalAction, default=True)

    # Empty help strings are necessary for subparsers to show up in help.
    subparsers = parser.add_subparsers(required=True, metavar="COMMAND")

    subparser = subparsers.add_parser("dump", help="", exit_on_error=False)
    subparser.set_defaults(command_fn=self.cmd_dump)
    subparser.add_argument("file", type=catalogue_path)
    subparser.add_argument("--indent", type=json_indent, default=None)

    subparser = subparsers.add_parser("list", help="", exit_on_error=False)
    subparser.set_defaults(command_fn=self.cmd_list)
    subparser.add_argument("file", type=catalogue_path)

    subparser = subparsers.add_parser("stats", help="", exit_on_error=False)
    subparser.set_defaults(command_fn=self.cmd_stats)
    subparser.add_argument("files", type=catalogue_path, nargs="+")

    subparser = subparsers.add_parser("check", help="", exit_on_error=False)
    subparser.set_defaults(command_fn=self.cmd_check)
    subparser.add_argument("files", type=catalogue_path, nargs="+")

    return parser

  def open_reader(self, path: Path) -> PoReader:
    logger.debug("Opening %r", str(path))
    return PoReader.open(path, encoding=self.encoding)

  def report_error(self, path: Path, err: CatalogueError) -> None:
    print(f"{path}:{err.line}: {err.message}", file=sys.stderr)

  def cmd_dump(self) -> int:
    path: Path = self.cli_args.file
    indent: int | None = self.cli_args.indent
    if indent is None:
      indent = self.settings.get_conf("output", "json_indent", int)

    try:
      with self.open_reader(path) as reader:
        data = {
          "header": reader.header,
          "target_language": str(reader.target_language),
          "plurals": [count.name for count in reader.plurals],
          "units": [unit_to_json(unit) for unit in reader],
        }
    except CatalogueError as err:
      self.report_error(path, err)
      return 1

    write_json(sys.stdout, data, indent=indent)
    sys.stdout.write("\n")
    sys.stdout.flush()
    return 0

  def cmd_list(self) -> int:
    path: Path = self.cli_args.file
    try:
      with self.open_reader(path) as reader:
        for unit in reader:
          print(format_unit_line(unit))
    except CatalogueError as err:
      self.report_error(path, err)
      return 1
    return 0

  def cmd_stats(self) -> int:
    files: list[Path] = self.cli_args.files
    exit_code = 0
    with tqdm(
      files,
      miniters=1,
      leave=False,
      desc="Parsed catalogues",
      disable=not self.progress_bars,
    ) as progress:
      for path in progress:
        counts: dict[State, int] = {state: 0 for state in State}
        obsolete_count = 0
        try:
          with self.open_reader(path) as reader:
            target_language = reader.target_language
            for unit in reader:
              if unit.obsolete:
                obsolete_count += 1
              else:
                counts[unit.state] += 1
        except CatalogueError as err:
          self.report_error(path, err)
          exit_code = 1
          continue

        total = sum(counts.values())
        print(
          f"{path}: {str(target_language) or '-'}: {total} units, " + ", ".join(
            f"{counts[state]} {state.name.lower().replace('_', ' ')}"
            for state in sorted(State, reverse=True)
          ) + f", {obsolete_count} obsolete"
        )
    return exit_code

  def cmd_check(self) -> int:
    files: list[Path] = self.cli_args.files
    failed_count = 0
    with tqdm(
      files,
      miniters=1,
      leave=False,
      desc="Checked catalogues",
      disable=not self.progress_bars,
    ) as progress:
      for path in progress:
        try:
          with self.open_reader(path) as reader:
            for _ in reader:
              pass
        except CatalogueError as err:
          self.report_error(path, err)
          failed_count += 1

    print(f"{len(files) - failed_count}/{len(files)} catalogues are well-formed")
    return 1 if failed_count > 0 else 0

  @contextlib.contextmanager
  def wrap_print_for_tqdm(self) -> Generator[None, None, None]:
    if not self.progress_bars:
      yield
      return

    old_print = builtins.print
    try:

      @functools.wraps(old_print)
      def new_print(*args: Any, **kwargs: Any) -> None:
        with tqdm.external_write_mode(kwargs.get("file", None)):
          old_print(*args, **kwargs)

      builtins.print = new_print
      yield

    finally:
      builtins.print = old_print


class Settings:

  # NOTE: Field references are resolved lazily by ConfigParser, at the moment
  # when they are accessed, so `${...}` references between options follow
  # overrides from the config files.
  DEFAULT_CONFIG: dict[str, dict[str, str]] = {
    "reader": {
      "encoding": "utf-8",
    },
    "output": {
      "json_indent": "2",
    },
    "logging": {
      "level": "WARNING",
      "format": "%(levelname)s: %(name)s: %(message)s",
    },
  }

  CONFIG_FILE_NAMES = ("poreader.ini", "poreader.local.ini")

  def __init__(self, config_file: Path | None = None, root_dir: Path | None = None) -> None:
    self.root_dir: Path = (root_dir if root_dir is not None else Path.cwd()).resolve()

    self._config = configparser.ConfigParser(
      interpolation=configparser.ExtendedInterpolation(),
      delimiters=("=",),
      comment_prefixes=(";", "#"),
    )
    self._config.optionxform = lambda optionstr: optionstr
    self._config.read_dict(self.DEFAULT_CONFIG)

    if config_file is not None:
      # An explicitly requested file must exist.
      with config_file.open("r") as file:
        self._config.read_file(file, file.name)
      logger.debug("Loaded config from %r", str(config_file))
    else:
      for filename in self.CONFIG_FILE_NAMES:
        file_path = self.root_dir / filename
        try:
          file = file_path.open("r")
        except FileNotFoundError:
          continue
        with file:
          self._config.read_file(file, file.name)
        logger.debug("Loaded config from %r", str(file_path))

  @overload
  def get_conf(self, section: str, option: str, *, raw: bool = ..., vars: Mapping[str, str] | None = ...) -> str:  # yapf: disable
    ...

  @overload
  def get_conf(self, section: str, option: str, *, raw: bool = ..., vars: Mapping[str, str] | None = ..., fallback: _T = ...) -> str | _T:  # yapf: disable
    ...

  @overload
  def get_conf(self, section: str, option: str, type_conv: Callable[[str], _T], *, raw: bool = ..., vars: Mapping[str, str] | None = ..., fallback: _T = ...) -> _T:  # yapf: disable
    ...

  def get_conf(
    self,
    section: str,
    option: str,
    type_conv: Callable[[str], _T] | None = None,
    *,
    raw: bool = False,
    vars: Mapping[str, str] | None = None,
    fallback: _T = _UNSET,
  ) -> str | _T:
    try:
      value = self._config.get(section, option, raw=raw, vars=vars)
    except (configparser.NoSectionError, configparser.NoOptionError):
      if fallback is _UNSET:
        raise
      return fallback
    try:
      return type_conv(value) if type_conv is not None else value
    except Exception as err:
      raise ValueError(
        f"Value of option {option!r} in section {section!r} is invalid: {value!r}"
      ) from err

  def get_conf_log_level(self, s: str) -> int:
    level = logging.getLevelName(s.strip().upper())
    if not isinstance(level, int):
      raise ValueError(f"unknown log level: {s!r}")
    return level


def message_to_json(message: Message) -> Any:
  if isinstance(message, MessageEmpty):
    return None
  elif isinstance(message, MessageSingular):
    return message.text
  elif isinstance(message, MessagePlural):
    return {count.name.lower(): text for count, text in message.variants.items()}
  else:
    unreachable()


def origin_to_json(origin: Origin) -> str:
  if isinstance(origin, OriginDeveloper):
    return "developer"
  elif isinstance(origin, OriginTranslator):
    return "translator"
  elif isinstance(origin, OriginTag):
    return f"tag:{origin.name}"
  else:
    unreachable()


def unit_to_json(unit: Unit) -> dict[str, Any]:
  return {
    "context": unit.context,
    "source": message_to_json(unit.source),
    "target": message_to_json(unit.target),
    "prev_context": unit.prev_context,
    "prev_source": message_to_json(unit.prev_source),
    "notes": [{"origin": origin_to_json(origin), "text": text} for origin, text in unit.notes],
    "locations": list(unit.locations),
    "flags": list(unit.flags),
    "state": unit.state.name.lower(),
    "obsolete": unit.obsolete,
  }


def format_message(message: Message) -> str:
  if isinstance(message, MessageEmpty):
    return "-"
  elif isinstance(message, MessageSingular):
    return f'"{escape(message.text)}"'
  elif isinstance(message, MessagePlural):
    return " / ".join(
      f'{count.name.lower()}:"{escape(text)}"' for count, text in message.variants.items()
    )
  else:
    unreachable()


def format_unit_line(unit: Unit) -> str:
  parts = [f"[{unit.state.name.lower()}]"]
  if unit.obsolete:
    parts.append("[obsolete]")
  source = format_message(unit.source)
  if unit.context is not None:
    source = f'"{escape(unit.context)}"|{source}'
  parts.append(source)
  parts.append("=>")
  parts.append(format_message(unit.target))
  return " ".join(parts)


def write_json(file: IO[str], data: object, indent: int | None = None) -> None:
  json.dump(
    data,
    file,
    ensure_ascii=False,
    indent=indent if indent else None,
    separators=(",", ":") if not indent else (", ", ": "),
  )
