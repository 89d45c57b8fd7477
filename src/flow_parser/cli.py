from __future__ import annotations

import json
import logging
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from flow_parser.common import AST_SCHEMA_ID, LOG_LEVEL_ENVVAR
from flow_parser.errors import FlowParseError
from flow_parser.parser import parse

if TYPE_CHECKING:
    from flow_parser._types import FlowProgramDict

logger = logging.getLogger(__name__)

_stderr = Console(stderr=True)


class LogLevel(StrEnum):
    DEBUG = 'DEBUG'
    INFO = 'INFO'
    WARNING = 'WARNING'
    ERROR = 'ERROR'


def configure_logging(level: LogLevel, /) -> None:
    logging.basicConfig(
        level=level.value,
        format='%(message)s',
        datefmt='[%X]',
        handlers=[RichHandler(console=_stderr, rich_tracebacks=True)],
        force=True,
    )


def _parse_file(path: Path, /) -> FlowProgramDict:
    logger.info('parsing %s', path)
    try:
        return parse(path.read_text(encoding='utf-8')).to_json()
    except FlowParseError as e:
        _stderr.print(f'[bold red]error[/]: {path}:{e}', highlight=False)
        raise typer.Exit(code=1) from e


def _parse_files(
    files: Annotated[
        list[Path],
        typer.Argument(
            file_okay=True,
            dir_okay=False,
            readable=True,
            exists=True,
            resolve_path=True,
            help='Flow declaration files to parse.',
        ),
    ],
    *,
    output: Annotated[
        Path | None,
        typer.Option(
            '--output',
            '-o',
            file_okay=True,
            dir_okay=False,
            writable=True,
            resolve_path=True,
            help='File to write the JSON AST to (default: stdout).',
        ),
    ] = None,
    indent: Annotated[
        int, typer.Option(min=0, help='JSON indentation width.')
    ] = 2,
    log_level: Annotated[
        LogLevel,
        typer.Option(
            envvar=LOG_LEVEL_ENVVAR,
            case_sensitive=False,
            help='Logging level.',
        ),
    ] = LogLevel.WARNING,
) -> None:
    configure_logging(log_level)

    document: dict[str, object]
    if len(files) == 1:
        document = {'$schema': AST_SCHEMA_ID, **_parse_file(files[0])}
    else:
        document = {'files': {str(file): _parse_file(file) for file in files}}

    text = json.dumps(document, indent=indent or None)

    if output is None:
        typer.echo(text)
    else:
        output.write_text(text + '\n', encoding='utf-8')
        logger.info('wrote %s', output)


def main() -> None:
    typer.run(_parse_files)


if __name__ == '__main__':
    main()
