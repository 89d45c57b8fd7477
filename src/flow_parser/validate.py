from __future__ import annotations

import json
from pathlib import Path  # noqa: TC003
from typing import Annotated, Any, Final, cast

import typer
from jsonschema import validators
from jsonschema.exceptions import SchemaError, ValidationError
from rich import print

from flow_parser.common import AST_SCHEMA_PATH

_SCHEMA: Final = json.loads(AST_SCHEMA_PATH.read_text(encoding='utf-8'))

# flow-parse writes this wrapper when given several files
_FILES_SCHEMA: Final = {
    'type': 'object',
    'required': ['files'],
    'additionalProperties': False,
    'properties': {'files': {'type': 'object'}},
}


def validate_program(data: object, /) -> None:
    """Check serialized AST data against the bundled schema."""
    validators.validate(data, _SCHEMA)


def validate_document(data: object, /) -> None:
    """Check a flow-parse document: one program or ``{"files": {path: program}}``."""
    if not isinstance(data, dict) or 'files' not in data:
        validate_program(data)
        return

    validators.validate(data, _FILES_SCHEMA)
    for program in cast('dict[str, Any]', data)['files'].values():
        validate_program(program)


def validate(
    files: Annotated[
        list[Path],
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help='Serialized AST files to check.',
        ),
    ],
) -> None:
    for file in files:
        try:
            validate_document(json.loads(file.read_text(encoding='utf-8')))
        except json.JSONDecodeError as e:
            print(f'{file}: invalid JSON: {e}')
            raise typer.Exit(code=1) from e
        except (SchemaError, ValidationError) as e:
            print(f'{file}: {e.message}')
            raise typer.Exit(code=1) from e


def main() -> None:
    typer.run(validate)


if __name__ == '__main__':
    main()
