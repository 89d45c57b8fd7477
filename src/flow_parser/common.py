from __future__ import annotations

from pathlib import Path
from typing import Final

FLOW_PARSER_ROOT: Final = Path(__file__).resolve().parent
AST_SCHEMA_PATH: Final = FLOW_PARSER_ROOT / 'flow-ast.schema.json'
AST_SCHEMA_ID: Final = './flow-ast.schema.json'

LOG_LEVEL_ENVVAR: Final = 'FLOW_PARSER_LOG_LEVEL'
