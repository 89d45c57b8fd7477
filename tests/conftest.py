"""Pytest configuration and shared fixtures for the Flow parser tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from flow_parser.parser import parse

if TYPE_CHECKING:
    from pathlib import Path

    from flow_parser.ast import FlowProgram

SAMPLE_SOURCE = """\
/**
 * @flow
 */
'use strict';

const invariant = require('invariant');
import * as React from 'react';
import type { Node, Element } from 'react';

export type Size = 'small' | 'medium' | 'large';

type Props = {|
  +children?: ?Node,
  size: Size,
  items: $ReadOnlyArray<Item>,
  ...BaseProps,
  [key: string]: mixed,
|};

export type Handlers = {
  onPress: ?(Event),
  style: $ReadOnly<{ color: string }>,
  refs: Array<React.Ref<Element>>[],
};
"""


@pytest.fixture(scope='session')
def sample_source() -> str:
    """A Flow declaration file using every statement form."""
    return SAMPLE_SOURCE


@pytest.fixture(scope='session')
def sample_program(sample_source: str) -> FlowProgram:
    return parse(sample_source)


@pytest.fixture
def sample_file(tmp_path: Path, sample_source: str) -> Path:
    """Write the sample declarations to a ``.js.flow`` file."""
    path = tmp_path / 'sample.js.flow'
    path.write_text(sample_source, encoding='utf-8')
    return path
