"""Pytest configuration and fixtures for propstrip tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator, List, Optional

import pytest

from propstrip.options import RewriteOptions, normalize_options
from propstrip.parser import parse_source

FIXTURES_DIR = Path(__file__).parent / "fixtures"

ENV_CHECK = 'process.env.NODE_ENV !== "production"'


def find_all(root: Any, node_type: str) -> List[Any]:
    """Every node of *node_type* under *root*, in source order."""
    found = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == node_type:
            found.append(node)
        stack.extend(reversed(node.children))
    return found


def find_first(root: Any, node_type: str) -> Optional[Any]:
    nodes = find_all(root, node_type)
    return nodes[0] if nodes else None


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def parse_js() -> Callable[..., Any]:
    """Parse a snippet and return its root node (fails the test on syntax errors)."""

    def _parse(code: str, file_id: str = "test.jsx") -> Any:
        tree = parse_source(code.encode("utf-8"), file_id)
        assert tree is not None, f"snippet did not parse:\n{code}"
        return tree.root_node

    return _parse


@pytest.fixture
def make_options() -> Callable[..., RewriteOptions]:
    return normalize_options


@pytest.fixture
def sample_component_code() -> str:
    """Class and function components with propTypes assigned after them."""
    return '''import PropTypes from "prop-types";
import React from "react";

class Card extends React.Component {
  render() {
    return <div className="card">{this.props.title}</div>;
  }
}

function Avatar({ url }) {
  return <img src={url} />;
}

Card.propTypes = {
  title: PropTypes.string,
};

Avatar.propTypes = {
  url: PropTypes.string.isRequired,
};

export { Avatar, Card };
'''
