from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from harvest.settings import Settings, reset_settings_cache  # noqa: E402


GraphQLHandler = Callable[[str, Dict[str, Any]], Dict[str, Any]]


class FakeTransport:
    """Records every call and answers through the injected handlers."""

    def __init__(
        self,
        graphql: Optional[GraphQLHandler] = None,
        rest: Optional[Callable[[str], Dict[str, Any]]] = None,
    ) -> None:
        self._graphql = graphql
        self._rest = rest
        self.calls: List[Tuple[str, Dict[str, Any], Optional[str]]] = []

    def post_graphql(self, operation_name, query, variables, *, referer=None):
        self.calls.append((operation_name, dict(variables), referer))
        assert self._graphql is not None, "unexpected GraphQL call"
        return self._graphql(operation_name, variables)

    def get_json(self, url):
        self.calls.append(("GET", {"url": url}, None))
        assert self._rest is not None, "unexpected GET call"
        return self._rest(url)

    def operations(self, name: str) -> List[Dict[str, Any]]:
        return [variables for op, variables, _ in self.calls if op == name]


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def make_settings(tmp_path: Path):
    def _make(**overrides: Any) -> Settings:
        values: Dict[str, Any] = {
            "output_dir": str(tmp_path / "out"),
            "discussion_delay_seconds": 0,
            "problem_delay_seconds": 0,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make
