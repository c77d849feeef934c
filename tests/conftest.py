"""Test configuration ensuring the project source tree is importable."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
TESTS = ROOT / "tests"

root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)
else:
    idx = sys.path.index(root_str)
    if idx != 0:
        sys.path.insert(0, sys.path.pop(idx))

if str(TESTS) in sys.path:
    sys.path.pop(sys.path.index(str(TESTS)))
sys.path.insert(1, str(TESTS))

# Import the project package eagerly so subsequent imports reuse it
importlib.import_module("proxydeob")

from obfuscated_sample import build_sample  # noqa: E402


@pytest.fixture
def schema():
    from proxydeob.schema import load_schema

    return load_schema()


@pytest.fixture
def sample_source() -> str:
    """A small program using every proxy pattern of the default scheme."""

    return build_sample(
        tables={
            "z": {"greeting": "hello", "answer": 42, "flags": [True, None, -1]},
            "u": ["zero", "one", "two"],
            "l": {"nested": {"k": "v", "n": 1.5}},
            "I": {"unused": 0},
            "uB": {"name": "uB-table"},
        },
        body="""
a.G.compute = make(1, 2);
a.G.label = a.H.z.greeting;
console.log(a.H.z.answer, a.H.u[1], a.H.l.nested);
later(a.G.compute, a.G.label);
a.H.z.answer = 5;
a.H.z.answer++;
delete a.H.z.answer;
print(a.H.z.missing);
""",
    )
