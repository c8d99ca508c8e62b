import re
from pathlib import Path


ROOT = Path(__file__).resolve().parent.parent


def _requirement_names(lines):
    names = set()
    for line in lines:
        match = re.search(r'"([A-Za-z0-9_.\-]+)', line)
        if match:
            names.add(match.group(1).lower())
    return names


def _project_dependencies():
    text = (ROOT / "pyproject.toml").read_text()
    block = text.split("\ndependencies = [", 1)[1].split("]", 1)[0]
    return _requirement_names(block.splitlines())


def _notebook_dependencies():
    lines = (ROOT / "notebooks" / "bank_exploration.py").read_text().splitlines()
    start = lines.index("# dependencies = [")
    end = lines.index("# ]", start)
    return _requirement_names(lines[start + 1:end])


def test_notebook_script_declares_every_runtime_dependency():
    missing = _project_dependencies() - _notebook_dependencies()
    assert not missing, f"notebook header is missing {sorted(missing)}"


def test_notebook_script_declares_marimo():
    assert "marimo" in _notebook_dependencies()
