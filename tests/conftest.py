import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

import cinterp


@pytest.fixture
def run_c():
    """Return a helper that runs C source through the whole pipeline and returns main's value."""

    def _run(src: str, **limits) -> int:
        return cinterp.execute(src, cinterp.Limits(**limits))

    return _run


@pytest.fixture
def run_cli(tmp_path, capsys):
    """Write C source to a file, invoke the command-line driver, return (rc, stdout, stderr)."""

    def _run(src: str, *flags: str):
        c_file = tmp_path / "test.c"
        c_file.write_text(src, encoding="utf-8")

        rc = cinterp.main(["cinterp.py", *flags, str(c_file)])
        out, err = capsys.readouterr()
        return rc, out, err

    return _run
