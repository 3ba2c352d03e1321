import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import cinterp


# ---------- Run ----------

def test_exit_code_is_main_result(run_cli):
    rc, out, err = run_cli("int main() { return 42; }")
    assert rc == 42
    assert out == ""
    assert "main returned 42" in err


def test_exit_code_is_truncated_to_a_byte(run_cli):
    rc, _, err = run_cli("int main() { return 300; }")
    assert rc == 300 & 0xFF
    assert "main returned 300" in err


def test_negative_result(run_cli):
    rc, _, err = run_cli("int main() { return -1; }")
    assert rc == 255
    assert "main returned -1" in err


# ---------- Modes ----------

def test_tokens_mode(run_cli):
    rc, out, _ = run_cli("int x;", "--tokens")
    assert rc == 0
    lines = out.splitlines()
    assert lines[0] == "1:1\tKW\tint"
    assert lines[1] == "1:5\tID\tx"
    assert lines[2] == "1:6\tPUNCT\t;"
    assert lines[-1].split("\t")[1] == "EOF"


def test_ast_mode(run_cli):
    rc, out, _ = run_cli("int main() { return 1; }", "--ast")
    assert rc == 0
    lines = out.splitlines()
    assert lines[0] == "Program @1:1"
    assert lines[1].startswith("  items: FuncDef main int")
    assert any("Return" in line for line in lines)


def test_ast_mode_does_not_check(run_cli):
    rc, out, _ = run_cli("int main() { return nope; }", "--ast")
    assert rc == 0
    assert "Var nope" in out


def test_check_mode(run_cli):
    rc, _, err = run_cli("int main() { return 1 / 0; }", "--check")
    assert rc == 0
    assert "ok" in err


# ---------- Errors ----------

def test_semantic_error(run_cli):
    rc, _, err = run_cli("int main() {\n  return y;\n}")
    assert rc == 1
    assert "test.c:2:10: error: UndeclaredIdentifier" in err


def test_check_mode_reports_semantic_errors(run_cli):
    rc, _, err = run_cli("int main() { int x; int x; return 0; }", "--check")
    assert rc == 1
    assert "error: Redeclaration" in err


def test_lex_error(run_cli):
    rc, _, err = run_cli("int main() { return 1 @ 2; }", "--tokens")
    assert rc == 1
    assert "error: LexError" in err


def test_parse_error(run_cli):
    rc, _, err = run_cli("int main() { return 1 }")
    assert rc == 1
    assert "error: ParseError" in err


def test_runtime_error_names_function(run_cli):
    src = """\
int get(int *p) {
    return p[3];
}

int main() {
    int a[3];
    return get(a);
}
"""
    rc, _, err = run_cli(src)
    assert rc == 1
    assert "test.c:2:" in err
    assert "error: OutOfBounds" in err
    assert "(in 'get')" in err


def test_missing_file(tmp_path, capsys):
    rc = cinterp.main(["cinterp.py", str(tmp_path / "nope.c")])
    _, err = capsys.readouterr()
    assert rc == 1
    assert "file not found" in err


def test_bad_option(capsys):
    rc = cinterp.main(["cinterp.py", "--bogus", "x.c"])
    _, err = capsys.readouterr()
    assert rc == 2
    assert "Usage" in err


def test_no_input_file(capsys):
    rc = cinterp.main(["cinterp.py"])
    _, err = capsys.readouterr()
    assert rc == 2
    assert "Usage" in err


def test_bad_limit_value(run_cli):
    rc, _, err = run_cli("int main() { return 0; }", "-s", "lots")
    assert rc == 2
    assert "positive integer" in err


# ---------- Limits ----------

def test_step_limit_option(run_cli):
    rc, _, err = run_cli("int main() { while (1) { } return 0; }", "-s", "500")
    assert rc == 1
    assert "error: StepLimitExceeded" in err


def test_depth_limit_option(run_cli):
    src = "int f(int n) { return f(n + 1); } int main() { return f(0); }"
    rc, _, err = run_cli(src, "-d", "20")
    assert rc == 1
    assert "call depth exceeds 20 frames" in err


def test_limits_large_enough(run_cli):
    src = """\
int count(int n) {
    if (n == 0) { return 0; }
    return 1 + count(n - 1);
}

int main() {
    return count(30);
}
"""
    rc, _, _ = run_cli(src, "-d", "40", "-s", "10000")
    assert rc == 30


def test_deep_nesting_is_reported(run_cli):
    rc, _, err = run_cli("int main() { return " + "(" * 3000 + "1" + ")" * 3000 + "; }")
    assert rc == 1
    assert "error: ParseError" in err
    assert "nested too deeply" in err


def test_long_expression_runs(run_cli):
    rc, _, _ = run_cli("int main() { return " + " + ".join(["1"] * 600) + "; }")
    assert rc == 600 & 0xFF
