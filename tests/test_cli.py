import io
import pytest
from unitconvert.cli import format_value, main, process_line
from unitconvert.config import Settings
from unitconvert.converter import build_converter

@pytest.fixture
def converter():
    return build_converter(Settings())

def _run(converter, line):
    out, err = io.StringIO(), io.StringIO()
    keep_going = process_line(converter, line, out, err)
    return keep_going, out.getvalue(), err.getvalue()

@pytest.mark.parametrize("value, text", [
    (68.0, "68.0"),
    (0.0, "0.0"),
    (123456.0, "1.234560e+05"),
    (-123456.0, "-1.234560e+05"),
    (0.00001, "1.000000e-05"),
    (99999.0, "99999.0"),
])
def test_format_value(value, text):
    assert format_value(value) == text

def test_conversion_line(converter):
    ok, out, err = _run(converter, "20C -> F")
    assert ok and out == "68.0 fahrenheit\n" and err == ""

def test_expression_line(converter):
    assert _run(converter, "3 + 4 * 2")[1] == "11.0\n"

def test_unit_info_line(converter):
    assert _run(converter, "km")[1] == "Kilometer (Length)\n"
    _, out, err = _run(converter, "parsec")
    assert out == "" and err == "ERROR Unknown command parsec\n"

def test_pi_is_a_number_not_a_unit(converter):
    assert _run(converter, "π") == (True, "3.141592653589793\n", "")
    assert _run(converter, "2 * π")[1] == "6.283185307179586\n"

def test_errors_go_to_stderr(converter):
    for line in ("2km -> C", "2 * (1 + 5", "{x} + 1"):
        _, out, err = _run(converter, line)
        assert out == ""
        assert err.startswith("ERROR ")

def test_commands(converter):
    assert _run(converter, "exit")[0] is False
    _, out, _ = _run(converter, "units")
    assert out.splitlines()[0].split() == ["Unit", "Category", "Abbreviation"]
    assert "NauticalMile" in out
    assert "exit" in _run(converter, "help")[1]
    assert _run(converter, "   ") == (True, "", "")

def test_main_one_shot(capsys):
    assert main(["2km -> nmi"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("1.07991360691144")
    assert out.rstrip().endswith("nauticalmile")

def test_main_reads_stdin_until_exit(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("20C -> F\nexit\n3 + 4\n"))
    assert main([]) == 0
    assert capsys.readouterr().out == "68.0 fahrenheit\n"

def test_main_without_reverse_edges(capsys):
    assert main(["--no-reverse", "2km -> nmi"]) == 1
    assert "No conversion path" in capsys.readouterr().err

def test_main_one_shot_failures_exit_nonzero(capsys):
    assert main(["2km -> C"]) == 1
    assert main(["parsec"]) == 1
    assert main(["help"]) == 0
    err = capsys.readouterr().err
    assert "ERROR Unknown command parsec" in err

def test_main_bad_catalog(tmp_path, capsys):
    bad = tmp_path / "bad.yaml"
    bad.write_text("units: [oops", encoding="utf-8")
    assert main(["--catalog", str(bad), "1 m -> km"]) == 2
    assert "Failed to load catalog" in capsys.readouterr().err
