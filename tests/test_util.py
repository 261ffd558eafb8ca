import io

import pytest

from ghmodels.util import parse_template_variables, select_option, write_to_out


@pytest.mark.parametrize(
    "flags, expected",
    [
        ([], {}),
        (["name=Alice"], {"name": "Alice"}),
        (
            ["name=Alice", "age=30", "city=Boston"],
            {"name": "Alice", "age": "30", "city": "Boston"},
        ),
        (["description=Hello World"], {"description": "Hello World"}),
        (["equation=x=y+1"], {"equation": "x=y+1"}),
        (["empty="], {"empty": ""}),
        ([" name =Alice"], {"name": "Alice"}),
        (["message= Hello World "], {"message": " Hello World "}),
        (["", "name=Alice"], {"name": "Alice"}),
        (["   ", "name=Alice"], {"name": "Alice"}),
        (["name=John"], {"name": "John"}),
        (
            ["name=John", "age=25", "city=New York"],
            {"name": "John", "age": "25", "city": "New York"},
        ),
        (
            ["full_name=John Smith", "description=A senior developer"],
            {"full_name": "John Smith", "description": "A senior developer"},
        ),
        (["equation=x = y + 2"], {"equation": "x = y + 2"}),
        (
            ["city=paris, milan", "countries=france, italy, spain"],
            {"city": "paris, milan", "countries": "france, italy, spain"},
        ),
        (["", "name=John", "  "], {"name": "John"}),
        (["input=test value"], {"input": "test value"}),
    ],
)
def test_parse_template_variables(flags, expected):
    assert parse_template_variables(flags) == expected


@pytest.mark.parametrize(
    "flags",
    [
        ["name"],
        ["name=Alice", "age"],
        ["=value"],
        [" =value"],
        ["name=Alice", "name=Bob"],
        ["invalid"],
        ["name=John", "name=Jane"],
    ],
)
def test_parse_template_variables_errors(flags):
    with pytest.raises(ValueError):
        parse_template_variables(flags)


def test_parse_template_variables_duplicate_message():
    with pytest.raises(ValueError, match="duplicate variable key 'name'"):
        parse_template_variables(["name=Alice", " name=Bob"])


def test_write_to_out_writes_message():
    out = io.StringIO()
    write_to_out(out, "hello\n")
    assert out.getvalue() == "hello\n"


def test_write_to_out_reports_failure(capsys):
    out = io.StringIO()
    out.close()
    write_to_out(out, "hello")
    assert capsys.readouterr().out.startswith("Error writing message:")


def test_select_option_by_number():
    out = io.StringIO()
    choice = select_option("Select a model:", ["a/one", "b/two"], io.StringIO("2\n"), out)
    assert choice == "b/two"
    assert out.getvalue().startswith("Select a model:\n")


def test_select_option_by_name():
    choice = select_option("Pick", ["a/one", "b/two"], io.StringIO("a/one\n"), io.StringIO())
    assert choice == "a/one"


def test_select_option_asks_again_after_invalid_answer():
    out = io.StringIO()
    choice = select_option("Pick", ["a/one", "b/two"], io.StringIO("9\n1\n"), out)
    assert choice == "a/one"
    assert "Invalid selection '9'" in out.getvalue()


def test_select_option_end_of_input():
    with pytest.raises(EOFError):
        select_option("Pick", ["a/one"], io.StringIO(""), io.StringIO())


def test_select_option_without_options():
    with pytest.raises(ValueError):
        select_option("Pick", [], io.StringIO("1\n"), io.StringIO())