import pytest

from cminus.diffcheck import MAX_LINE_LENGTH, Difference, compare_files, main


def write(path, text):
    path.write_text(text, encoding="utf-8", newline="")
    return str(path)


def test_identical_files(tmp_path):
    a = write(tmp_path / "a.txt", "one\ntwo\n")
    b = write(tmp_path / "b.txt", "one\ntwo\n")
    assert compare_files(a, b) is None


def test_content_difference(tmp_path):
    a = write(tmp_path / "a.txt", "one\ntwo\nthree\n")
    b = write(tmp_path / "b.txt", "one\nTWO\nthree\n")
    diff = compare_files(a, b)
    assert diff == Difference(2, "two\n", "TWO\n")
    assert not diff.is_length_mismatch


def test_describe_content_difference():
    diff = Difference(2, "two\n", "TWO\n")
    assert diff.describe() == (
        "파일 내용이 일치하지 않습니다 (라인 2).\n파일 1: two\n파일 2: TWO\n"
    )


@pytest.mark.parametrize(
    "first, second", [("one\ntwo\n", "one\n"), ("one\n", "one\ntwo\n")]
)
def test_length_difference(tmp_path, first, second):
    a = write(tmp_path / "a.txt", first)
    b = write(tmp_path / "b.txt", second)
    diff = compare_files(a, b)
    assert diff.is_length_mismatch
    assert diff.describe() == "파일의 길이가 다릅니다.\n"


def test_line_endings_matter(tmp_path):
    a = write(tmp_path / "a.txt", "one\r\n")
    b = write(tmp_path / "b.txt", "one\n")
    diff = compare_files(a, b)
    assert diff.first == "one\r\n"
    assert diff.second == "one\n"


def test_long_lines_are_compared_in_pieces(tmp_path):
    width = MAX_LINE_LENGTH - 1
    a = write(tmp_path / "a.txt", "x" * width + "a\n")
    b = write(tmp_path / "b.txt", "x" * width + "b\n")
    diff = compare_files(a, b)
    assert diff.line_number == 2
    assert diff.first == "a\n"


def test_missing_file_raises(tmp_path):
    a = write(tmp_path / "a.txt", "one\n")
    with pytest.raises(FileNotFoundError):
        compare_files(a, str(tmp_path / "missing.txt"))


def test_main_usage(capsys):
    assert main(["only-one"]) == 1
    assert capsys.readouterr().out.startswith("usage:")


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "x"), str(tmp_path / "y")]) == 1
    assert capsys.readouterr().out == "파일을 열 수 없습니다.\n"


def test_main_prints_difference(tmp_path, capsys):
    a = write(tmp_path / "a.txt", "same\nleft\n")
    b = write(tmp_path / "b.txt", "same\nright\n")
    assert main([a, b]) == 0
    assert capsys.readouterr().out == compare_files(a, b).describe()


def test_main_silent_when_equal(tmp_path, capsys):
    a = write(tmp_path / "a.txt", "same\n")
    b = write(tmp_path / "b.txt", "same\n")
    assert main([a, b]) == 0
    assert capsys.readouterr().out == ""