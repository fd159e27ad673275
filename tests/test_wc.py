import io
import sys

from xv6sim.wc import Counts, count, count_stream, main


def test_count_simple_line():
    assert count(b"hello world\n") == Counts(1, 2, 12)


def test_count_invariants():
    data = b"one two\tthree\r\nfour\vfive\n\n  six"
    counts = count(data)
    assert counts.chars == len(data)
    assert counts.lines == data.count(b"\n")
    assert counts.words == len(data.split())


def test_count_empty():
    assert count(b"") == Counts(0, 0, 0)


def test_form_feed_is_not_a_separator():
    assert count(b"a\fb").words == 1


def test_stream_matches_whole_buffer_across_chunks():
    data = b"x" * 600 + b" " + b"word " * 300 + b"\n" * 5
    assert count_stream(io.BytesIO(data)) == count(data)
    assert count_stream(io.BytesIO(b"a" * 1500)).words == 1


def test_main_files(tmp_path, capsys):
    first = tmp_path / "first.txt"
    second = tmp_path / "second.txt"
    first.write_bytes(b"a b\nc\n")
    second.write_bytes(b"")
    assert main([str(first), str(second)]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == [f"2 3 6 {first}", f"0 0 0 {second}"]


def test_main_missing_file_stops(tmp_path, capsys):
    present = tmp_path / "present.txt"
    present.write_bytes(b"data\n")
    missing = tmp_path / "missing.txt"
    assert main([str(missing), str(present)]) == 1
    out = capsys.readouterr().out
    assert out == f"wc: cannot open {missing}\n"


def test_main_stdin(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"x y\n")))
    assert main([]) == 0
    assert capsys.readouterr().out == "1 2 4 \n"