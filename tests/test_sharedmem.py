import uuid

import pytest

from syscourse.sharedmem import (
    ORIGINAL_DATA,
    STRSIZE,
    EmailDirectory,
    SharedSegment,
    delete_segment,
    email_main,
    main,
)


@pytest.fixture
def name():
    segment = f"/syscourse_test_{uuid.uuid4().hex}"
    yield segment
    delete_segment(segment)


def test_new_segment_is_empty(name):
    with SharedSegment(name, 64) as segment:
        assert segment.read() == ""


def test_contents_persist_between_attachments(name):
    with SharedSegment(name, 64) as first:
        assert first.write("persist") == len("persist")
    with SharedSegment(name, 64) as second:
        assert second.read() == "persist"


def test_two_attachments_share_memory(name):
    with SharedSegment(name, 64) as a, SharedSegment(name, 64) as b:
        a.write("shared")
        assert b.read() == "shared"


def test_write_is_cut_to_size(name):
    with SharedSegment(name, 8) as segment:
        assert segment.write("abcdefghij") == 8
        assert segment.read() == "abcdefgh"


def test_shorter_write_clears_old_contents(name):
    with SharedSegment(name, 32) as segment:
        segment.write("a much longer text")
        segment.write("hi")
        assert segment.read() == "hi"


def test_closed_segment_rejects_access(name):
    segment = SharedSegment(name, 16)
    segment.close()
    with pytest.raises(ValueError):
        segment.read()


def test_delete_segment(name):
    SharedSegment(name, 16).close()
    assert delete_segment(name) is True
    assert delete_segment(name) is False


@pytest.mark.parametrize("bad", ["/a/b", "/", ""])
def test_invalid_names(bad):
    with pytest.raises(ValueError):
        SharedSegment(bad, 16)


def test_size_must_be_positive(name):
    with pytest.raises(ValueError):
        SharedSegment(name, 0)


def test_restore_then_lookup_every_record(name):
    with EmailDirectory(name) as directory:
        directory.restore()
        for person, email in ORIGINAL_DATA:
            assert directory.lookup(person) == [email]


def test_change_and_restore(name):
    person, original = ORIGINAL_DATA[12]
    with EmailDirectory(name) as directory:
        directory.restore()
        assert directory.change(person, "new@example.com") == 1
        assert directory.lookup(person) == ["new@example.com"]
        directory.restore()
        assert directory.lookup(person) == [original]


def test_unknown_name(name):
    with EmailDirectory(name) as directory:
        directory.restore()
        assert directory.lookup("Nobody Here") == []
        assert directory.change("Nobody Here", "x@example.com") == 0


def test_change_rejects_overlong_email(name):
    with EmailDirectory(name) as directory:
        directory.restore()
        with pytest.raises(ValueError):
            directory.change(ORIGINAL_DATA[0][0], "a" * STRSIZE)


def test_main_write_then_read(name, capsys):
    assert main([f"--name={name}", "hello"]) == 0
    assert main([f"--name={name}"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["writing to segment: 'hello'", "segment contains: 'hello'"]


def test_main_delete(name, capsys):
    main([f"--name={name}", "x"])
    assert main([f"--name={name}", "-delete"]) == 0
    assert "removing shared memory" in capsys.readouterr().out
    assert delete_segment(name) is False


def test_main_too_many_arguments(name):
    assert main([f"--name={name}", "a", "b"]) == 1


def test_email_main_session(name, capsys):
    person, email = ORIGINAL_DATA[0]
    assert email_main([f"--name={name}", "restore"]) == 0
    assert email_main([f"--name={name}", "lookup", person]) == 0
    out = capsys.readouterr().out
    assert f"Looking up {person}" in out
    assert f"Found: {email}" in out


def test_email_main_errors(name, capsys):
    assert email_main([f"--name={name}"]) == 1
    assert email_main([f"--name={name}", "bogus"]) == 1
    assert "Unknown command 'bogus'" in capsys.readouterr().out