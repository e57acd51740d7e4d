from hypothesis import given, strategies as st

from enginerun.runner import RunLog

chunks = st.lists(st.text(max_size=20), max_size=30)


@given(parts=chunks)
def test_text_is_concatenation_in_arrival_order(parts: list[str]) -> None:
    log = RunLog()
    for part in parts:
        log.append(part)

    assert log.text == "".join(parts)
    assert log.chunks == tuple(part for part in parts if part)


@given(parts=chunks)
def test_appended_signal_mirrors_document(parts: list[str]) -> None:
    log = RunLog()
    received: list[str] = []
    _ = log.appended.connect(received.append)

    for part in parts:
        log.append(part)

    assert "".join(received) == log.text


@given(parts=chunks, line=st.text(alphabet=st.characters(blacklist_characters="\n")))
def test_diagnostic_line_starts_on_its_own_line(parts: list[str], line: str) -> None:
    log = RunLog()
    for part in parts:
        log.append(part)
    before = log.text

    log.append_line(line)

    assert log.text.startswith(before)
    assert log.text.endswith(f"{line}\n")
    added = log.text[len(before) :]
    assert not before or before.endswith("\n") or added.startswith("\n")
