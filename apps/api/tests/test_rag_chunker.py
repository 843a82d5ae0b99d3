import pytest

from onboarding_api.services.rag.chunker import preprocess_content, split_spans


def _sentences(length: int) -> str:
    sentence = "Guides publish tours with clear photos and pricing. "
    return (sentence * (length // len(sentence) + 1))[:length]


def test_short_text_yields_single_span() -> None:
    assert split_spans("short text", chunk_size=800, chunk_overlap=50) == [(0, 10)]


def test_text_of_exactly_chunk_size_yields_single_span() -> None:
    text = "a" * 800

    assert split_spans(text, chunk_size=800, chunk_overlap=50) == [(0, 800)]


def test_spans_cover_every_character() -> None:
    text = _sentences(2000)
    spans = split_spans(text, chunk_size=800, chunk_overlap=50)

    covered = set()
    for start, end in spans:
        covered.update(range(start, end))

    assert covered == set(range(len(text)))
    assert spans[0][0] == 0
    assert spans[-1][1] == len(text)


def test_two_thousand_characters_scenario() -> None:
    text = _sentences(2000)
    spans = split_spans(text, chunk_size=800, chunk_overlap=50)

    assert len(spans) >= 3
    assert spans[0][0] == 0
    for (_, previous_end), (next_start, _) in zip(spans, spans[1:]):
        assert 0 <= previous_end - next_start <= 50
    assert all(end - start <= 800 for start, end in spans)


def test_spans_prefer_sentence_boundaries() -> None:
    text = _sentences(2000)
    spans = split_spans(text, chunk_size=800, chunk_overlap=50)

    for _, end in spans[:-1]:
        assert text[end - 1] == "."


def test_text_without_boundaries_is_cut_at_chunk_size() -> None:
    text = "x" * 1000
    spans = split_spans(text, chunk_size=400, chunk_overlap=40)

    assert spans == [(0, 400), (360, 760), (720, 1000)]


@pytest.mark.parametrize(
    ("chunk_size", "chunk_overlap"),
    [(0, 0), (100, -1), (100, 100)],
)
def test_invalid_chunk_arguments_raise(chunk_size: int, chunk_overlap: int) -> None:
    with pytest.raises(ValueError):
        split_spans("text", chunk_size=chunk_size, chunk_overlap=chunk_overlap)


def test_preprocess_normalizes_whitespace() -> None:
    raw = "  Title\r\n\r\n\r\n\r\nBody   with\ttabs\rand lines  "

    assert preprocess_content(raw) == "Title\n\nBody with tabs\nand lines"
