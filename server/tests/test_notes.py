from app.services.notes import chunk_text, query_terms, rank_chunks, snippet


def _para(ch: str, n: int = 1000) -> str:
    return ch * n


def test_packs_paragraphs_up_to_target():
    text = "\n\n".join(_para(c) for c in "abcd")
    chunks = chunk_text(text)

    assert len(chunks) == 2
    assert chunks[0] == "\n\n".join(_para(c) for c in "abc")
    assert chunks[1] == _para("d")


def test_oversized_paragraph_stands_alone():
    big = _para("x", 5000)
    chunks = chunk_text(f"intro\n\n{big}\n\noutro")
    assert chunks == ["intro", big, "outro"]


def test_flush_before_exceeding_max():
    assert len(chunk_text(_para("a", 2500) + "\n\n" + _para("b", 1000))) == 1
    assert chunk_text(_para("a", 2500) + "\n\n" + _para("b", 2000)) == [_para("a", 2500), _para("b", 2000)]


def test_blank_lines_with_spaces_split_paragraphs():
    assert chunk_text("first\n   \nsecond") == ["first\n\nsecond"]


def test_empty_text_has_no_chunks():
    assert chunk_text("") == []
    assert chunk_text(" \n\n \n") == []


def test_chunks_are_never_empty():
    for chunk in chunk_text("a\n\n\n\n\nb\n\n   \n\nc"):
        assert chunk.strip()


def test_query_terms_drop_punctuation_and_single_letters():
    assert query_terms("How do I handle a price objection?") == ["how", "do", "handle", "price", "objection"]
    assert query_terms("?!") == []


def test_rank_by_term_frequency():
    chunks = [
        {"id": "1", "source_title": "Off topic", "content": "Weather and sports."},
        {"id": "2", "source_title": "Light", "content": "One price mention"},
        {"id": "3", "source_title": "Heavy", "content": "Price talk: price, PRICE and pricey"},
    ]
    ranked = rank_chunks("Price?", chunks)

    assert [r.id for r in ranked] == ["3", "2", "1"]
    assert [r.score for r in ranked] == [4, 1, 0]


def test_rank_ties_keep_input_order():
    chunks = [
        {"id": "a", "source_title": "A", "content": "budget"},
        {"id": "b", "source_title": "B", "content": "budget"},
    ]
    assert [r.id for r in rank_chunks("budget", chunks)] == ["a", "b"]


def test_rank_without_terms_scores_zero():
    chunks = [{"id": "a", "source_title": "A", "content": "anything"}]
    assert [r.score for r in rank_chunks("?", chunks)] == [0]


def test_snippet():
    assert snippet("short", 10) == "short"
    assert snippet("abcdef", 3) == "abc…"


def test_short_paragraphs_share_a_chunk():
    assert chunk_text("Paragraph one.\n\nParagraph two.") == ["Paragraph one.\n\nParagraph two."]


def test_chunks_cover_every_paragraph_in_order():
    paragraphs = [c * n for c, n in zip("abcdefg", (900, 1800, 4500, 50, 2999, 10, 3500))]
    chunks = chunk_text("\n\n".join(paragraphs))

    rebuilt = [p for chunk in chunks for p in chunk.split("\n\n")]
    assert rebuilt == paragraphs
    for chunk in chunks:
        assert len(chunk) <= 4000 or chunk in paragraphs


def test_empty_query_keeps_input_order():
    chunks = [
        {"id": "a", "source_title": "A", "content": "alpha"},
        {"id": "b", "source_title": "B", "content": "beta"},
    ]
    ranked = rank_chunks("", chunks)
    assert [(r.id, r.score) for r in ranked] == [("a", 0), ("b", 0)]


def test_query_terms_are_ascii_words():
    assert query_terms("Café crème pricing") == ["caf", "cr", "me", "pricing"]
