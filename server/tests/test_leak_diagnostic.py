from app.services.leak_diagnostic import (
    NO_LEAK_EXPLANATION,
    LeakCategory,
    build_leak_diagnostic,
    compute_leak_signals,
    extract_seller_blocks,
)

LEVERAGE_EVIDENCE = [
    "No explicit next-step phrases found",
    "No time-bound language (e.g. next week, 15 min) found",
]


def test_short_call_has_only_a_leverage_leak():
    transcript = (
        "Seller: Hi, thanks for joining. What's your biggest challenge with follow-ups?\n"
        "Prospect: We lose leads after demos."
    )
    diag = build_leak_diagnostic(transcript)

    assert diag.primary_leak == "Leverage"
    assert diag.secondary_leak is None
    assert diag.leak_evidence == LEVERAGE_EVIDENCE
    assert diag.leak_explanation.startswith("Leverage leak indicates unclear commitment")
    assert "also shows minor signals" not in diag.leak_explanation


def test_hedging_monologue_is_a_frame_leak():
    transcript = "Seller: " + "maybe " * 4 + "value " * 196
    diag = build_leak_diagnostic(transcript)

    assert diag.primary_leak == "Frame"
    # Leverage and Precision both score 3; Leverage comes first
    assert diag.secondary_leak == "Leverage"
    assert diag.leak_evidence == [
        "Seller block of 200 words (over 120-word threshold)",
        "4 soft-language phrases detected (maybe, just, I think, sort of, kind of)",
        *LEVERAGE_EVIDENCE,
    ]
    assert diag.leak_explanation.endswith(
        "Leverage also shows minor signals worth addressing in future conversations."
    )


def test_ties_resolve_in_category_order():
    diag = build_leak_diagnostic("Seller: " + "value " * 200)

    assert diag.primary_leak == "Leverage"
    assert diag.secondary_leak == "Precision"
    assert diag.leak_evidence[-2:] == [
        "Only 0 question(s) in 201 words (threshold: 2)",
        "Low question density: 0.0 per 100 words",
    ]


def test_clean_call_has_no_leaks():
    diag = build_leak_diagnostic("Seller: What's your timeline? Can we schedule a call next week?")

    assert diag.primary_leak is None
    assert diag.secondary_leak is None
    assert diag.leak_evidence == []
    assert diag.leak_explanation == NO_LEAK_EXPLANATION


def test_blank_transcript_has_no_leaks():
    for text in ("", "   \n\t "):
        diag = build_leak_diagnostic(text)
        assert diag.primary_leak is None
        assert diag.leak_explanation == NO_LEAK_EXPLANATION


def test_soft_language_scoring_steps():
    two = compute_leak_signals("Seller: maybe we just go? Schedule next week.")
    three = compute_leak_signals("Seller: maybe we just go, I think? Schedule next week.")

    assert two[LeakCategory.FRAME].score == 1
    assert three[LeakCategory.FRAME].score == 2


def test_precision_threshold_grows_with_length():
    signals = compute_leak_signals(" ".join(["word"] * 400) + " one? two?")
    precision = signals[LeakCategory.PRECISION]

    assert precision.evidence[0] == "Only 2 question(s) in 402 words (threshold: 3)"
    assert precision.score == 3


def test_seller_blocks_end_at_other_speakers():
    transcript = (
        "Seller: a b\n"
        "continued here\n"
        "Prospect: x\n"
        "ignored prospect line\n"
        "Rep: y z"
    )
    assert extract_seller_blocks(transcript) == ["a b continued here", "y z"]


def test_unlabelled_transcript_is_one_block():
    assert extract_seller_blocks("  just some words\nmore words ") == ["just some words\nmore words"]
    assert extract_seller_blocks("") == []


def test_colon_lines_stay_in_the_seller_block():
    transcript = (
        "Seller: " + "value " * 70
        + "\nHere is the plan: " + "detail " * 70
        + "\nStep one: book a demo"
        + "\nProspect: ok"
    )
    assert [len(b.split()) for b in extract_seller_blocks(transcript)] == [149]

    frame = compute_leak_signals(transcript)[LeakCategory.FRAME]
    assert frame.score == 2
    assert frame.evidence == ["Seller block of 149 words (over 120-word threshold)"]


def test_prospect_labels_end_the_seller_block():
    transcript = "Rep: hello there\nBuyer: hi\nCustomer: and me\nYou: welcome both"
    assert extract_seller_blocks(transcript) == ["hello there", "welcome both"]
