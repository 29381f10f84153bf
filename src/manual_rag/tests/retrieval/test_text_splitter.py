import math

import pytest

from manual_rag.common import PageText
from manual_rag.retrieval.text_splitter import (
    SegmenterConfig,
    get_chunk_records_from_pages,
    segment,
)


def _words(n: int) -> str:
    return " ".join(f"w{i}" for i in range(1, n + 1))


def _expected_count(n: int, cfg: SegmenterConfig) -> int:
    return math.ceil(max(0, n - cfg.target) / cfg.step) + 1


def test_default_sizing_gives_target_375_and_step_330():
    cfg = SegmenterConfig()
    assert cfg.target == 375
    assert cfg.step == 330


def test_600_words_split_into_two_overlapping_chunks():
    """
    With the default 250-500 words and 12% overlap, 600 words produce a full
    375-word chunk starting at word 0 and a 270-word tail starting at word 330.
    """
    chunks = segment(_words(600), SegmenterConfig(min_words=250, max_words=500, overlap=0.12))

    assert len(chunks) == 2
    first, second = (c.text.split() for c in chunks)
    assert len(first) == 375
    assert first[0] == "w1"
    assert len(second) == 270
    assert second[0] == "w331"
    assert second[-1] == "w600"


@pytest.mark.parametrize("text", ["", "   ", "\n\t  \n"])
def test_blank_text_gives_no_chunks(text):
    assert segment(text) == []


@pytest.mark.parametrize("value", [None, 123, ["a", "b"], b"bytes"])
def test_non_string_input_gives_no_chunks(value):
    assert segment(value) == []


def test_short_text_is_one_whitespace_normalised_chunk():
    chunks = segment("  Press\tthe\n\nPOWER   button  ")
    assert [c.text for c in chunks] == ["Press the POWER button"]


@pytest.mark.parametrize("n", [1, 374, 375, 376, 705, 706, 1000, 2000])
def test_chunk_count_matches_window_formula(n):
    """
    The number of chunks is ceil(max(0, n - target) / step) + 1, and no chunk
    is emitted after the first one that reaches the end of the text.
    """
    cfg = SegmenterConfig()
    chunks = segment(_words(n), cfg)

    assert len(chunks) == _expected_count(n, cfg)
    assert chunks[-1].text.split()[-1] == f"w{n}"


def test_chunks_never_exceed_target_and_only_last_may_be_shorter():
    cfg = SegmenterConfig(min_words=10, max_words=20, overlap=0.2)
    chunks = segment(_words(100), cfg)

    lengths = [len(c.text.split()) for c in chunks]
    assert all(length <= cfg.target for length in lengths)
    assert all(length == cfg.target for length in lengths[:-1])


def test_consecutive_chunks_share_target_minus_step_words():
    cfg = SegmenterConfig(min_words=10, max_words=20, overlap=0.2)
    chunks = segment(_words(100), cfg)
    shared = cfg.target - cfg.step

    for prev, nxt in zip(chunks, chunks[1:]):
        assert prev.text.split()[-shared:] == nxt.text.split()[:shared]


@pytest.mark.parametrize("overlap", [1.0, 1.5, 7.0])
def test_step_is_clamped_to_one_word(overlap):
    """
    An overlap of one or more would give a zero or negative step; the step is
    clamped so the segmenter still terminates and advances word by word.
    """
    cfg = SegmenterConfig(min_words=3, max_words=3, overlap=overlap)
    assert cfg.step == 1

    chunks = segment(_words(5), cfg)
    assert [c.text for c in chunks] == ["w1 w2 w3", "w2 w3 w4", "w3 w4 w5"]


def test_zero_sizes_clamp_target_to_one_word():
    cfg = SegmenterConfig(min_words=0, max_words=0, overlap=0.12)
    assert cfg.target == 1
    assert [c.text for c in segment("a b c", cfg)] == ["a", "b", "c"]


def test_each_call_returns_a_fresh_list():
    text = _words(10)
    first = segment(text)
    first.append("sentinel")
    assert segment(text) != first


@pytest.mark.parametrize(
    "cfg",
    [
        SegmenterConfig(),
        SegmenterConfig(min_words=10, max_words=20, overlap=0.2),
        SegmenterConfig(min_words=1, max_words=1, overlap=0.99),
        SegmenterConfig(min_words=5, max_words=9, overlap=0.0),
    ],
)
def test_repeated_runs_yield_identical_chunks(cfg):
    text = _words(1234)
    assert segment(text, cfg) == segment(text, cfg)


def test_config_from_mapping_accepts_short_aliases():
    cfg = SegmenterConfig.from_mapping({"min": 100, "max": 200, "overlap_fraction": 0.5})
    assert (cfg.min_words, cfg.max_words, cfg.overlap) == (100, 200, 0.5)
    assert SegmenterConfig.from_mapping(None) == SegmenterConfig()


def test_chunk_records_carry_page_and_manual_metadata():
    pages = [
        PageText(page=1, text="alpha beta"),
        PageText(page=2, text="   "),
        PageText(page=3, text="gamma"),
    ]

    records = get_chunk_records_from_pages(pages, manual_id="m-1", title="Dishwasher X1")

    assert [(r.page, r.text) for r in records] == [(1, "alpha beta"), (3, "gamma")]
    assert all(r.manual_id == "m-1" and r.title == "Dishwasher X1" for r in records)
