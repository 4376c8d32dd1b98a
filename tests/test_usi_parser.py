import random

import pytest

from usi_parser import (
    BestMove,
    HandshakeAck,
    ReadyAck,
    SearchInfo,
    ThinkingInfo,
    Unrecognized,
    classify,
)


def test_acks() -> None:
    assert classify("usiok") == HandshakeAck()
    assert classify("readyok") == ReadyAck()
    assert classify("  readyok \r\n") == ReadyAck()


def test_empty_and_blank_lines() -> None:
    assert classify("") == Unrecognized("")
    assert classify("   \t ") == Unrecognized("")


def test_unknown_line_is_trimmed() -> None:
    assert classify("  id name Foo  ") == Unrecognized("id name Foo")
    # exact match only
    assert classify("usiok now") == Unrecognized("usiok now")


def test_bestmove() -> None:
    assert classify("bestmove 7g7f") == BestMove("7g7f", None)


def test_bestmove_with_ponder() -> None:
    assert classify("bestmove 7g7f ponder 3c3d") == BestMove(move="7g7f", ponder="3c3d")


@pytest.mark.parametrize("line", ["bestmove resign", "bestmove win"])
def test_bestmove_special_tokens_pass_through(line) -> None:
    assert classify(line) == BestMove(line.split()[1])


def test_bestmove_without_move_is_unrecognized() -> None:
    assert classify("bestmove") == Unrecognized("bestmove")


def test_bestmove_ponder_without_move_is_ignored() -> None:
    assert classify("bestmove 7g7f ponder") == BestMove("7g7f", None)
    assert classify("bestmove 7g7f foo 3c3d") == BestMove("7g7f", None)


def test_full_info_line() -> None:
    resp = classify("info depth 5 score cp 100 nodes 1000 nps 50000 time 20 pv 7g7f 3c3d")
    assert resp == SearchInfo(
        ThinkingInfo(depth=5, score_cp=100, nodes=1000, nps=50000, time=20, pv=["7g7f", "3c3d"])
    )


def test_info_keyword_order_does_not_matter() -> None:
    a = classify("info depth 5 score cp 100 nodes 1000 nps 50000 time 20 pv 7g7f 3c3d")
    b = classify("info time 20 nps 50000 nodes 1000 score cp 100 depth 5 pv 7g7f 3c3d")
    assert a == b


def test_info_pv_consumes_the_rest() -> None:
    resp = classify("info pv 7g7f depth 9 3c3d")
    assert resp.info.pv == ["7g7f", "depth", "9", "3c3d"]
    assert resp.info.depth is None


def test_info_negative_score() -> None:
    assert classify("info depth 3 score cp -245").info.score_cp == -245


def test_info_non_cp_score_is_skipped() -> None:
    resp = classify("info depth 12 score mate 3 nodes 10 pv 1a1b")
    assert resp.info.score_cp is None
    assert resp.info.depth == 12
    assert resp.info.nodes == 10
    assert resp.info.pv == ["1a1b"]


def test_info_bad_numbers_leave_fields_empty() -> None:
    resp = classify("info depth x nodes -5 nps 1.5 time 7")
    assert resp == SearchInfo(ThinkingInfo(time=7))


def test_info_numbers_are_plain_ascii_digits() -> None:
    resp = classify("info depth 1_0 nodes ３ nps ١٢ time +5 score cp -7")
    assert resp == SearchInfo(ThinkingInfo(time=5, score_cp=-7))
    assert classify("info score cp 1_000") == SearchInfo(ThinkingInfo())


def test_info_truncated_keywords() -> None:
    assert classify("info depth") == SearchInfo(ThinkingInfo())
    assert classify("info score cp") == SearchInfo(ThinkingInfo())
    assert classify("info pv") == SearchInfo(ThinkingInfo())


def test_info_unknown_keywords_are_skipped() -> None:
    resp = classify("info seldepth 7 multipv 1 depth 4 hashfull 10 string hello")
    assert resp.info.depth == 4


def test_info_without_fields() -> None:
    assert classify("info") == SearchInfo(ThinkingInfo())


def test_bestmove_built_from_tokens_round_trips() -> None:
    for move, ponder in [("7g7f", "3c3d"), ("P*5e", None), ("8h2b+", "3a2b")]:
        line = f"bestmove {move}" + (f" ponder {ponder}" if ponder else "")
        assert classify(line) == BestMove(move, ponder)


def test_random_lines_always_classify() -> None:
    rng = random.Random(1234)
    vocab = [
        "info", "bestmove", "ponder", "score", "cp", "mate", "depth", "nodes", "nps",
        "time", "pv", "usiok", "readyok", "-", "7g7f", "-12", "999999999999999999999",
        "x", "", "\t", "1.5", "１２",
    ]
    kinds = (HandshakeAck, ReadyAck, BestMove, SearchInfo, Unrecognized)
    for _ in range(2000):
        tokens = [rng.choice(vocab) for _ in range(rng.randint(0, 8))]
        if rng.random() < 0.5:
            tokens.insert(0, rng.choice(["info", "bestmove"]))
        line = " ".join(tokens)
        assert isinstance(classify(line), kinds)


def test_random_bytes_always_classify() -> None:
    rng = random.Random(99)
    kinds = (HandshakeAck, ReadyAck, BestMove, SearchInfo, Unrecognized)
    for _ in range(500):
        line = "".join(chr(rng.randint(0, 0x2FF)) for _ in range(rng.randint(0, 40)))
        assert isinstance(classify(line), kinds)
        assert isinstance(classify("info " + line), kinds)
