from photo_tagger.core.classify.keywords import extract_top_keywords, tokenize


def test_frequency_then_first_occurrence():
    assert extract_top_keywords("交通保安施設 設置状況 交通保安施設", 2) == ["交通保安施設", "設置状況"]


def test_ties_keep_text_order():
    assert extract_top_keywords("beta alpha gamma", 3) == ["beta", "alpha", "gamma"]
    assert extract_top_keywords("b a a b c", 2) == ["b", "a"]


def test_punctuation_is_a_boundary():
    assert tokenize("舗設状況、転圧（1回目）・温度") == ["舗設状況", "転圧", "1回目", "温度"]
    assert tokenize("roller_TZ-703, ok.") == ["roller", "TZ", "703", "ok"]


def test_fewer_tokens_than_k():
    assert extract_top_keywords("転圧 転圧", 5) == ["転圧"]


def test_blank_input_and_zero_k():
    assert extract_top_keywords("", 3) == []
    assert extract_top_keywords("   \n\t ", 3) == []
    assert extract_top_keywords("a b", 0) == []
