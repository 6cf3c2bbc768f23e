from qqbotplug.nsfw import NsfwScores, autojudge, judge


def test_judge_neutral():
    assert judge(NsfwScores(neutral=0.5, porn=0.9)) == "普通哦"


def test_judge_drawings_hentai():
    assert judge(NsfwScores(drawings=0.8, hentai=0.5)) == "二次元 hentai"


def test_judge_low_neutral_counts_as_drawing():
    assert judge(NsfwScores(neutral=0.1, drawings=0.1, porn=0.9, sexy=0.5)) == "二次元 porn hso"


def test_judge_borderline_neutral_is_real():
    assert judge(NsfwScores(neutral=0.3)) == "三次元"


def test_autojudge_neutral_is_silent():
    assert autojudge(NsfwScores(neutral=0.9, porn=0.9)) is None


def test_autojudge_no_category_is_silent():
    assert autojudge(NsfwScores(neutral=0.1, drawings=0.9)) is None


def test_autojudge_real_photo():
    assert autojudge(NsfwScores(neutral=0.1, drawings=0.1, porn=0.9)) == "三次元 porn"


def test_autojudge_drawing_all():
    result = autojudge(NsfwScores(drawings=0.5, hentai=0.4, porn=0.4, sexy=0.4))
    assert result == "二次元 hentai porn hso"