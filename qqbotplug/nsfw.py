"""Verdicts on image classification scores."""

from __future__ import annotations

from dataclasses import dataclass

HSO_IMAGE = "https://gchat.qpic.cn/gchatpic_new//--4234EDEC5F147A4C319A41149D7E0EA9/0"
THRESHOLD = 0.3


@dataclass(frozen=True)
class NsfwScores:
    """Probabilities of each category for one picture."""

    drawings: float = 0.0
    hentai: float = 0.0
    neutral: float = 0.0
    porn: float = 0.0
    sexy: float = 0.0


def _categories(p: NsfwScores) -> list[str]:
    labels = []
    if p.hentai > THRESHOLD:
        labels.append("hentai")
    if p.porn > THRESHOLD:
        labels.append("porn")
    if p.sexy > THRESHOLD:
        labels.append("hso")
    return labels


def judge(p: NsfwScores) -> str:
    """Verdict for an explicitly requested rating."""
    if p.neutral > THRESHOLD:
        return "普通哦"
    kind = "二次元" if p.drawings > THRESHOLD or p.neutral < THRESHOLD else "三次元"
    return "".join([kind, *(" " + c for c in _categories(p))])


def autojudge(p: NsfwScores) -> str | None:
    """Verdict for an unprompted check, or None when nothing is worth saying."""
    if p.neutral > THRESHOLD:
        return None
    categories = _categories(p)
    if not categories:
        return None
    kind = "二次元" if p.drawings > THRESHOLD else "三次元"
    return "".join([kind, *(" " + c for c in categories)])