import math
import re

WORDS_PER_MINUTE = 200

# CJK ideographs, kana and hangul count as one word each.
_CJK_RANGES = r"぀-ヿ㐀-䶿一-鿿가-힯豈-﫿"
_CJK_RE = re.compile(f"[{_CJK_RANGES}]")
_WORD_RE = re.compile(rf"[^\s{_CJK_RANGES}]+")


def count_words(text: str) -> int:
    return len(_CJK_RE.findall(text)) + len(_WORD_RE.findall(text))


def reading_minutes(text: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    words = count_words(text)
    if words == 0:
        return 0
    return max(1, math.ceil(words / words_per_minute))


def reading_time(text: str, words_per_minute: int = WORDS_PER_MINUTE) -> str:
    """Human-readable estimate such as ``"4 min read"``."""
    return f"{reading_minutes(text, words_per_minute)} min read"
