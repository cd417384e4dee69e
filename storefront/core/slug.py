"""
slug 정규화 유틸리티

상품명, 브랜드명, 태그, 컬렉션 라벨을 URL 안전한 소문자 하이픈 토큰으로 변환합니다.
"""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize(text: str | None) -> str:
    """
    텍스트를 slug로 변환합니다.

    소문자로 바꾼 뒤 [a-z0-9] 이외 문자의 연속 구간을 하이픈 하나로 치환하고,
    앞뒤 하이픈을 제거합니다. 어떤 입력에도 실패하지 않으며 멱등입니다.

    Example:
        >>> normalize("  Summer Sale -- 2024! ")
        'summer-sale-2024'
        >>> normalize(normalize("Summer Sale"))
        'summer-sale'
    """
    if not text:
        return ""
    return _NON_ALNUM.sub("-", str(text).lower()).strip("-")


def tag_variants(tag: str) -> list[str]:
    """태그의 원형, 하이픈형, 공백형을 중복 없이 반환합니다 ("new in" -> new in, new-in)."""
    raw = tag.strip().lower()
    hyphenated = normalize(raw)
    spaced = _NON_ALNUM.sub(" ", raw).strip()

    variants = []
    for value in (raw, hyphenated, spaced):
        if value and value not in variants:
            variants.append(value)
    return variants
