"""
Retrieval adapter - local reference notes for target universities.

The detailed-report prompt is augmented with these notes before Gemini's own
search grounding runs. Lookup is purely in-memory and never raises: unknown
names get a neutral placeholder line so the prompt still mentions them.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from questio.observability.logging import get_logger
from questio.observability.telemetry import counter

logger = get_logger(__name__)

REFERENCE_NOTES: dict[str, str] = {
    "가천대": "약술형 논술. 수학 I·II 범위에서 10문항 내외를 짧은 시간에 풀어야 하며, 풀이 과정보다 정확한 답과 핵심 식이 채점의 중심이다.",
    "수원대": "약술형 논술. 교과서 예제 수준의 단답형 문항이 다수 출제되어 계산 실수 한 번이 당락을 가른다.",
    "상명대": "약술형 논술. 정의와 정리를 정확히 인용해 근거를 밝히는 서술을 요구하며, 개념 설명형 문항 비중이 높다.",
    "한국공학대": "약술형 논술. 수능 3~4점 난도와 유사한 계산형 문항이 많고, 공학 계열 지원자의 연산 속도를 평가한다.",
    "한양대(에리카)": "미적분 중심 계산형 논술. 정적분 활용과 극한 계산 문항이 반복 출제되며, 답안은 간결한 식 전개가 유리하다.",
    "건국대": "미적분 포함 논술. 함수의 증가·감소와 연속성 등 성질을 논리적으로 연결하는 추론 문항이 핵심이다.",
    "단국대": "미적분 포함 논술. 치환적분·부분적분 등 공식 적용 문항이 다양하게 출제되며 시간 배분이 중요하다.",
    "아주대": "미적분 포함 논술. 소문항이 이어지는 긴 증명형 문항이 많아 앞 문항 결과를 활용하는 구조 파악이 필요하다.",
    "숙명여대": "미적분 포함 논술. 논리적 비약 없이 단계별 근거를 쓰는 답안 서술의 완성도를 세밀하게 채점한다.",
    "한양대": "상위권 계산형 논술. 1교시 안에 다량의 미적분 계산을 처리해야 하며, 부분 점수보다 최종 결과의 정확성이 중요하다.",
    "서강대": "상위권 논증형 논술. 수학 I부터 확률과 통계까지 통합된 제시문을 바탕으로 엄밀한 증명을 요구한다.",
    "성균관대": "상위권 논증형 논술. 제시문의 정의를 새로 해석해 적용하는 추론형 문항이 많고 학문적 깊이를 평가한다.",
    "중앙대": "상위권 논술. 확률과 통계 파트에서 경우의 수 분류와 복잡한 연산이 당락을 결정한다.",
    "연세대": "최상위 논증형 논술. 기하를 포함한 전 범위에서 증명 중심 문항이 출제되며 답안의 엄밀성이 변별 요소다.",
    "고려대": "최상위 논술. 신설 전형으로 전 영역에 걸친 고른 논리력과 서술 완결성을 측정한다.",
    "서울시립대": "상위권 계산형 논술. 공간도형·벡터 등 기하 연산과 공간 지각력을 요구하는 문항이 특징이다.",
}

EMPTY_TARGETS_NOTE = (
    "등록된 지망 대학 정보가 없습니다. 일반적인 수리논술 출제 경향(교과 범위 내 증명·계산 혼합)을 기준으로 분석하십시오."
)
UNKNOWN_TARGET_NOTE = "별도 참고 자료가 없습니다. 최신 모집요강과 기출 경향을 검색해 보완하십시오."

MIN_PARTIAL_QUERY_CHARS = 2
_FULL_NAME_SUFFIX = re.compile(r"(대학교|대학)$")


def _lookup(name: str) -> str | None:
    if name in REFERENCE_NOTES:
        return REFERENCE_NOTES[name]

    # "연세대학교" -> "연세대"
    short = _FULL_NAME_SUFFIX.sub("대", name)
    if short in REFERENCE_NOTES:
        return REFERENCE_NOTES[short]

    # A lone syllable such as "대" would match every key
    if len(short) < MIN_PARTIAL_QUERY_CHARS:
        return None
    matches = [key for key in REFERENCE_NOTES if short in key]
    if not matches:
        return None
    # "한양" -> 한양대, not 한양대(에리카)
    return REFERENCE_NOTES[min(matches, key=len)]


def retrieve_reference_text(target_names: Iterable[str]) -> str:
    """
    Build the reference blob for a list of target universities.

    Args:
        target_names: Free-text university names in preference order.

    Returns:
        One line per non-blank name (its note, or a neutral placeholder),
        or a neutral paragraph when no usable name was given. Never empty.
    """
    lines: list[str] = []
    try:
        for raw_name in target_names:
            name = (raw_name or "").strip()
            if not name:
                continue
            note = _lookup(name)
            if note is None:
                counter("retrieval.miss")
                note = UNKNOWN_TARGET_NOTE
            else:
                counter("retrieval.hit")
            lines.append(f"- {name}: {note}")
    except Exception as e:
        # Best effort: the report still generates without reference notes
        logger.warning("Reference lookup failed: %s", e)
        counter("retrieval.error")

    if not lines:
        return EMPTY_TARGETS_NOTE
    return "\n".join(lines)
