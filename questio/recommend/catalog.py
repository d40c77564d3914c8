"""
University catalog for the 2027 math-essay admission cycle.

Order matters: the scoring engine sorts stably, so equal scores keep the
order below.
"""

from __future__ import annotations

from questio.recommend.models import ScopeTag, SolvingStyle, Tier, University

_M1, _M2 = ScopeTag.MATH_1, ScopeTag.MATH_2
_CALC, _PROB, _GEO = ScopeTag.CALCULUS, ScopeTag.PROBABILITY, ScopeTag.GEOMETRY

_BASIC = frozenset({_M1, _M2})
_WITH_CALCULUS = frozenset({_M1, _M2, _CALC})
_WITH_PROBABILITY = frozenset({_M1, _M2, _CALC, _PROB})
_FULL_RANGE = frozenset({_M1, _M2, _CALC, _PROB, _GEO})

_CALCULATION = SolvingStyle.CALCULATION
_ARGUMENT = SolvingStyle.ARGUMENT


UNIVERSITIES: tuple[University, ...] = (
    # 약술형
    University("가천대", 1, Tier.SHORT_ANSWER, _BASIC, _CALCULATION, "약술형 논술의 메카, 빠르고 정확한 연산이 핵심"),
    University("수원대", 1, Tier.SHORT_ANSWER, _BASIC, _CALCULATION, "단답형 중심, 실수 없는 연산력이 합격의 열쇠"),
    University("상명대", 1, Tier.SHORT_ANSWER, _BASIC, _ARGUMENT, "교과 개념의 정확한 정의와 서술 중시"),
    University("한국공학대", 1, Tier.SHORT_ANSWER, _BASIC, _CALCULATION, "공학적 계산 능력과 수능형 문항 익숙도 중요"),
    # 중위권
    University("한양대(에리카)", 2, Tier.MIDDLE, _WITH_CALCULUS, _CALCULATION, "전통적인 미적분 계산 비중이 높음"),
    University("건국대", 2, Tier.MIDDLE, _WITH_CALCULUS, _ARGUMENT, "함수의 성질을 이용한 논리적 추론 강조"),
    University("단국대", 2, Tier.MIDDLE, _WITH_CALCULUS, _CALCULATION, "다양한 미적분 공식의 숙달과 적용 능력 요구"),
    University("아주대", 2, Tier.MIDDLE, _WITH_CALCULUS, _ARGUMENT, "긴 호흡의 논증과 증명 문항이 당락 결정"),
    University("숙명여대", 2, Tier.MIDDLE, _WITH_CALCULUS, _ARGUMENT, "정교한 답안 서술과 논리적 비약 방지 중요"),
    # 상위권
    University("한양대", 2, Tier.TOP, _WITH_CALCULUS, _CALCULATION, "극강의 미적분 계산량, 시간 내 풀이 능력이 최우선"),
    University("서강대", 3, Tier.TOP, _WITH_PROBABILITY, _ARGUMENT, "전범위 통합 사고력과 엄밀한 논증 요구"),
    University("성균관대", 3, Tier.TOP, _WITH_PROBABILITY, _ARGUMENT, "제시문 기반의 추론과 학문적 깊이 평가"),
    University("중앙대", 3, Tier.TOP, _WITH_PROBABILITY, _CALCULATION, "확통 파트의 복잡한 연산 및 케이스 분류가 핵심"),
    University("연세대", 4, Tier.TOP, _FULL_RANGE, _ARGUMENT, "기하와 증명을 통한 독보적인 변별력 행사"),
    University("고려대", 4, Tier.TOP, _FULL_RANGE, _ARGUMENT, "신설 전형, 전 영역에 걸친 고른 논리력 측정"),
    University("서울시립대", 4, Tier.TOP, _FULL_RANGE, _CALCULATION, "공대 중심의 기하 연산과 공간 지각력 요구"),
)


def find_university(name: str) -> University | None:
    """Exact-name lookup in the catalog."""
    for university in UNIVERSITIES:
        if university.name == name:
            return university
    return None
