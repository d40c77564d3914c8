"""
Prompt Management Module

Loads prompt templates from the .txt files next to this module and fills
them from a SurveyAnswers. Template files use str.format placeholders, so
literal braces inside them are doubled.
"""

from __future__ import annotations

from pathlib import Path

from questio.config import PROMPT_TARGET_MAX_CHARS, REPORT_SECTION_COUNT
from questio.recommend.models import SolvingStyle, SurveyAnswers
from questio.utils.redaction import sanitize_for_prompt

# Get the prompts directory
PROMPTS_DIR = Path(__file__).parent

PERSONA_IMAGE_TEMPLATES = {
    SolvingStyle.CALCULATION: "persona_image_calculation",
    SolvingStyle.ARGUMENT: "persona_image_argument",
}

# Appended to every image prompt; the renderer cannot be trusted with Hangul
NO_TEXT_CONSTRAINT = (
    "STRICT RULE: the image must contain absolutely no text, letters, words, numbers, "
    "digits, formulas, symbols, captions, signage or watermarks of any language. "
    "Purely visual."
)


def report_outline(target_list: str, solving_style: str, writing_concern: str) -> list[str]:
    """The fixed 15-topic outline of the strategy report."""
    return [
        "표지 및 리포트 개요",
        "데이터 기반 심층 성향 분석",
        f"{target_list} 합격 가능성 분석",
        f"{solving_style} 강점 극대화 포지셔닝",
        f"{writing_concern} 해결 시간 운용 전략",
        "1~4주차: 개념 재구조화",
        "5~8주차: 심화 논증 정복",
        "9~12주차: 대학별 파이널 실전",
        "대학별 채점 기준표 독해법",
        "감점 방지 답안 서술 테크닉",
        "고난도 문항 발상법",
        "합격생 오답 노트 사례",
        "시험장 멘탈 관리",
        "수능 최저 및 정시 병행",
        "합격을 위한 마지막 제언",
    ]


class PromptLoader:
    """Load and cache prompt templates from files"""

    def __init__(self):
        self._cache: dict[str, str] = {}

    def load_prompt(self, prompt_name: str) -> str:
        """
        Load a prompt template from file.

        Args:
            prompt_name: Name of the prompt file (without .txt extension)

        Returns:
            Prompt template string
        """
        if prompt_name not in self._cache:
            prompt_path = PROMPTS_DIR / f"{prompt_name}.txt"

            if not prompt_path.exists():
                raise FileNotFoundError(f"Prompt file not found: {prompt_path}")

            with open(prompt_path, encoding="utf-8") as f:
                self._cache[prompt_name] = f.read()

        return self._cache[prompt_name]

    def reload(self) -> None:
        """Clear cache and reload prompts from disk"""
        self._cache.clear()


# Global instance
_loader = PromptLoader()


def _safe_targets(answers: SurveyAnswers) -> list[str]:
    targets = (sanitize_for_prompt(t, max_length=PROMPT_TARGET_MAX_CHARS) for t in answers.valid_targets())
    return [t for t in targets if t]


def _profile_fields(answers: SurveyAnswers) -> dict[str, str]:
    targets = _safe_targets(answers)
    return {
        "tier": answers.tier.value,
        "target_list": ", ".join(targets) or "미정",
        "primary_target": targets[0] if targets else "1지망 대학",
        "csat_subject": answers.csat_subject.value,
        "study_scope": ", ".join(answers.scope_labels()) or "없음",
        "solving_style": answers.solving_style.value,
        "writing_concern": answers.writing_concern.value,
    }


def build_analysis_prompt(answers: SurveyAnswers) -> str:
    """Short persona analysis prompt; embeds every survey field."""
    return _loader.load_prompt("analysis_prompt").format(**_profile_fields(answers))


def build_persona_image_prompt(answers: SurveyAnswers, persona_name: str) -> str:
    """Persona illustration prompt themed by solving style, with the no-text rule."""
    fields = _profile_fields(answers)
    template = _loader.load_prompt(PERSONA_IMAGE_TEMPLATES[answers.solving_style])
    body = template.format(
        persona_name=sanitize_for_prompt(persona_name, max_length=80),
        primary_target=fields["primary_target"],
    )
    return f"{body.strip()}\n\n{NO_TEXT_CONSTRAINT}"


def build_report_prompt(answers: SurveyAnswers, persona_name: str, reference_text: str) -> str:
    """Detailed 15-section report prompt, with retrieval notes inlined."""
    fields = _profile_fields(answers)
    outline = report_outline(
        fields["target_list"], fields["solving_style"], fields["writing_concern"]
    )
    return _loader.load_prompt("report_prompt").format(
        persona_name=sanitize_for_prompt(persona_name, max_length=80),
        reference_text=reference_text,
        section_count=REPORT_SECTION_COUNT,
        outline="\n".join(f"{i}. {topic}" for i, topic in enumerate(outline, start=1)),
        **fields,
    )


def reload_prompts() -> None:
    """Reload all prompts from disk (convenience function)"""
    _loader.reload()
