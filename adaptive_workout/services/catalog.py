"""운동 카탈로그 서비스

data/exercise/*.json 을 최초 접근 시 1회 로드하여 불변 모델로 보관한다.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from adaptive_workout.config import settings
from adaptive_workout.models import ExerciseTemplate, ExperienceTier, PhaseConfig

logger = logging.getLogger(__name__)

DEFAULT_GOAL_FIT = 0.6
DEFAULT_EXPERIENCE = "beginner"
MIN_MAIN_MINUTES = 5


class ExerciseCatalog:
    """운동 템플릿 / 목표별 후보군 / 경험 수준 규칙 조회

    사용 예시:
        catalog = ExerciseCatalog()
        template = catalog.get_template("squat")
    """

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir) if data_dir else settings.data_dir
        self._exercises: Optional[Dict[str, ExerciseTemplate]] = None
        self._generic: Optional[Dict] = None
        self._warmup: List[ExerciseTemplate] = []
        self._cooldown: List[ExerciseTemplate] = []
        self._programs: Optional[Dict] = None
        self._tiers: Dict[str, ExperienceTier] = {}
        self._phases: Dict[str, PhaseConfig] = {}

    def _load_json(self, filename: str) -> Dict:
        path = self.data_dir / "exercise" / filename
        if not path.exists():
            raise FileNotFoundError(f"카탈로그 파일을 찾을 수 없습니다: {path}")

        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    @staticmethod
    def _build_templates(section: Dict) -> List[ExerciseTemplate]:
        templates = []
        for ex_id, ex_data in section.items():
            if ex_id.startswith("_"):  # _metadata 등 제외
                continue
            templates.append(ExerciseTemplate(id=ex_id, **ex_data))
        return templates

    def _ensure_exercises(self) -> Dict[str, ExerciseTemplate]:
        if self._exercises is not None:
            return self._exercises

        raw = self._load_json("exercises.json")
        self._exercises = {t.id: t for t in self._build_templates(raw.get("exercises", {}))}
        self._generic = raw.get("generic", {})
        self._warmup = self._build_templates(raw.get("warmup", {}))
        self._cooldown = self._build_templates(raw.get("cooldown", {}))
        logger.info(f"운동 카탈로그 로드: {len(self._exercises)}개")
        return self._exercises

    def _ensure_programs(self) -> Dict:
        if self._programs is not None:
            return self._programs

        raw = self._load_json("programs.json")
        self._tiers = {
            name: ExperienceTier(name=name, **tier)
            for name, tier in raw.get("experience_tiers", {}).items()
        }
        self._phases = {
            key: PhaseConfig(**phase) for key, phase in raw.get("phases", {}).items()
        }
        self._programs = raw
        return raw

    # 운동 템플릿

    def get_template(self, exercise_id: str) -> ExerciseTemplate:
        """운동 템플릿 (미등록 운동은 기본 템플릿)"""
        exercises = self._ensure_exercises()
        template = exercises.get(exercise_id)
        if template is not None:
            return template

        logger.warning(f"카탈로그에 없는 운동 '{exercise_id}'. 기본 템플릿 사용")
        return ExerciseTemplate(id=exercise_id, is_generic=True, **self._generic)

    def difficulty_rating(self, exercise_id: str) -> float:
        """운동 권장 피트니스 레벨 (0-1, 없으면 0.5)"""
        return self.get_template(exercise_id).rating

    @property
    def warmup(self) -> List[ExerciseTemplate]:
        self._ensure_exercises()
        return list(self._warmup)

    @property
    def cooldown(self) -> List[ExerciseTemplate]:
        self._ensure_exercises()
        return list(self._cooldown)

    # 목표 / 경험 수준

    def goal_pool(self, goal: str) -> List[str]:
        """목표별 후보 운동 (미등록 목표는 기본 후보군)"""
        programs = self._ensure_programs()
        pool = programs.get("goal_pools", {}).get(goal)
        if pool is None:
            logger.warning(f"알 수 없는 목표 '{goal}'. 기본 후보군 사용")
            pool = programs.get("default_pool", [])
        return list(pool)

    def goal_fit(self, goal: str, exercise_id: str) -> float:
        """목표 적합도 (표에 없으면 0.6)"""
        fit_matrix = self._ensure_programs().get("goal_fit", {})
        return fit_matrix.get(goal, {}).get(exercise_id, DEFAULT_GOAL_FIT)

    def experience_tier(self, experience: Optional[str]) -> ExperienceTier:
        """경험 수준 규칙 (미등록 수준은 beginner)"""
        self._ensure_programs()
        tier = self._tiers.get(experience or DEFAULT_EXPERIENCE)
        if tier is None:
            logger.warning(f"알 수 없는 경험 수준 '{experience}'. {DEFAULT_EXPERIENCE} 사용")
            tier = self._tiers[DEFAULT_EXPERIENCE]
        return tier

    def phase(self, key: str) -> PhaseConfig:
        self._ensure_programs()
        return self._phases.get(key, PhaseConfig(name=key))

    def main_duration(self, target_duration_minutes: int) -> int:
        """메인 운동 시간 = 전체 - 준비운동 - 마무리운동 (최소 5분)"""
        warmup = self.phase("warmup").duration_minutes or 0
        cooldown = self.phase("cooldown").duration_minutes or 0
        return max(MIN_MAIN_MINUTES, target_duration_minutes - warmup - cooldown)


_default_catalog: Optional[ExerciseCatalog] = None


def get_catalog() -> ExerciseCatalog:
    """기본 데이터 디렉토리의 공유 카탈로그"""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = ExerciseCatalog()
    return _default_catalog
