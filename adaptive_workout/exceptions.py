"""적응형 운동 추천 엔진 예외

- InvalidInputError: 계산 전에 거부되는 잘못된 입력 (호출자에게 검증 실패로 노출)
- ConcurrencyConflictError: 선호도 저장 시 버전 불일치
- PreferenceUpdateConflictError: 재시도 후에도 충돌 (일시적 실패)
- DuplicateSessionError: 같은 세션 피드백 중복 제출

피드백 부족은 예외가 아니다 (기본 프로필 사용).
카탈로그 미등록 운동은 기본 템플릿으로 대체하고 로그만 남긴다.
"""

from typing import Optional


class AdaptiveWorkoutError(Exception):
    """엔진 기본 예외"""


class InvalidInputError(AdaptiveWorkoutError, ValueError):
    """잘못된 목표/시간/사용자/피드백 값"""


class ConcurrencyConflictError(AdaptiveWorkoutError):
    """선호도 행 버전 불일치 (다른 요청이 먼저 수정함)"""

    def __init__(
        self,
        user_id: str,
        exercise_name: str,
        expected_version: Optional[int],
        actual_version: Optional[int] = None,
    ):
        self.user_id = user_id
        self.exercise_name = exercise_name
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"선호도 버전 충돌: user={user_id}, exercise={exercise_name}, "
            f"expected={expected_version}, actual={actual_version}"
        )


class PreferenceUpdateConflictError(AdaptiveWorkoutError):
    """재시도 횟수를 넘긴 선호도 갱신 충돌"""

    def __init__(self, user_id: str, exercise_name: str, attempts: int):
        self.user_id = user_id
        self.exercise_name = exercise_name
        self.attempts = attempts
        super().__init__(
            f"선호도 갱신 실패 ({attempts}회 충돌): user={user_id}, exercise={exercise_name}"
        )


class DuplicateSessionError(InvalidInputError):
    """이미 저장된 세션 피드백"""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"이미 저장된 세션입니다: {session_id}")
