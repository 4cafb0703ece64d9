"""Adaptive Workout FastAPI 서버

운동 추천 / 세션 피드백 학습 API
포트: 8000
"""

import os
from dotenv import load_dotenv
load_dotenv(override=True)

# LangSmith 프로젝트 분리
os.environ["LANGSMITH_PROJECT"] = "adaptive-workout"

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from shared.utils import get_logger
from adaptive_workout import __version__
from adaptive_workout.config import settings
from adaptive_workout.exceptions import (
    DuplicateSessionError,
    InvalidInputError,
    PreferenceUpdateConflictError,
)
from adaptive_workout.models import (
    SessionFeedbackRequest,
    SessionFeedbackResult,
    WorkoutRecommendation,
    WorkoutRecommendationInput,
)
from adaptive_workout.pipeline import WorkoutRecommendationPipeline

logger = get_logger("adaptive_workout", settings.log_level)

app = FastAPI(
    title="Adaptive Workout",
    description="피드백 기반 적응형 운동 추천 API",
    version=__version__,
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 파이프라인 인스턴스
pipeline = WorkoutRecommendationPipeline()


@app.get("/health")
async def health_check():
    """헬스 체크"""
    return {"status": "healthy", "service": "adaptive-workout"}


@app.post("/api/v1/recommend-workout", response_model=WorkoutRecommendation)
def recommend_workout(input_data: WorkoutRecommendationInput):
    """
    적응형 운동 추천 API

    입력:
    - user: 사용자 정보 (ID, 경험 수준, 체중)
    - goal: 운동 목표 (diet, strength, body, fitness, stamina)
    - target_duration_minutes: 목표 운동 시간 (15-90분)
    - motion_quality: 운동별 모션 품질 신호 (선택)

    출력:
    - WorkoutRecommendation
    """
    try:
        return pipeline.run(input_data)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.exception(f"운동 추천 실패: user={input_data.user.user_id}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/v1/session-feedback", response_model=SessionFeedbackResult)
def submit_session_feedback(request: SessionFeedbackRequest):
    """
    세션 피드백 제출 API

    세션 피드백을 저장하고 운동별 선호도/효과도를 학습한다.
    선호도 갱신 충돌이 계속되면 409 (재시도 가능).
    """
    try:
        return pipeline.record_feedback(request.user, request.feedback)
    except DuplicateSessionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PreferenceUpdateConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.exception(f"세션 피드백 처리 실패: user={request.user.user_id}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/v1/preferences/{user_id}")
def get_preferences(user_id: str):
    """사용자 운동 선호도 목록 및 통계"""
    ledger = pipeline.ledger
    preferences = ledger.list_preferences(user_id)
    return {
        "user_id": user_id,
        "stats": ledger.stats(user_id).model_dump(),
        "disliked_exercises": ledger.disliked_exercises(user_id),
        "preferences": [
            {
                **p.model_dump(exclude={"version"}),
                "confidence_score": p.confidence_score,
                "preference_label": p.preference_label,
            }
            for p in preferences
        ],
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "adaptive_workout.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
    )
