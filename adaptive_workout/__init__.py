"""Adaptive Workout - 적응형 운동 추천 엔진

사용 빈도: 매 추천 요청 / 매 세션 피드백 제출

주요 기능:
- 최근 피드백 기반 피트니스 프로필 계산
- 운동별 선호도/효과도 온라인 학습
- 다요인 가중 점수 기반 운동 선택 (근육군 균형)
- 세트/반복/휴식/강도 적응 조정
- 준비/메인/마무리 운동 계획 구성
"""

__version__ = "1.0.0"
