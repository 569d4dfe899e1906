"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화
"""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    app: str = Field(..., description="애플리케이션 이름")
    version: str = Field(..., description="버전")


class MessageResponse(BaseModel):
    """단순 처리 결과 응답"""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """도메인 오류 응답"""

    success: bool = False
    error: str = Field(..., description="오류 종류 (validation_error 등)")
    message: str
