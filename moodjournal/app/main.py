#moodjournal/app/main.py
from __future__ import annotations
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from moodjournal.core.config import CORS_ORIGINS, LOG_LEVEL
from moodjournal.app.routes_analysis import router as analysis_router
from moodjournal.app.routes_health import router as health_router
from moodjournal.app.routes_recording import router as recording_router
from moodjournal.app.routes_voice import router as voice_router
from moodjournal.app.schemas import error_response
from moodjournal.exceptions import JournalError
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
)

logger = logging.getLogger(__name__)


async def _journal_error_handler(request: Request, exc: JournalError) -> JSONResponse:
    # 의존성 생성 단계(ConfigError 등)에서 올라온 예외도 같은 형식으로 응답
    logger.error("요청 처리 실패 (%s): %s", request.url.path, exc)
    return JSONResponse(error_response(exc).model_dump())


def create_app() -> FastAPI:
    app = FastAPI(
        title="Mood Journal",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(analysis_router)
    app.include_router(health_router)
    app.include_router(recording_router)
    app.include_router(voice_router)
    app.add_exception_handler(JournalError, _journal_error_handler)

    logger.info("FastAPI 앱이 초기화되었습니다. (log_level=%s)", LOG_LEVEL)
    return app

app = create_app()
