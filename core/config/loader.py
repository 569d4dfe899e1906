"""
설정 로더

settings.yaml 로드 및 애플리케이션 설정 생성
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from core.constants import Defaults, EnvVars, Paths

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class AppSettings:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    db_path: Path
    log_level: str = Defaults.LOG_LEVEL
    web_host: str = Defaults.WEB_HOST
    web_port: int = Defaults.WEB_PORT
    default_book_name: str = Defaults.DEFAULT_BOOK_NAME


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def _default_settings() -> AppSettings:
    return AppSettings(db_path=Paths.LEDGER_DB)


def load_settings(path: Path | None = None) -> AppSettings:
    """settings.yaml 파일 로드

    기본 경로의 파일이 없으면 기본값으로 동작.
    명시적으로 전달한 경로가 없으면 오류.

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppSettings 인스턴스

    Raises:
        SettingsLoadError: 파일이 없거나(명시 경로) 형식이 잘못된 경우
    """
    explicit = path is not None
    if path is None:
        env_path = os.environ.get(EnvVars.SETTINGS_PATH)
        if env_path:
            path = Path(env_path)
            explicit = True
        else:
            path = Paths.SETTINGS_FILE

    if not path.exists():
        if explicit:
            raise SettingsLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")
        logger.info(f"settings.yaml 없음, 기본 설정 사용: {path}")
        return _apply_env_overrides(_default_settings())

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    database = data.get("database") or {}
    web = data.get("web") or {}
    logging_config = data.get("logging") or {}
    ledger = data.get("ledger") or {}

    db_path_value = database.get("path")
    if db_path_value:
        db_path = Path(db_path_value)
        if not db_path.is_absolute():
            db_path = path.parent / db_path
    else:
        db_path = Paths.LEDGER_DB

    log_level = str(logging_config.get("level", Defaults.LOG_LEVEL)).upper()
    if log_level not in VALID_LOG_LEVELS:
        raise SettingsLoadError(
            f"유효하지 않은 로그 레벨입니다: '{log_level}'. "
            f"유효한 값: {list(VALID_LOG_LEVELS)}"
        )

    try:
        web_port = int(web.get("port", Defaults.WEB_PORT))
    except (TypeError, ValueError) as e:
        raise SettingsLoadError(f"web.port가 정수가 아닙니다: {web.get('port')}") from e

    default_book_name = str(ledger.get("default_book_name") or Defaults.DEFAULT_BOOK_NAME)

    settings = AppSettings(
        db_path=db_path,
        log_level=log_level,
        web_host=str(web.get("host", Defaults.WEB_HOST)),
        web_port=web_port,
        default_book_name=default_book_name,
    )
    return _apply_env_overrides(settings)


def _apply_env_overrides(settings: AppSettings) -> AppSettings:
    """환경 변수로 DB 경로 덮어쓰기"""
    env_db = os.environ.get(EnvVars.DB_PATH)
    if not env_db:
        return settings
    return AppSettings(
        db_path=Path(env_db),
        log_level=settings.log_level,
        web_host=settings.web_host,
        web_port=settings.web_port,
        default_book_name=settings.default_book_name,
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _settings: AppSettings | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._settings is None:
            type(self)._settings = load_settings(settings_path)

    @property
    def db_path(self) -> Path:
        """DB 경로"""
        assert self._settings is not None
        return self._settings.db_path

    @property
    def log_level(self) -> str:
        """로그 레벨"""
        assert self._settings is not None
        return self._settings.log_level

    @property
    def web_host(self) -> str:
        assert self._settings is not None
        return self._settings.web_host

    @property
    def web_port(self) -> int:
        assert self._settings is not None
        return self._settings.web_port

    @property
    def default_book_name(self) -> str:
        """기본 장부 이름"""
        assert self._settings is not None
        return self._settings.default_book_name

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._settings = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
