"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → ledgerbalance/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent

APP_NAME: str = "LedgerBalance"
APP_VERSION: str = "1.0.0"


class Defaults:
    """기본값 상수"""

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # 최초 조회 시 자동 생성되는 기본 장부 이름
    DEFAULT_BOOK_NAME: str = "CASHBOOK"


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    LEDGER_DB: Path = DATA_DIR / "ledgerbalance.db"


class EnvVars:
    """환경 변수 이름"""

    DB_PATH: str = "LEDGERBALANCE_DB_PATH"
    SETTINGS_PATH: str = "LEDGERBALANCE_SETTINGS"
