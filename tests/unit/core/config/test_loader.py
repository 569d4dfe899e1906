"""
core/config/loader.py 테스트

settings.yaml 로드, 검증, 환경 변수 덮어쓰기 테스트
"""

from pathlib import Path

import pytest

from core.config.loader import (
    AppSettings,
    Settings,
    SettingsLoadError,
    get_settings,
    load_settings,
)
from core.constants import Defaults, EnvVars, Paths


def _write(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


class TestAppSettings:
    """AppSettings 데이터클래스 테스트"""

    def test_defaults(self) -> None:
        """기본값"""
        settings = AppSettings(db_path=Path("ledger.db"))

        assert settings.log_level == Defaults.LOG_LEVEL
        assert settings.web_port == Defaults.WEB_PORT
        assert settings.default_book_name == Defaults.DEFAULT_BOOK_NAME

    def test_frozen(self) -> None:
        """불변성 확인"""
        settings = AppSettings(db_path=Path("ledger.db"))

        with pytest.raises(AttributeError):
            settings.log_level = "DEBUG"  # type: ignore


class TestLoadSettings:
    """load_settings 테스트"""

    def test_full_file(self, temp_dir: Path) -> None:
        """모든 섹션 로드"""
        path = _write(
            temp_dir / "settings.yaml",
            """
database:
  path: data/books.db
logging:
  level: debug
web:
  host: 0.0.0.0
  port: 9000
ledger:
  default_book_name: MAIN
""",
        )

        settings = load_settings(path)

        # 상대 경로는 설정 파일 기준
        assert settings.db_path == temp_dir / "data" / "books.db"
        assert settings.log_level == "DEBUG"
        assert settings.web_host == "0.0.0.0"
        assert settings.web_port == 9000
        assert settings.default_book_name == "MAIN"

    def test_empty_file_uses_defaults(self, temp_dir: Path) -> None:
        """빈 파일은 기본값"""
        path = _write(temp_dir / "settings.yaml", "")

        settings = load_settings(path)

        assert settings.db_path == Paths.LEDGER_DB
        assert settings.log_level == Defaults.LOG_LEVEL

    def test_absolute_db_path(self, temp_dir: Path) -> None:
        db_file = temp_dir / "abs.db"
        path = _write(temp_dir / "settings.yaml", f"database:\n  path: {db_file.as_posix()}\n")

        assert load_settings(path).db_path == db_file

    def test_explicit_missing_file(self, temp_dir: Path) -> None:
        """명시 경로 파일 없음"""
        with pytest.raises(SettingsLoadError, match="찾을 수 없습니다"):
            load_settings(temp_dir / "missing.yaml")

    def test_invalid_yaml(self, temp_dir: Path) -> None:
        path = _write(temp_dir / "settings.yaml", "database: [unclosed")

        with pytest.raises(SettingsLoadError, match="파싱 실패"):
            load_settings(path)

    def test_top_level_must_be_mapping(self, temp_dir: Path) -> None:
        path = _write(temp_dir / "settings.yaml", "- a\n- b\n")

        with pytest.raises(SettingsLoadError, match="매핑"):
            load_settings(path)

    def test_invalid_log_level(self, temp_dir: Path) -> None:
        path = _write(temp_dir / "settings.yaml", "logging:\n  level: LOUD\n")

        with pytest.raises(SettingsLoadError, match="로그 레벨"):
            load_settings(path)

    def test_invalid_port(self, temp_dir: Path) -> None:
        path = _write(temp_dir / "settings.yaml", "web:\n  port: eighty\n")

        with pytest.raises(SettingsLoadError, match="web.port"):
            load_settings(path)

    def test_env_settings_path(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """환경 변수로 설정 파일 경로 지정"""
        path = _write(temp_dir / "custom.yaml", "logging:\n  level: WARNING\n")
        monkeypatch.setenv(EnvVars.SETTINGS_PATH, str(path))

        assert load_settings().log_level == "WARNING"

    def test_env_db_path_override(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """환경 변수 DB 경로가 파일 설정보다 우선"""
        path = _write(temp_dir / "settings.yaml", "database:\n  path: other.db\n")
        monkeypatch.setenv(EnvVars.DB_PATH, str(temp_dir / "env.db"))

        assert load_settings(path).db_path == temp_dir / "env.db"


class TestSettings:
    """Settings 싱글턴 테스트"""

    def test_singleton(self, temp_dir: Path) -> None:
        path = _write(temp_dir / "settings.yaml", "web:\n  port: 8100\n")

        first = get_settings(path)
        second = get_settings()

        assert first is second
        assert second.web_port == 8100

    def test_reset(self, temp_dir: Path) -> None:
        """reset 후 다시 로드"""
        first = _write(temp_dir / "a.yaml", "web:\n  port: 8100\n")
        second = _write(temp_dir / "b.yaml", "web:\n  port: 8200\n")

        assert get_settings(first).web_port == 8100
        Settings.reset()
        assert get_settings(second).web_port == 8200
