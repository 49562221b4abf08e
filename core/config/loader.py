"""
설정 로더

settings.yaml 로드 및 애플리케이션 설정 생성
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, Paths, PROJECT_ROOT


@dataclass(frozen=True)
class WebConfig:
    """Web 서버 설정"""

    secret_key: str
    host: str = Defaults.WEB_HOST
    port: int = Defaults.WEB_PORT


@dataclass(frozen=True)
class VaultConfig:
    """금고 재고 엔진 설정

    atomic_mutations:
        True면 원장 기록과 재고 반영을 하나의 DB 트랜잭션으로 묶음.
        False면 원장 기록을 먼저 커밋하고 재고 반영 실패 시 drift 상태로 남김.
    """

    atomic_mutations: bool = True
    sync_batch_size: int = Defaults.SYNC_BATCH_SIZE


@dataclass(frozen=True)
class SlackConfig:
    """운영자 알림 (Slack Webhook) 설정"""

    webhook_url: str = ""
    channel: str | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 전체 설정 (불변)"""

    db_path: Path
    web: WebConfig
    vault: VaultConfig
    slack: SlackConfig


class SettingsLoadError(Exception):
    """settings.yaml 로드 실패 예외"""

    pass


def _resolve_path(value: str | None) -> Path:
    """상대 경로는 프로젝트 루트 기준으로 변환"""
    if not value:
        return Paths.DEFAULT_DB
    if value == ":memory:":
        return Path(value)
    path = Path(value)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise SettingsLoadError(f"settings.yaml의 '{name}' 섹션 형식이 잘못되었습니다")
    return section


def parse_settings(data: dict[str, Any]) -> AppConfig:
    """딕셔너리에서 AppConfig 생성

    Raises:
        SettingsLoadError: 필수 값 누락 또는 타입 오류
    """
    database = _section(data, "database")
    web = _section(data, "web")
    vault = _section(data, "vault")
    slack = _section(data, "slack")

    secret_key = web.get("secret_key", "")
    if not secret_key:
        raise SettingsLoadError("settings.yaml의 web 섹션에 'secret_key'가 없습니다")

    try:
        port = int(web.get("port", Defaults.WEB_PORT))
        batch_size = int(vault.get("sync_batch_size", Defaults.SYNC_BATCH_SIZE))
    except (TypeError, ValueError) as e:
        raise SettingsLoadError(f"settings.yaml 숫자 값 파싱 실패: {e}") from e

    if batch_size <= 0:
        raise SettingsLoadError("vault.sync_batch_size는 0보다 커야 합니다")

    return AppConfig(
        db_path=_resolve_path(database.get("path")),
        web=WebConfig(
            secret_key=secret_key,
            host=web.get("host", Defaults.WEB_HOST),
            port=port,
        ),
        vault=VaultConfig(
            atomic_mutations=bool(vault.get("atomic_mutations", True)),
            sync_batch_size=batch_size,
        ),
        slack=SlackConfig(
            webhook_url=slack.get("webhook_url") or "",
            channel=slack.get("channel"),
        ),
    )


def load_settings(path: Path | None = None) -> AppConfig:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig 인스턴스

    Raises:
        SettingsLoadError: 파일이 없거나 형식이 잘못된 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        raise SettingsLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        raise SettingsLoadError("settings.yaml이 비어 있습니다")
    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    return parse_settings(data)


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            type(self)._config = load_settings(settings_path)

    @property
    def config(self) -> AppConfig:
        """전체 설정"""
        assert self._config is not None
        return self._config

    @property
    def db_path(self) -> Path:
        """DB 경로"""
        return self.config.db_path

    @property
    def web_secret_key(self) -> str:
        """Web JWT Secret Key"""
        return self.config.web.secret_key

    @property
    def vault(self) -> VaultConfig:
        """금고 엔진 설정"""
        return self.config.vault

    @property
    def slack(self) -> SlackConfig:
        """Slack 알림 설정"""
        return self.config.slack

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
