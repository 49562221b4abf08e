"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from decimal import Decimal
from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → goldvault/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수"""

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"
    SYNC_BATCH_SIZE: int = 500


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
    DEFAULT_DB: Path = DATA_DIR / "goldvault.db"


class AmountRules:
    """금 수량 규칙 (단위: 그램)"""

    DECIMAL_PLACES: int = 3  # 밀리그램 단위까지 허용
    QUANTUM: Decimal = Decimal("0.001")
    MG_PER_GRAM: int = 1000
    MAX_AMOUNT: Decimal = Decimal("1000000")


class KaratRules:
    """순도(karat) 규칙"""

    MIN_KARAT: int = 1
    MAX_KARAT: int = 24


class AuditActions:
    """감사 로그 action 이름"""

    TRANSACTION_CREATED: str = "External Vault Transaction"
    TRANSACTION_DELETED: str = "External Vault Transaction Deleted"
    STOCK_SYNCED: str = "External Vault Stock Sync"

    ENTITY_TYPE: str = "external_vault"


class VaultEvents:
    """실시간 브로드캐스트 이벤트 이름"""

    TRANSACTION_CREATED: str = "vault.transaction.created"
    TRANSACTION_DELETED: str = "vault.transaction.deleted"
    STOCK_UPDATED: str = "vault.stock.updated"
    STOCK_SYNCED: str = "vault.stock.synced"
