"""
pytest 공통 fixture 정의

임시 DB, settings.yaml, 테스트용 Actor
"""

import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.types import Actor


TEST_SECRET_KEY = "test_jwt_secret_key_xyz_0123456789abcdef"


@pytest.fixture
def secret_key() -> str:
    """테스트 settings.yaml의 JWT secret"""
    return TEST_SECRET_KEY


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성 (임시 DB 경로 사용)"""
    db_path = (temp_dir / "vault.db").as_posix()
    settings_content = f"""# 테스트용 settings.yaml
database:
  path: "{db_path}"

web:
  secret_key: "{TEST_SECRET_KEY}"
  host: 127.0.0.1
  port: 8123

vault:
  atomic_mutations: true
  sync_batch_size: 2

slack:
  webhook_url: ""
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest_asyncio.fixture
async def db(temp_dir: Path) -> SQLiteAdapter:
    """스키마가 초기화된 임시 DB"""
    adapter = SQLiteAdapter(temp_dir / "test_vault.db")
    await adapter.connect()
    await init_schema(adapter)

    yield adapter

    await adapter.close()


@pytest.fixture
def actor() -> Actor:
    """테스트용 사용자"""
    return Actor(user_id=1, username="alice", role="admin")
