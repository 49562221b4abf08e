"""
core/constants.py 테스트

모든 경로가 pathlib.Path 타입이고, 금 수량 규칙이 일관적인지 확인
"""

from decimal import Decimal
from pathlib import Path

from core.constants import (
    PROJECT_ROOT,
    AmountRules,
    KaratRules,
    Paths,
)


class TestProjectRoot:
    """PROJECT_ROOT 테스트"""

    def test_project_root_is_path(self) -> None:
        """PROJECT_ROOT가 Path 타입인지 확인"""
        assert isinstance(PROJECT_ROOT, Path)

    def test_project_root_is_absolute(self) -> None:
        """PROJECT_ROOT가 절대 경로인지 확인"""
        assert PROJECT_ROOT.is_absolute()

    def test_project_root_contains_core_directory(self) -> None:
        """PROJECT_ROOT에 core 디렉토리가 있는지 확인"""
        assert (PROJECT_ROOT / "core").is_dir()


class TestPaths:
    """Paths 테스트"""

    def test_paths_under_project_root(self) -> None:
        """모든 경로가 프로젝트 루트 하위"""
        for path in (Paths.CONFIG_DIR, Paths.DATA_DIR, Paths.LOGS_DIR, Paths.SETTINGS_FILE, Paths.DEFAULT_DB):
            assert isinstance(path, Path)
            assert PROJECT_ROOT in path.parents

    def test_web_logs_under_logs(self) -> None:
        """Web 로그 디렉토리"""
        assert Paths.WEB_LOGS_DIR.parent == Paths.LOGS_DIR


class TestAmountRules:
    """AmountRules 테스트"""

    def test_quantum_matches_decimal_places(self) -> None:
        """QUANTUM과 DECIMAL_PLACES 일치"""
        assert AmountRules.QUANTUM == Decimal(1).scaleb(-AmountRules.DECIMAL_PLACES)

    def test_mg_per_gram_matches_quantum(self) -> None:
        """최소 단위가 정확히 1mg"""
        assert AmountRules.QUANTUM * AmountRules.MG_PER_GRAM == 1


class TestKaratRules:
    """KaratRules 테스트"""

    def test_range(self) -> None:
        """1~24"""
        assert KaratRules.MIN_KARAT == 1
        assert KaratRules.MAX_KARAT == 24
