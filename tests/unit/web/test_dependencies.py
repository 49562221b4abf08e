"""
web/dependencies.py 테스트

JWT → Actor 변환
"""

import jwt
import pytest

from core.errors import AuthError
from web.dependencies import decode_actor


class TestDecodeActor:
    """decode_actor 테스트"""

    def test_valid_token(self, secret_key: str) -> None:
        """정상 토큰"""
        token = jwt.encode(
            {"userId": 9, "username": "mehmet", "role": "user"},
            secret_key,
            algorithm="HS256",
        )

        actor = decode_actor(token, secret_key)

        assert actor.user_id == 9
        assert actor.username == "mehmet"
        assert actor.role == "user"

    def test_wrong_signature(self, secret_key: str) -> None:
        """서명 불일치"""
        token = jwt.encode({"username": "x"}, secret_key, algorithm="HS256")

        with pytest.raises(AuthError):
            decode_actor(token, secret_key + "_rotated")

    def test_expired(self, secret_key: str) -> None:
        """만료된 토큰"""
        token = jwt.encode({"username": "x", "exp": 1}, secret_key, algorithm="HS256")

        with pytest.raises(AuthError, match="Invalid token"):
            decode_actor(token, secret_key)

    def test_garbage(self, secret_key: str) -> None:
        """JWT 형식 아님"""
        with pytest.raises(AuthError):
            decode_actor("not-a-jwt", secret_key)

    @pytest.mark.parametrize("user_id", ["abc", [1, 2], {"id": 1}])
    def test_malformed_user_id(self, secret_key: str, user_id) -> None:
        """서명은 유효하나 userId 형식 오류"""
        token = jwt.encode({"userId": user_id, "username": "x"}, secret_key, algorithm="HS256")

        with pytest.raises(AuthError, match="Invalid token claims"):
            decode_actor(token, secret_key)
