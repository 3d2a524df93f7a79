import unittest
from datetime import timedelta
from uuid import uuid4

from jose import jwt

from app.core.config import settings
from app.core.security import create_access_token, decode_access_token


class TestAccessTokens(unittest.TestCase):
    def test_round_trip_carries_subject_and_email(self) -> None:
        user_id = uuid4()
        token = create_access_token(user_id, email="viewer@example.com")

        claims = decode_access_token(token)

        self.assertEqual(claims["sub"], str(user_id))
        self.assertEqual(claims["email"], "viewer@example.com")

    def test_expired_token_rejected(self) -> None:
        token = create_access_token(uuid4(), expires_delta=timedelta(seconds=-1))
        self.assertIsNone(decode_access_token(token))

    def test_wrong_signature_rejected(self) -> None:
        token = jwt.encode({"sub": str(uuid4())}, "not-the-secret", algorithm=settings.ALGORITHM)
        self.assertIsNone(decode_access_token(token))

    def test_missing_subject_rejected(self) -> None:
        token = jwt.encode({"email": "x@example.com"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
        self.assertIsNone(decode_access_token(token))

    def test_garbage_rejected(self) -> None:
        self.assertIsNone(decode_access_token("not.a.jwt"))
