import unittest
from unittest.mock import patch

import jwt
from fastapi import HTTPException

from orderledger.config import Settings
from orderledger.core import security
from orderledger.core.security import authenticate_request


def _settings(**overrides):
    values = {"API_KEYS": None, "JWT_SECRET": None, "JWT_REQUIRED": False}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class AuthenticateRequestTest(unittest.TestCase):
    def _authenticate(self, settings, **kwargs):
        with patch.object(security, "get_settings", return_value=settings):
            return authenticate_request(
                api_key=kwargs.get("api_key"),
                authorization=kwargs.get("authorization"),
                require_auth=True,
            )

    def test_open_when_nothing_configured(self):
        self.assertIsNone(self._authenticate(_settings()))

    def test_api_key_accepted(self):
        principal = self._authenticate(_settings(API_KEYS="alpha, beta"), api_key="beta")
        self.assertEqual(principal["auth_type"], "api_key")

    def test_wrong_api_key_rejected(self):
        with self.assertRaises(HTTPException) as ctx:
            self._authenticate(_settings(API_KEYS="alpha"), api_key="gamma")
        self.assertEqual(ctx.exception.status_code, 401)

    def test_bearer_jwt_resolves_subject(self):
        token = jwt.encode({"sub": "clerk-7"}, "s3cret", algorithm="HS256")
        principal = self._authenticate(
            _settings(JWT_SECRET="s3cret"),
            authorization="Bearer {}".format(token),
        )
        self.assertEqual(principal["auth_type"], "jwt")
        self.assertEqual(principal["subject"], "clerk-7")

    def test_bad_jwt_rejected_when_required(self):
        token = jwt.encode({"sub": "clerk-7"}, "other", algorithm="HS256")
        with self.assertRaises(HTTPException) as ctx:
            self._authenticate(
                _settings(JWT_SECRET="s3cret", JWT_REQUIRED=True),
                authorization="Bearer {}".format(token),
            )
        self.assertEqual(ctx.exception.status_code, 401)


if __name__ == "__main__":
    unittest.main()
