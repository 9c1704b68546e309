"""
Unit Tests for the rate limit key
"""
from starlette.requests import Request

from app.core.rate_limiter import rate_limit_key
from app.core.security import create_access_token, create_refresh_token


def make_request(authorization: str = None) -> Request:
    headers = [(b'authorization', authorization.encode())] if authorization else []
    return Request({'type': 'http', 'method': 'GET', 'path': '/', 'headers': headers, 'client': ('10.0.0.7', 5123)})


class TestRateLimitKey:
    """Test user vs IP keys"""

    def test_anonymous_request_uses_ip(self):
        assert rate_limit_key(make_request()) == 'ip:10.0.0.7'

    def test_access_token_uses_user(self):
        token = create_access_token({'sub': 'user-123'})
        assert rate_limit_key(make_request(f'Bearer {token}')) == 'user:user-123'

    def test_invalid_token_falls_back_to_ip(self):
        assert rate_limit_key(make_request('Bearer not-a-jwt')) == 'ip:10.0.0.7'

    def test_refresh_token_is_not_an_identity(self):
        token = create_refresh_token({'sub': 'user-123'})
        assert rate_limit_key(make_request(f'Bearer {token}')) == 'ip:10.0.0.7'

    def test_user_resolved_by_auth_dependency_wins(self):
        request = make_request()
        request.state.user_id = 'user-456'
        assert rate_limit_key(request) == 'user:user-456'
