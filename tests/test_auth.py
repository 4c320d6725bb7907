"""Tests for access token resolution and role capabilities."""

import jwt
import pytest

from freshcart.models.checkout import OrderStatus
from freshcart.security.auth import IdentityResolver, bearer_token, create_access_token
from freshcart.security.roles import (
    AppRole,
    Capability,
    Identity,
    can_set_status,
    has_capability,
    home_path_for,
)

SECRET = "test-secret"


@pytest.fixture
def resolver():
    return IdentityResolver(secret=SECRET)


class TestIdentityResolver:
    def test_resolves_user_and_role(self, resolver):
        token = create_access_token("user-1", AppRole.SELLER, email="s@example.com", secret=SECRET)

        identity = resolver.resolve(token)

        assert identity == Identity(user_id="user-1", role=AppRole.SELLER, email="s@example.com")

    def test_missing_role_defaults_to_buyer(self, resolver):
        token = jwt.encode({"sub": "user-2", "aud": "authenticated"}, SECRET, algorithm="HS256")

        assert resolver.resolve(token).role == AppRole.BUYER

    def test_user_role_claim(self, resolver):
        token = jwt.encode(
            {"sub": "user-3", "aud": "authenticated", "user_role": "delivery"},
            SECRET,
            algorithm="HS256",
        )

        assert resolver.resolve(token).role == AppRole.DELIVERY

    def test_no_token(self, resolver):
        assert resolver.resolve(None) is None

    def test_wrong_secret(self, resolver):
        token = create_access_token("user-1", secret="other-secret")

        assert resolver.resolve(token) is None

    def test_expired_token(self, resolver):
        token = create_access_token("user-1", expires_in=-60, secret=SECRET)

        assert resolver.resolve(token) is None

    def test_unknown_role(self, resolver):
        token = jwt.encode(
            {"sub": "user-1", "aud": "authenticated", "user_role": "admin"},
            SECRET,
            algorithm="HS256",
        )

        assert resolver.resolve(token) is None

    def test_wrong_audience(self, resolver):
        token = create_access_token("user-1", secret=SECRET, audience="anon")

        assert resolver.resolve(token) is None


class TestBearerToken:
    @pytest.mark.parametrize(
        "header, expected",
        [
            ("Bearer abc.def", "abc.def"),
            ("bearer abc.def", "abc.def"),
            ("Basic abc", None),
            ("Bearer", None),
            (None, None),
        ],
    )
    def test_parsing(self, header, expected):
        assert bearer_token(header) == expected


class TestCapabilities:
    def test_buyer_can_place_orders(self):
        buyer = Identity(user_id="b", role=AppRole.BUYER)

        assert has_capability(buyer, Capability.PLACE_ORDER)
        assert not has_capability(buyer, Capability.MANAGE_ORDERS)

    def test_only_sellers_manage_products(self):
        assert has_capability(Identity(user_id="s", role=AppRole.SELLER), Capability.MANAGE_PRODUCTS)
        assert not has_capability(Identity(user_id="b", role=AppRole.BUYER), Capability.MANAGE_PRODUCTS)
        assert not has_capability(Identity(user_id="d", role=AppRole.DELIVERY), Capability.MANAGE_PRODUCTS)

    def test_anonymous_has_no_capabilities(self):
        assert not has_capability(None, Capability.PLACE_ORDER)

    def test_status_capabilities(self):
        seller = Identity(user_id="s", role=AppRole.SELLER)
        courier = Identity(user_id="d", role=AppRole.DELIVERY)

        assert can_set_status(seller, OrderStatus.PACKED)
        assert not can_set_status(seller, OrderStatus.DELIVERED)
        assert can_set_status(courier, OrderStatus.DELIVERED)
        assert not can_set_status(courier, OrderStatus.CANCELLED)
        assert not can_set_status(seller, OrderStatus.PENDING)

    @pytest.mark.parametrize(
        "role, path",
        [
            (AppRole.BUYER, "/"),
            (AppRole.SELLER, "/seller/dashboard"),
            (AppRole.DELIVERY, "/delivery"),
            (None, "/auth"),
        ],
    )
    def test_home_paths(self, role, path):
        assert home_path_for(role) == path
