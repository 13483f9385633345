"""Tests for token verification and the role/action permission table."""

import jwt
import pytest
from storefront.domain.errors import Forbidden, Unauthenticated
from storefront.domain.order_status import OrderStatus
from storefront.services.access_gate import (
    ADMIN,
    CUSTOMER,
    AccessGate,
    Action,
    Identity,
    TokenVerifier,
)

SECRET = "test-secret-long-enough-for-hs256-keys"


@pytest.fixture
def verifier():
    return TokenVerifier(secret=SECRET)


@pytest.fixture
def gate():
    return AccessGate()


class TestTokenVerifier:
    def test_sub_and_role(self, verifier):
        token = jwt.encode({"sub": "42", "role": CUSTOMER}, SECRET, algorithm="HS256")
        assert verifier.verify(token) == Identity(user_id=42, role=CUSTOMER)

    def test_legacy_claim_names(self, verifier):
        token = jwt.encode({"userId": 5, "roleName": ADMIN}, SECRET, algorithm="HS256")
        assert verifier.verify(token) == Identity(user_id=5, role=ADMIN)

    def test_wrong_secret(self, verifier):
        token = jwt.encode({"sub": "42", "role": CUSTOMER}, "another-secret-of-sufficient-length", algorithm="HS256")
        assert verifier.verify(token) is None

    def test_missing_role(self, verifier):
        token = jwt.encode({"sub": "42"}, SECRET, algorithm="HS256")
        assert verifier.verify(token) is None

    def test_missing_user(self, verifier):
        token = jwt.encode({"role": ADMIN}, SECRET, algorithm="HS256")
        assert verifier.verify(token) is None

    @pytest.mark.parametrize("token", [None, "", "not-a-jwt"])
    def test_garbage(self, verifier, token):
        assert verifier.verify(token) is None


class TestPermissions:
    def test_customer_can_use_cart(self, gate):
        customer = Identity(user_id=7, role=CUSTOMER)
        assert gate.authorize(customer, Action.CART_MUTATE)
        assert gate.authorize(customer, Action.ORDER_CHECKOUT)

    def test_customer_cannot_set_status(self, gate):
        customer = Identity(user_id=7, role=CUSTOMER)
        with pytest.raises(Forbidden):
            gate.require(customer, Action.ORDER_SET_STATUS)

    def test_admin_can_do_everything(self, gate):
        admin = Identity(user_id=1, role=ADMIN)
        assert all(gate.authorize(admin, action) for action in Action)

    @pytest.mark.parametrize("role", ["user", "courier", "Customer"])
    def test_any_other_role_gets_shopper_actions(self, gate, role):
        shopper = Identity(user_id=9, role=role)
        assert gate.authorize(shopper, Action.CART_MUTATE)
        assert gate.authorize(shopper, Action.ORDER_CHECKOUT)
        assert gate.authorize(shopper, Action.ORDER_CANCEL)
        assert not gate.authorize(shopper, Action.ORDER_SET_STATUS)
        assert not gate.authorize(shopper, Action.COUPON_MANAGE)

    def test_empty_role_is_denied(self, gate):
        assert not any(gate.authorize(Identity(user_id=9, role=""), action) for action in Action)

    def test_no_identity(self, gate):
        assert not gate.authorize(None, Action.CART_READ)
        with pytest.raises(Unauthenticated):
            gate.require(None, Action.CART_READ)

    def test_action_given_as_string(self, gate):
        customer = Identity(user_id=7, role=CUSTOMER)
        assert gate.require(customer, "cart:read") is customer


class TestTransitions:
    @pytest.mark.parametrize("target", [OrderStatus.CANCELLED, OrderStatus.RETURNED])
    def test_customer_may_cancel_and_return(self, gate, target):
        gate.require_transition(Identity(user_id=7, role=CUSTOMER), target)

    @pytest.mark.parametrize(
        "target",
        [OrderStatus.PROCESSING, OrderStatus.COMPLETED, OrderStatus.REJECTED, OrderStatus.WAITING_FOR_APPROVAL],
    )
    def test_other_targets_need_admin(self, gate, target):
        with pytest.raises(Forbidden):
            gate.require_transition(Identity(user_id=7, role=CUSTOMER), target)
        gate.require_transition(Identity(user_id=1, role=ADMIN), target)
