"""Pytest fixtures for QRoyal tests."""

import pytest
from django.core.cache import cache

from qroyal.models import Business, Customer, Membership

BUSINESS_PASSWORD = "espresso-doppio"
CUSTOMER_PASSWORD = "freddo-cappuccino"


@pytest.fixture(autouse=True)
def _clear_cache():
    """Login attempt counters live in the cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def business(db):
    """Business with 1 point per scan and a reward at 10."""
    business = Business(
        name="Kafeneio Aroma",
        public_name="Aroma",
        email="owner@aroma.test",
        points_per_scan=1,
        reward_threshold=10,
        reward_message="Free coffee!",
    )
    business.set_password(BUSINESS_PASSWORD)
    business.save()
    return business


@pytest.fixture
def other_business(db):
    """Second business with 3 points per scan and a reward at 5."""
    business = Business(
        name="Bakery Zeta",
        email="hello@zeta.test",
        points_per_scan=3,
        reward_threshold=5,
    )
    business.set_password("zeta-password")
    business.save()
    return business


@pytest.fixture
def customer(db):
    """Registered customer with phone and password."""
    customer = Customer(name="Maria Papadopoulou", phone="+306900000001")
    customer.set_password(CUSTOMER_PASSWORD)
    customer.save()
    return customer


@pytest.fixture
def provisional_customer(db):
    """Customer created at the counter, not yet set up."""
    return Customer.objects.create(name="New Customer")


@pytest.fixture
def membership(db, customer, business):
    """Membership one point short of the reward."""
    return Membership.objects.create(customer=customer, business=business, points=9)
