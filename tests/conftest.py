"""Pytest configuration and shared fixtures."""
import pytest

from formgroup import Input, MembershipIndex, ReactiveContext
import formgroup.config as config_module


@pytest.fixture(autouse=True)
def isolate_reactive_state():
    """Give each test a fresh default membership index and reactive context."""
    # Store original values
    original_index = config_module._default_membership_index
    original_token = ReactiveContext._token
    original_callbacks = list(ReactiveContext._change_callbacks)

    config_module._default_membership_index = MembershipIndex()
    ReactiveContext._change_callbacks.clear()

    yield

    # Restore original values after test
    config_module._default_membership_index = original_index
    ReactiveContext._token = original_token
    ReactiveContext._change_callbacks.clear()
    ReactiveContext._change_callbacks.extend(original_callbacks)
    ReactiveContext._transaction_depth = 0
    ReactiveContext._transaction_label = None
    ReactiveContext._pending_notify = False


@pytest.fixture
def membership():
    """The default membership index of the current test."""
    return config_module.get_default_membership_index()


@pytest.fixture
def name_input():
    return Input("Ada", name="name")


@pytest.fixture
def age_input():
    return Input(36, name="age", normalizer=int)


@pytest.fixture
def city_input():
    return Input("Berlin", name="city")
