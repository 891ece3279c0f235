import pytest

from audit_factories import FakePageSession, build_audit, make_bare_signals, make_clean_signals


@pytest.fixture
def clean_signals():
    return make_clean_signals()


@pytest.fixture
def bare_signals():
    return make_bare_signals()


@pytest.fixture
def clean_audit():
    return build_audit(**make_clean_signals())


@pytest.fixture
def bare_audit():
    return build_audit("http://bare.test/", **make_bare_signals())


@pytest.fixture
def fake_session_cls():
    return FakePageSession
