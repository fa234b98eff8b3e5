import pytest

from finance_dashboard import streamlit_app


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


class SessionState(dict):
    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name)

    def __setattr__(self, name, value):
        self[name] = value


class Rerun(Exception):
    pass


class FakeStreamlit:
    def __init__(self):
        self.session_state = SessionState(token="tok", user_email="a@b.co", first_name="Ann",
                                          flash=None)
        self.errors = []

    def rerun(self):
        raise Rerun()

    def error(self, message):
        self.errors.append(message)


@pytest.fixture
def fake_st(monkeypatch):
    fake = FakeStreamlit()
    monkeypatch.setattr(streamlit_app, "st", fake)
    return fake


def test_fetch_401_logs_out_and_reruns(fake_st):
    with pytest.raises(Rerun):
        streamlit_app.fetch("summary", lambda token: FakeResponse(401, {"msg": "Token has expired"}))
    assert fake_st.session_state.token is None
    assert fake_st.session_state.flash.startswith("Your session has expired")
    assert fake_st.errors == []


def test_fetch_caches_successful_reads(fake_st):
    calls = []

    def call(token):
        calls.append(token)
        return FakeResponse(200, {"totalIncome": "1.00"})

    assert streamlit_app.fetch("summary", call) == {"totalIncome": "1.00"}
    assert streamlit_app.fetch("summary", call) == {"totalIncome": "1.00"}
    assert calls == ["tok"]


def test_fetch_reports_other_failures(fake_st):
    assert streamlit_app.fetch("summary", lambda token: FakeResponse(500, {"msg": "boom"})) is None
    assert fake_st.errors == ["❌ boom"]
    assert fake_st.session_state.token == "tok"
