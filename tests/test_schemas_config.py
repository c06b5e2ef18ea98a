import pytest

from vocab_core import config
from vocab_core.config import SchedulerSettings
from vocab_core.errors import ValidationError
from vocab_core.schemas import AnswerEvent, parse_answer


def test_parse_answer_accepts_client_aliases():
    answer = parse_answer({"wordId": " w1 ", "isCorrect": True, "responseTime": 1200, "mode": "eng_to_jpn"})
    assert answer == AnswerEvent(item_id="w1", correct=True, response_time_ms=1200, mode="eng_to_jpn")


def test_parse_answer_passes_models_through():
    answer = AnswerEvent(item_id="w1", correct=False)
    assert parse_answer(answer) is answer


@pytest.mark.parametrize("payload, item_id", [
    ({"wordId": "w1"}, "w1"),
    ({"item_id": "", "correct": True}, ""),
    ({"item_id": "w2", "correct": True, "response_time_ms": -5}, "w2"),
    ({"correct": True}, None),
])
def test_parse_answer_rejects_malformed(payload, item_id):
    with pytest.raises(ValidationError) as excinfo:
        parse_answer(payload)
    assert excinfo.value.item_id == item_id


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("CANDIDATE_MULTIPLIER", "5")
    monkeypatch.setenv("INTERVAL_STRATEGY", "streak_bucket")
    monkeypatch.setenv("SESSION_FETCH_WORKERS", "4")
    monkeypatch.delenv("MIN_SESSION_SIZE", raising=False)

    settings = SchedulerSettings.from_env()

    assert settings.candidate_multiplier == 5
    assert settings.interval_strategy == "streak_bucket"
    assert settings.fetch_workers == 4
    assert settings.min_session_size == config.MIN_SESSION_SIZE
    assert settings.session_size == 10


def test_settings_reject_bad_values(monkeypatch):
    with pytest.raises(ValueError):
        SchedulerSettings(session_size=0)
    monkeypatch.setenv("CANDIDATE_MULTIPLIER", "lots")
    with pytest.raises(ValueError):
        SchedulerSettings.from_env()


def test_database_url_test_mode(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@localhost:5432/vocab_db")
    monkeypatch.setenv("TEST_MODE", "false")
    assert config.get_database_url().endswith("/vocab_db")

    monkeypatch.setenv("TEST_MODE", "true")
    assert config.get_database_url().endswith("/test_vocab_db")

    monkeypatch.delenv("DATABASE_URL")
    with pytest.raises(ValueError):
        config.get_database_url()
