from server.config import Settings

ENV_KEYS = ("PORT", "HOST", "ALLOWED_ORIGINS", "GAME_MODE", "ENEMY_HEALTH", "END_CONDITION", "TURN_TIMEOUT_SECONDS")


def clear_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults(monkeypatch):
    clear_env(monkeypatch)
    settings = Settings(_env_file=None)
    assert settings.port == 3000
    assert settings.allowed_origins == ["http://localhost:4200"]
    assert settings.rules().mode == "effects"


def test_environment_overrides(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("PORT", "4100")
    monkeypatch.setenv("ALLOWED_ORIGINS", '["https://cards.example"]')
    monkeypatch.setenv("GAME_MODE", "blackjack")
    monkeypatch.setenv("TURN_TIMEOUT_SECONDS", "15")

    settings = Settings(_env_file=None)
    rules = settings.rules()

    assert settings.port == 4100
    assert settings.allowed_origins == ["https://cards.example"]
    assert rules.mode == "blackjack"
    assert rules.deal_size == 2
    assert rules.turn_timeout_seconds == 15


def test_null_disables_the_turn_timer(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("TURN_TIMEOUT_SECONDS", "null")

    assert Settings(_env_file=None).rules().turn_timeout_seconds is None


def test_deck_exhausted_game_without_an_enemy(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("ENEMY_HEALTH", "null")
    monkeypatch.setenv("END_CONDITION", "deck_exhausted")

    rules = Settings(_env_file=None).rules()

    assert rules.enemy_health is None
    assert rules.end_condition == "deck_exhausted"
