"""
Tests for environment-based configuration
"""

from token_ledger.config import LedgerConfig, get_config, reload_config


class TestLedgerConfig:
    """Test defaults and TOKEN_LEDGER_ environment overrides"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("TOKEN_LEDGER_TOKEN_SYMBOL", raising=False)
        config = LedgerConfig()

        assert config.token_decimals == 18
        assert config.initial_supply == "1000000"
        assert config.initial_holder == ""
        assert config.database_url.startswith("sqlite:///")
        assert config.log_format == "json"
        assert config.enable_audit_logging is True

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("TOKEN_LEDGER_TOKEN_SYMBOL", "ENV")
        monkeypatch.setenv("TOKEN_LEDGER_TOKEN_DECIMALS", "6")
        monkeypatch.setenv("TOKEN_LEDGER_ENABLE_AUDIT_LOGGING", "false")
        monkeypatch.setenv("TOKEN_LEDGER_DATABASE_URL", "memory://")

        config = LedgerConfig()
        assert config.token_symbol == "ENV"
        assert config.token_decimals == 6
        assert config.enable_audit_logging is False
        assert config.database_url == "memory://"

    def test_keyword_arguments_win(self, monkeypatch):
        monkeypatch.setenv("TOKEN_LEDGER_API_PORT", "9000")
        assert LedgerConfig(api_port=9100).api_port == 9100

    def test_reload_config(self, monkeypatch):
        original = get_config()
        monkeypatch.setenv("TOKEN_LEDGER_TOKEN_NAME", "Reloaded Token")

        reloaded = reload_config()
        assert reloaded is not original
        assert get_config() is reloaded
        assert get_config().token_name == "Reloaded Token"

        monkeypatch.delenv("TOKEN_LEDGER_TOKEN_NAME")
        assert reload_config().token_name == "Ledger Token"
