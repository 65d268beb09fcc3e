import pytest

from src.platform.config.core_setting import ENV_EXAMPLE_FILE, Settings


@pytest.mark.unit
class TestSettingsLoading:
    def test_example_env_file_loads(self, monkeypatch):
        """
        Given: only the shipped .env.example (comma separated CORS origins)
        When: settings are built from it
        Then: the origins are split into a list
        """
        # Arrange
        monkeypatch.delenv('BACKEND_CORS_ORIGINS', raising=False)

        # Act
        settings = Settings(_env_file=ENV_EXAMPLE_FILE)

        # Assert
        assert settings.BACKEND_CORS_ORIGINS == ['http://localhost:3000']

    def test_json_list_from_environment_wins_over_env_file(self, monkeypatch):
        # Arrange
        monkeypatch.setenv('BACKEND_CORS_ORIGINS', '["https://a.test", "https://b.test"]')

        # Act
        settings = Settings(_env_file=ENV_EXAMPLE_FILE)

        # Assert
        assert settings.BACKEND_CORS_ORIGINS == ['https://a.test', 'https://b.test']

    def test_comma_list_from_environment_is_trimmed(self, monkeypatch):
        # Arrange
        monkeypatch.setenv('BACKEND_CORS_ORIGINS', 'https://a.test , https://b.test,')

        # Act
        settings = Settings(_env_file=None)

        # Assert
        assert settings.BACKEND_CORS_ORIGINS == ['https://a.test', 'https://b.test']
