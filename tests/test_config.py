import os

import pytest
from common.config import Settings


def test_settings_default_values(mocker):
    """
    Test that the Settings class loads default values correctly when no
    environment variables are set.
    """
    mocker.patch.dict(os.environ, {}, clear=True)

    settings = Settings()

    assert settings.SETTINGS_FILE == "classifai-settings.json"
    assert settings.OPTION_NAME == "classifai_watson_nlu"
    assert settings.LEGACY_OPTION_NAME == "classifai_settings"
    assert settings.CONFIGURED_OPTION_NAME == "classifai_configured"
    assert settings.WATSON_URL == ""
    assert settings.WATSON_USERNAME == ""
    assert settings.WATSON_PASSWORD == ""
    assert settings.WATSON_NLU_VERSION == "2017-02-27"
    assert settings.REQUEST_TIMEOUT == 5
    assert settings.PUBLIC_POST_TYPES == [("post", "Posts"), ("page", "Pages")]
    assert settings.TAXONOMIES["watson-keyword"] == "Watson Keyword"
    assert settings.TAXONOMIES["post_tag"] == "Tag"
    assert settings.LOG_LEVEL == "INFO"
    assert settings.LOG_FORMAT == "console"


def test_settings_from_environment_variables(mocker):
    """
    Test that the Settings class correctly loads values from environment variables.
    """
    mocker.patch.dict(
        os.environ,
        {
            "SETTINGS_FILE": "/tmp/nlu.json",
            "OPTION_NAME": "nlu_current",
            "WATSON_URL": " https://nlu.example.com ",
            "WATSON_USERNAME": "apikey",
            "WATSON_PASSWORD": "secret",
            "REQUEST_TIMEOUT": "3",
            "PUBLIC_POST_TYPES": "post:Posts, product , :orphan,",
            "TAXONOMIES": "topics:Topic",
            "LOG_LEVEL": "debug",
            "LOG_FORMAT": "JSON",
        },
        clear=True,
    )

    settings = Settings()

    assert settings.SETTINGS_FILE == "/tmp/nlu.json"
    assert settings.OPTION_NAME == "nlu_current"
    assert settings.WATSON_URL == "https://nlu.example.com"
    assert settings.WATSON_USERNAME == "apikey"
    assert settings.WATSON_PASSWORD == "secret"
    assert settings.REQUEST_TIMEOUT == 3
    assert settings.PUBLIC_POST_TYPES == [("post", "Posts"), ("product", "product")]
    assert settings.TAXONOMIES == {"topics": "Topic"}
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.LOG_FORMAT == "json"


def test_invalid_request_timeout(mocker):
    mocker.patch.dict(os.environ, {"REQUEST_TIMEOUT": "soon"}, clear=True)

    with pytest.raises(ValueError, match="'REQUEST_TIMEOUT' must be an integer"):
        Settings()

    mocker.patch.dict(os.environ, {"REQUEST_TIMEOUT": "0"}, clear=True)

    with pytest.raises(ValueError, match="REQUEST_TIMEOUT must be >= 1"):
        Settings()


def test_invalid_log_settings(mocker):
    mocker.patch.dict(os.environ, {"LOG_FORMAT": "xml"}, clear=True)

    with pytest.raises(ValueError, match="LOG_FORMAT must be 'console' or 'json'"):
        Settings()

    mocker.patch.dict(os.environ, {"LOG_LEVEL": "LOUD"}, clear=True)

    with pytest.raises(ValueError, match="not a valid level name"):
        Settings()


def test_option_names_must_differ(mocker):
    mocker.patch.dict(
        os.environ,
        {"OPTION_NAME": "classifai_settings"},
        clear=True,
    )

    with pytest.raises(ValueError, match="must differ"):
        Settings()
