import os

import pytest

from common.config import Settings
from common.store import InMemoryStore
from nlu.resolver import ConfigResolver

CURRENT = "classifai_watson_nlu"
LEGACY = "classifai_settings"


def make_resolver(settings, current=None, legacy=None):
    initial = {}
    if current is not None:
        initial[CURRENT] = current
    if legacy is not None:
        initial[LEGACY] = legacy
    store = InMemoryStore(initial)
    return ConfigResolver(store, settings), store


def test_current_schema_value_is_returned(settings):
    resolver, _ = make_resolver(
        settings, current={"features": {"category": "1", "category_threshold": "85"}}
    )

    assert resolver.resolve("features", "category") == "1"
    assert resolver.resolve("features", "category_threshold") == "85"


def test_defaults_when_nothing_is_stored(settings):
    resolver, _ = make_resolver(settings)

    assert resolver.resolve("credentials", "url") == ""
    assert resolver.resolve("credentials", "username") == ""
    assert resolver.resolve("post_types", "post") is False
    assert resolver.resolve("features", "category") is False
    assert resolver.resolve("features", "category_threshold") == 70
    assert resolver.resolve("features", "entity_taxonomy") == "watson-entity"
    assert resolver.resolve("features", "unknown_key") == ""


def test_credentials_fall_back_to_environment(mocker):
    mocker.patch.dict(
        os.environ,
        {"WATSON_USERNAME": "apikey", "WATSON_PASSWORD": "from-env"},
        clear=True,
    )
    resolver, _ = make_resolver(
        Settings(), current={"credentials": {"password": "stored"}}
    )

    assert resolver.resolve("credentials", "username") == "apikey"
    assert resolver.resolve("credentials", "password") == "stored"
    assert resolver.resolve("credentials", "url") == ""


def test_legacy_is_read_when_current_aggregate_is_empty(settings):
    resolver, _ = make_resolver(
        settings,
        current={},
        legacy={"features": {"keyword": True}, "post_types": {"page": 1}},
    )

    assert resolver.resolve("features", "keyword") is True
    assert resolver.resolve("post_types", "page") == 1


def test_non_empty_current_group_shadows_legacy_group_entirely(settings):
    resolver, _ = make_resolver(
        settings,
        current={"features": {"category": 1}, "post_types": {}},
        legacy={
            "features": {"keyword": 1, "keyword_threshold": 90},
            "post_types": {"page": 1},
        },
    )

    assert resolver.resolve("features", "category") == 1
    assert resolver.resolve("features", "keyword") is False
    assert resolver.resolve("features", "keyword_threshold") == 70
    # The post types group was never saved under the current schema.
    assert resolver.resolve("post_types", "page") == 1


def test_missing_empty_and_none_values_use_defaults(settings):
    resolver, _ = make_resolver(
        settings,
        current={"features": {"category_taxonomy": "", "category_threshold": None}},
    )

    assert resolver.resolve("features", "category_taxonomy") == "watson-category"
    assert resolver.resolve("features", "category_threshold") == 70


def test_zero_values_are_stored_values(settings):
    resolver, _ = make_resolver(settings, current={"features": {"category": 0}})

    assert resolver.resolve("features", "category") == 0


def test_legacy_credential_keys_are_renamed(settings):
    resolver, _ = make_resolver(
        settings,
        legacy={
            "credentials": {
                "watson_url": "https://legacy.example.com",
                "watson_username": "apikey",
                "watson_password": "legacy-secret",
            }
        },
    )

    assert resolver.resolve("credentials", "url") == "https://legacy.example.com"
    assert resolver.resolve("credentials", "username") == "apikey"
    assert resolver.group("credentials") == {
        "url": "https://legacy.example.com",
        "username": "apikey",
        "password": "legacy-secret",
    }


def test_legacy_post_type_list_is_understood(settings):
    resolver, _ = make_resolver(settings, legacy={"post_types": ["post", "page"]})

    assert resolver.group("post_types") == {"post": 1, "page": 1}


def test_unusable_current_group_falls_back_to_legacy(settings):
    resolver, _ = make_resolver(
        settings,
        current={"features": ["junk"], "credentials": "junk"},
        legacy={"features": {"keyword": 1}, "credentials": {"watson_url": "https://legacy.example.com"}},
    )

    assert resolver.resolve("features", "keyword") == 1
    assert resolver.resolve("credentials", "url") == "https://legacy.example.com"


def test_unknown_group_is_rejected(settings):
    resolver, _ = make_resolver(settings)

    with pytest.raises(ValueError, match="Unknown settings group"):
        resolver.resolve("registration", "email")


def test_non_mapping_blob_is_ignored(settings):
    resolver, _ = make_resolver(settings, current="corrupted", legacy=["x"])

    assert resolver.resolve("features", "keyword_threshold") == 70
    assert resolver.group("features") == {}


def test_resolution_never_writes_or_mutates_the_store(settings, mocker):
    current = {"features": {"category": "1"}}
    legacy = {"post_types": {"post": 1}, "credentials": {"watson_url": "https://x"}}
    resolver, store = make_resolver(settings, current=current, legacy=legacy)
    set_spy = mocker.spy(store, "set")

    resolver.resolve("features", "category")
    resolver.resolve("credentials", "url")
    group = resolver.group("post_types")
    group["post"] = None
    resolver.snapshot()

    set_spy.assert_not_called()
    assert store.get(CURRENT) == current
    assert store.get(LEGACY) == legacy


def test_snapshot_reflects_stored_groups_without_defaults(settings):
    resolver, _ = make_resolver(
        settings,
        current={
            "credentials": {"url": "https://nlu.example.com", "username": "u"},
            "features": {"category": "1", "category_threshold": "85"},
        },
        legacy={"post_types": {"post": 1, "page": None}},
    )

    snapshot = resolver.snapshot()

    assert snapshot.credentials.url == "https://nlu.example.com"
    assert snapshot.credentials.password == ""
    assert snapshot.post_types == {"post": 1, "page": None}
    assert snapshot.features["category"].enabled == 1
    assert snapshot.features["category"].threshold == 85
    assert snapshot.features["category"].taxonomy is None
    assert snapshot.features["keyword"].enabled is None
    assert set(snapshot.features) == {"category", "keyword", "entity", "concept"}


def test_registration_prefers_top_level_then_nested(settings):
    resolver, _ = make_resolver(
        settings,
        legacy={
            "email": "",
            "license_key": "top-level-key",
            "registration": {"email": "admin@example.com", "license_key": "nested-key"},
        },
    )

    assert resolver.registration("email") == "admin@example.com"
    assert resolver.registration("license_key") == "top-level-key"


def test_registration_missing_and_unknown_keys(settings):
    resolver, _ = make_resolver(settings)

    assert resolver.registration("email") == ""
    with pytest.raises(ValueError, match="Unknown registration key"):
        resolver.registration("password")
