from dialogue_engine.core.config import EngineConfig, DEFAULT_LANGUAGES


def test_defaults():
    config = EngineConfig()
    assert config.language == "en"
    assert config.fallback_language == "en"
    assert config.separator == ";"
    assert config.languages == DEFAULT_LANGUAGES
    assert config.strict_groups is False

def test_from_dict_ignores_unknown_keys():
    config = EngineConfig.from_dict({"language": "fr", "languages": ["fr", "en"], "volume": 11})
    assert config.language == "fr"
    assert config.languages == ("fr", "en")
    assert not hasattr(config, "volume")

def test_to_dict_round_trip():
    config = EngineConfig(separator=",", strict_groups=True)
    loaded = EngineConfig.from_dict(config.to_dict())
    assert loaded.separator == ","
    assert loaded.strict_groups is True
