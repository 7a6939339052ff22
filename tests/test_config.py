import pytest

from worldgen_tools.utils.config import (
    DEFAULT_MC_VERSION,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_USER_AGENT,
    DIST_NAME,
    get_cache_root,
    load_settings,
    package_version,
)

ENV_KEYS = (
    "WORLDGEN_CACHE_ROOT",
    "WORLDGEN_HTTP_TIMEOUT_MS",
    "WORLDGEN_USER_AGENT",
    "WORLDGEN_MC_VERSION",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


def test_defaults(tmp_path):
    settings = load_settings()
    assert settings.cache_root == tmp_path / "xdg" / "worldgen-tools"
    assert not settings.cache_root.exists()
    assert settings.timeout_ms == DEFAULT_TIMEOUT_MS
    assert settings.user_agent == DEFAULT_USER_AGENT
    assert settings.mc_version == DEFAULT_MC_VERSION


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("WORLDGEN_CACHE_ROOT", str(tmp_path / "custom"))
    monkeypatch.setenv("WORLDGEN_HTTP_TIMEOUT_MS", "1500")
    monkeypatch.setenv("WORLDGEN_MC_VERSION", "1.20")
    settings = load_settings()
    assert settings.cache_root == tmp_path / "custom"
    assert settings.timeout_ms == 1500.0
    assert settings.mc_version == "1.20"


def test_dotenv_file_is_read(tmp_path):
    (tmp_path / ".env").write_text(
        "WORLDGEN_CACHE_ROOT=from-dotenv\nWORLDGEN_USER_AGENT=custom-agent\n", encoding="utf-8"
    )
    settings = load_settings()
    assert settings.cache_root.name == "from-dotenv"
    assert settings.user_agent == "custom-agent"


def test_environment_wins_over_dotenv(monkeypatch, tmp_path):
    env_path = tmp_path / "alt.env"
    env_path.write_text("WORLDGEN_CACHE_ROOT=from-dotenv\n", encoding="utf-8")
    monkeypatch.setenv("WORLDGEN_CACHE_ROOT", str(tmp_path / "from-env"))
    assert get_cache_root(env_path) == tmp_path / "from-env"


def test_invalid_timeout(monkeypatch):
    monkeypatch.setenv("WORLDGEN_HTTP_TIMEOUT_MS", "soon")
    with pytest.raises(RuntimeError, match="WORLDGEN_HTTP_TIMEOUT_MS"):
        load_settings()


def test_get_cache_root_creates_directory(tmp_path):
    root = get_cache_root()
    assert root == tmp_path / "xdg" / "worldgen-tools"
    assert root.is_dir()


def test_user_agent_carries_package_version():
    assert DEFAULT_USER_AGENT == f"{DIST_NAME}/{package_version()}"
    assert package_version()
