import pytest

from worldgen_tools import cli
from worldgen_tools.data.downloader import Downloader
from worldgen_tools.data.transport import FixtureDownloader
from worldgen_tools.services.vanilla import MCMETA_URL, VanillaDataService

SUMMARY = f"{MCMETA_URL}/1.19.2-summary"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("WORLDGEN_CACHE_ROOT", str(tmp_path / "default-cache"))
    monkeypatch.delenv("WORLDGEN_MC_VERSION", raising=False)


def test_offline_without_cache_fails(tmp_path, capsys):
    code = cli.main(["--cache-dir", str(tmp_path / "empty"), "--offline"])

    assert code == 1
    out = capsys.readouterr().out
    assert "Noise: 0 entries" in out
    assert "Density function: 0 entries" in out


def test_offline_with_cache_succeeds(tmp_path, capsys):
    cache_dir = tmp_path / "warm"
    transport = FixtureDownloader(
        {
            f"{SUMMARY}/version.txt": "1.19.2",
            f"{SUMMARY}/data/worldgen/noise/data.min.json": {"a": {}, "b": {}},
            f"{SUMMARY}/data/worldgen/density_function/data.min.json": {"c": 1.0},
        }
    )
    VanillaDataService(Downloader(cache_dir, transport=transport)).load()

    code = cli.main(["--cache-dir", str(cache_dir), "--offline"])

    assert code == 0
    out = capsys.readouterr().out
    assert "Noise: 2 entries" in out
    assert "Density function: 1 entries" in out


def test_parse_args_defaults():
    args = cli.parse_args([])
    assert args.cache_dir is None
    assert args.version is None
    assert args.offline is False


def test_cache_dir_leaves_default_root_alone(tmp_path):
    cli.main(["--cache-dir", str(tmp_path / "elsewhere"), "--offline"])

    assert not (tmp_path / "default-cache").exists()


def test_default_root_used_without_cache_dir(tmp_path):
    cli.main(["--offline"])

    assert (tmp_path / "default-cache").is_dir()
