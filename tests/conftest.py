import logging
from pathlib import Path

import pytest

from upspin_config.loader import Loader


def _write_keys(directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "public.upspinkey").write_text("p256\n1234\n5678\n")
    (directory / "secret.upspinkey").write_text("9999\n")
    return directory


@pytest.fixture
def home(tmp_path: Path) -> Path:
    home = tmp_path / "home"
    _write_keys(home / ".ssh")
    (home / "upspin").mkdir()
    return home


@pytest.fixture
def keys_dir(tmp_path: Path) -> Path:
    return _write_keys(tmp_path / "keys")


@pytest.fixture
def loader(home: Path) -> Loader:
    return Loader(homedir=lambda: home)


@pytest.fixture(autouse=True)
def _reset_upspin_logger():
    yield
    logger = logging.getLogger("upspin")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
