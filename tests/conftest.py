import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def _is_e2e_test(request: pytest.FixtureRequest) -> bool:
    return "tests/e2e/" in str(request.node.fspath).replace("\\", "/")


@pytest.fixture(autouse=True)
def disable_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("time.sleep", lambda *_args, **_kwargs: None)


@pytest.fixture(autouse=True)
def e2e_fast_env(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if not _is_e2e_test(request):
        return

    monkeypatch.setenv("HARNAS_ROLL_DELAY_S", "0")
    monkeypatch.setenv("HARNAS_SEED", "7")
    monkeypatch.setenv("HARNAS_LOG_LEVEL", "WARNING")
