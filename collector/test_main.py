import argparse

import pytest

from collector.__main__ import async_main, select_sources


def test_select_sources():
    assert [s.key.value for s in select_sources(None)] == ["football-ua"]
    assert [s.key.value for s in select_sources("football-ua")] == ["football-ua"]
    assert select_sources("unknown") == []


@pytest.mark.asyncio
async def test_missing_credentials_exit_with_error(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("DATABASE_URL", "OPENAI_API_KEY", "TELEGRAM_BOT_TOKEN", "TELEGRAM_CHANNEL_ID"):
        monkeypatch.delenv(name, raising=False)

    code = await async_main(argparse.Namespace(once=True, source=None, init_db=False))

    assert code == 1
