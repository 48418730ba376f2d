import asyncio
from pathlib import Path

import pytest
from watchdog.observers.polling import PollingObserver

from vibex.assembler import build_artifact
from vibex.settings import Settings
from vibex.watcher import WatchController, WatchState


@pytest.mark.integration
def test_editing_a_watched_file_rebuilds_the_output(tmp_path: Path) -> None:
    source = tmp_path / "main.py"
    source.write_text("print('one')\n", encoding="utf-8")
    settings = Settings(cwd=tmp_path, files=["main.py"])

    async def scenario() -> tuple[str, WatchController]:
        result = await build_artifact(settings)
        assert result is not None
        controller = WatchController(
            settings,
            delay=0.05,
            observer_factory=lambda: PollingObserver(timeout=0.1),
        )
        stop = asyncio.Event()
        task = asyncio.create_task(controller.run(result.files, stop))
        await asyncio.sleep(0.5)
        source.write_text("print('two, and longer')\n", encoding="utf-8")
        text = ""
        for _ in range(50):
            await asyncio.sleep(0.1)
            text = result.output_path.read_text(encoding="utf-8")
            if "two" in text:
                break
        stop.set()
        await task
        return text, controller

    text, controller = asyncio.run(scenario())

    assert "print('two, and longer')" in text
    assert controller.rebuilds >= 1
    assert controller.state is WatchState.STOPPED
