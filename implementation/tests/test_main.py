import asyncio
import json

from main import main


def test_host_writes_save_and_export(tmp_path):
    save = tmp_path / "save.json"
    export = tmp_path / "export.txt"
    asyncio.run(main(["--save", str(save), "--seconds", "2", "--seed", "7",
                      "--export", str(export), "--autoplay"]))
    data = json.loads(save.read_text(encoding="utf-8"))
    assert data["cash"] >= 0
    assert export.read_text(encoding="utf-8")


def test_host_shares_a_running_loop(tmp_path):
    save = tmp_path / "save.json"
    seen = []

    async def neighbour():
        for _ in range(3):
            seen.append(save.exists())
            await asyncio.sleep(0)

    async def both():
        await asyncio.gather(main(["--save", str(save), "--seconds", "5", "--seed", "7"]), neighbour())

    asyncio.run(both())
    assert seen[0] is False
    assert save.exists()
