# run_all.py
import asyncio
import sys
from pathlib import Path

from ppdb_bot.core.config import settings

ROOT = Path(__file__).resolve().parent


async def run_process(name: str, cmd: list):
    """
    Runs a subprocess and streams logs to console.
    """
    print(f"▶ Starting {name}: {' '.join(cmd)}")

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=ROOT,
    )

    async def _pipe_reader(stream, prefix):
        while True:
            line = await stream.readline()
            if not line:
                break
            print(f"[{prefix}] {line.decode().rstrip()}")

    # concurrently stream logs
    await asyncio.gather(
        _pipe_reader(process.stdout, name),
        _pipe_reader(process.stderr, name),
    )


async def main():
    tasks = []

    # Redis is only needed when sessions are shared between workers
    if settings.SESSION_BACKEND == "redis":
        tasks.append(run_process("REDIS", ["redis-server"]))

    uvicorn_cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        "ppdb_bot.main:app",
        "--host", "0.0.0.0",
        "--port", str(settings.PORT),
    ]
    tasks.append(run_process("APP", uvicorn_cmd))

    await asyncio.gather(*tasks)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("Shutting down...")
