"""
Child-process runner for the local audit scripts (page audit, all-pages
Lighthouse). Each run has a hard timeout and an output size cap; the
process is killed when either is exceeded.
"""

import asyncio
import logging
import shlex
from typing import Any, List, Optional

from core.errors import LLMResponseError, ScriptExecutionError
from utils.parsing.json import extract_json

logger = logging.getLogger(__name__)


async def _read_capped(stream: asyncio.StreamReader, max_bytes: int) -> bytes:
    chunks = []
    total = 0
    while True:
        chunk = await stream.read(65536)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise ScriptExecutionError(f"Script output exceeded {max_bytes} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


async def _terminate(proc: asyncio.subprocess.Process):
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()


async def run_script(
    command: str,
    args: Optional[List[str]] = None,
    timeout: float = 120,
    max_output: int = 10 * 1024 * 1024,
) -> Any:
    """
    Run ``command`` with ``args`` and parse its stdout as JSON.

    Raises:
        ScriptExecutionError: non-zero exit, timeout, oversized or non-JSON output
    """
    argv = shlex.split(command) + list(args or [])
    logger.info(f"🛠️ Running {argv[0]} {' '.join(argv[1:2])} (timeout {timeout}s)")

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ScriptExecutionError(f"Could not start {argv[0]}: {e.strerror or str(e)}")

    try:
        stdout, stderr = await asyncio.wait_for(
            asyncio.gather(
                _read_capped(proc.stdout, max_output),
                _read_capped(proc.stderr, max_output),
            ),
            timeout=timeout,
        )
        await asyncio.wait_for(proc.wait(), timeout=5)
    except asyncio.TimeoutError:
        await _terminate(proc)
        raise ScriptExecutionError(f"{argv[0]} timed out after {timeout}s")
    except ScriptExecutionError:
        await _terminate(proc)
        raise

    if proc.returncode != 0:
        tail = stderr.decode("utf-8", errors="replace").strip()[-300:]
        raise ScriptExecutionError(f"{argv[0]} exited with code {proc.returncode}: {tail}")

    output = stdout.decode("utf-8", errors="replace")
    try:
        return extract_json(output)
    except LLMResponseError as e:
        raise ScriptExecutionError(f"{argv[0]} produced no JSON output: {str(e)[:200]}")
