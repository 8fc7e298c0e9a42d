"""Embedded Lua runtime: lazy, shared, loaded at most once per process."""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol

import httpx

from codebench.exceptions import RuntimeLoadError

logger = logging.getLogger(__name__)

# In-runtime capture context. Every stdlib function it needs is bound to a
# local when the prelude loads, so guest code that reassigns globals such as
# ``table`` or ``print`` cannot break it. Each chunk runs in a fresh
# environment whose print/io/os shadow the real ones; writes never reach _G.
_CAPTURE_PRELUDE = r"""
local _G = _G
local load_chunk, load_string, set_env = load, loadstring, setfenv
local pcall, error, select, type = pcall, error, select, type
local tostring, tonumber, setmetatable = tostring, tonumber, setmetatable
local concat = table.concat
local unpack_values = table.unpack or unpack
local str_find, str_sub, str_gsub = string.find, string.sub, string.gsub
local real_io, real_os = io, os
local exit_marker = {}

local function pack_args(...)
  local parts = {}
  for i = 1, select("#", ...) do
    parts[#parts + 1] = tostring((select(i, ...)))
  end
  return parts
end

local function load_guest(source, env)
  if set_env then
    local chunk, err = load_string(source, "=main")
    if chunk then set_env(chunk, env) end
    return chunk, err
  end
  return load_chunk(source, "=main", "t", env)
end

function codebench_capture_run(source, stdin)
  local out, err = {}, {}
  local buffer, cursor = stdin or "", 1
  local exit_code = nil

  local function read_line(keep_newline)
    if cursor > #buffer then return nil end
    local stop = str_find(buffer, "\n", cursor, true)
    local line
    if stop then
      line = str_sub(buffer, cursor, keep_newline and stop or stop - 1)
      cursor = stop + 1
    else
      line = str_sub(buffer, cursor)
      cursor = #buffer + 1
    end
    return line
  end

  local function read_one(fmt)
    if type(fmt) == "number" then
      if cursor > #buffer then return nil end
      local chunk = str_sub(buffer, cursor, cursor + fmt - 1)
      cursor = cursor + #chunk
      return chunk
    end
    local kind = str_sub((str_gsub(fmt or "l", "^%*", "")), 1, 1)
    if kind == "n" then
      local first, last = str_find(buffer, "^%s*%S+", cursor)
      if not first then return nil end
      local token = str_sub(buffer, first, last)
      cursor = last + 1
      return tonumber(token)
    elseif kind == "a" then
      local rest = str_sub(buffer, cursor)
      cursor = #buffer + 1
      return rest
    elseif kind == "L" then
      return read_line(true)
    end
    return read_line(false)
  end

  local function guest_read(...)
    local count = select("#", ...)
    if count == 0 then return read_one("l") end
    local results = {}
    for i = 1, count do results[i] = read_one((select(i, ...))) end
    return unpack_values(results, 1, count)
  end

  local function writer(target)
    return function(...)
      target[#target + 1] = concat(pack_args(...))
    end
  end
  local write_out, write_err = writer(out), writer(err)

  local stdout_file = {}
  function stdout_file:write(...) write_out(...) return self end
  function stdout_file:flush() return self end
  function stdout_file:setvbuf() return true end
  local stderr_file = {}
  function stderr_file:write(...) write_err(...) return self end
  function stderr_file:flush() return self end
  function stderr_file:setvbuf() return true end
  local stdin_file = {}
  function stdin_file:read(...) return guest_read(...) end
  function stdin_file:lines() return function() return read_line(false) end end
  function stdin_file:close() return true end

  local guest_io = setmetatable({
    write = function(...) write_out(...) return stdout_file end,
    read = guest_read,
    lines = function(filename, ...)
      if filename == nil then return function() return read_line(false) end end
      return real_io.lines(filename, ...)
    end,
    stdout = stdout_file,
    stderr = stderr_file,
    stdin = stdin_file,
  }, {__index = real_io})
  local guest_os = setmetatable({
    exit = function(code)
      exit_code = code
      error(exit_marker, 0)
    end,
  }, {__index = real_os})

  local env = setmetatable({
    print = function(...) out[#out + 1] = concat(pack_args(...), "\t") .. "\n" end,
    io = guest_io,
    os = guest_os,
  }, {__index = _G})
  env._G = env

  local ok, failure
  local chunk, load_error = load_guest(source, env)
  if chunk then
    ok, failure = pcall(chunk)
  else
    ok, failure = false, load_error
  end

  if not ok and failure == exit_marker then
    ok = exit_code == nil or exit_code == true or exit_code == 0
    if not ok then err[#err + 1] = "exit status " .. tostring(exit_code) .. "\n" end
  elseif not ok then
    local shown, text = pcall(tostring, failure)
    err[#err + 1] = (shown and text or "error object is not a string") .. "\n"
  end
  return concat(out), concat(err), ok
end
"""


class RuntimeState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


@dataclass
class GuestResult:
    stdout: str
    stderr: str
    ok: bool


class RuntimeHandle(Protocol):
    async def run(self, source: str, stdin: str | None = None) -> GuestResult: ...


class LuaRuntimeHandle:
    """A loaded Lua VM. Runs are queued; the VM has one active redirection."""

    def __init__(self, lua: Any) -> None:
        self._lua = lua
        self._capture_run = lua.globals()["codebench_capture_run"]
        self._lock = asyncio.Lock()

    async def run(self, source: str, stdin: str | None = None) -> GuestResult:
        async with self._lock:
            return await asyncio.to_thread(self._run_blocking, source, stdin or "")

    def _run_blocking(self, source: str, stdin: str) -> GuestResult:
        from lupa import LuaError

        try:
            stdout, stderr, ok = self._capture_run(source, stdin)
        except LuaError as e:
            logger.warning("Lua capture context failed: %s", e)
            return GuestResult(stdout="", stderr=f"{e}\n", ok=False)
        return GuestResult(stdout=stdout or "", stderr=stderr or "", ok=bool(ok))


def _build_lua_runtime(bundle: str) -> LuaRuntimeHandle:
    from lupa import LuaRuntime

    lua = LuaRuntime(unpack_returned_tuples=True, register_eval=False)
    lua.execute(_CAPTURE_PRELUDE)
    if bundle:
        lua.execute(bundle)
    return LuaRuntimeHandle(lua)


async def load_lua_runtime(bundle_url: str = "", timeout: float = 30.0) -> LuaRuntimeHandle:
    """Fetch the optional bundle, then build the VM off the event loop."""
    bundle = ""
    if bundle_url:
        logger.info("Fetching runtime bundle from %s", bundle_url)
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.get(bundle_url)
            resp.raise_for_status()
            bundle = resp.text
    return await asyncio.to_thread(_build_lua_runtime, bundle)


Loader = Callable[[], Awaitable[RuntimeHandle]]


class EmbeddedRuntimeBootstrapper:
    """Owns the one runtime handle and deduplicates concurrent loads.

    Every caller arriving while a load is in flight awaits the same future,
    so a load failure reaches all of them. A failed load leaves the state
    uninitialized and the next call retries. A ready handle is never dropped.
    """

    def __init__(self, loader: Loader | None = None) -> None:
        self._loader = loader or load_lua_runtime
        self._handle: RuntimeHandle | None = None
        self._pending: asyncio.Future[RuntimeHandle] | None = None
        self.load_attempts = 0

    @property
    def state(self) -> RuntimeState:
        if self._handle is not None:
            return RuntimeState.READY
        if self._pending is not None:
            return RuntimeState.LOADING
        return RuntimeState.UNINITIALIZED

    async def ensure_ready(self) -> RuntimeHandle:
        if self._handle is not None:
            return self._handle
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._load())
        return await asyncio.shield(self._pending)

    async def _load(self) -> RuntimeHandle:
        self.load_attempts += 1
        logger.info("Loading embedded runtime (attempt %d)", self.load_attempts)
        try:
            handle = await self._loader()
        except Exception as exc:
            self._pending = None
            logger.warning("Embedded runtime failed to load: %s", exc)
            raise RuntimeLoadError(f"Failed to load the embedded runtime: {exc}") from exc
        self._handle = handle
        self._pending = None
        logger.info("Embedded runtime ready")
        return handle


_shared: EmbeddedRuntimeBootstrapper | None = None


def shared_bootstrapper(bundle_url: str = "") -> EmbeddedRuntimeBootstrapper:
    """Process-wide bootstrapper; the first call fixes the bundle URL."""
    global _shared
    if _shared is None:

        async def _loader() -> RuntimeHandle:
            return await load_lua_runtime(bundle_url)

        _shared = EmbeddedRuntimeBootstrapper(_loader)
    return _shared
