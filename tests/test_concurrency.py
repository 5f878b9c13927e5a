"""
stagewrap — Concurrency Tests
===============================

What:  Overlapping calls through one shared middleware instance never see
       each other's environment or response.
How:   A barrier inside the application holds every request in flight at
       the same time before any of them returns.

What we test:
    ✅ N concurrent threaded calls each get their own response
    ✅ Hook-level per-call values stay with their own call
    ✅ Shared state guarded by a PrivateAttr lock counts every request
    ✅ N concurrent async calls with interleaved hooks each get their own response
"""

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import PrivateAttr

from stagewrap.middleware import AsyncMiddleware, Middleware
from stagewrap.schemas.response import Response

WORKERS = 8


class TagRequest(Middleware):
    """Copies PATH_INFO into a header after the application has run."""

    def preinvoke(self, invocation):
        invocation.set_environ_value("tag", invocation.environ["PATH_INFO"])

    def postinvoke(self, invocation):
        response = invocation.response
        invocation.set_response(
            response.replace(headers=response.headers + [("X-Tag", invocation.environ["tag"])])
        )


class CountRequests(Middleware):
    _lock: threading.Lock = PrivateAttr(default_factory=threading.Lock)
    _count: int = PrivateAttr(default=0)

    def preinvoke(self, invocation):
        with self._lock:
            self._count += 1

    @property
    def count(self) -> int:
        with self._lock:
            return self._count


def make_barrier_app(parties):
    barrier = threading.Barrier(parties, timeout=10)

    def app(environ):
        barrier.wait()
        return Response(status=200, headers=[], body=[environ["PATH_INFO"].encode()])

    return app


class TestThreadedCalls:

    def test_each_call_gets_its_own_response(self):
        app = TagRequest.wrap(make_barrier_app(WORKERS))
        paths = [f"/req/{i}" for i in range(WORKERS)]

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            responses = list(pool.map(lambda p: app({"PATH_INFO": p}), paths))

        for path, response in zip(paths, responses):
            assert response.body == [path.encode()]
            assert response.get_header("X-Tag") == path

    def test_nested_layers_under_load(self):
        inner = TagRequest.wrap(make_barrier_app(WORKERS))
        app = TagRequest.wrap(inner)
        paths = [f"/nested/{i}" for i in range(WORKERS)]

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            responses = list(pool.map(lambda p: app({"PATH_INFO": p}), paths))

        for path, response in zip(paths, responses):
            assert [value for name, value in response.headers if name == "X-Tag"] == [path, path]

    def test_guarded_shared_state(self):
        middleware = CountRequests(make_barrier_app(WORKERS))
        app = middleware.to_app()

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            list(pool.map(lambda i: app({"PATH_INFO": f"/{i}"}), range(WORKERS)))

        assert middleware.count == WORKERS


class AsyncTag(AsyncMiddleware):
    async def preinvoke(self, invocation):
        # Later requests finish their preinvoke first
        await asyncio.sleep(0.001 * (WORKERS - int(invocation.environ["n"])))
        invocation.set_environ_value("tag", invocation.environ["PATH_INFO"])

    async def postinvoke(self, invocation):
        await asyncio.sleep(0)
        response = invocation.response
        invocation.set_response(
            response.replace(headers=[("X-Tag", invocation.environ["tag"])])
        )


class TestAsyncCalls:

    @pytest.mark.asyncio
    async def test_interleaved_calls_get_their_own_response(self):
        async def app(environ):
            await asyncio.sleep(0)
            return Response(status=200, headers=[], body=[environ["PATH_INFO"].encode()])

        wrapped = AsyncTag.wrap(app)
        environs = [{"PATH_INFO": f"/a/{i}", "n": str(i)} for i in range(WORKERS)]

        responses = await asyncio.gather(*(wrapped(env) for env in environs))

        for env, response in zip(environs, responses):
            assert response.body == [env["PATH_INFO"].encode()]
            assert response.get_header("X-Tag") == env["PATH_INFO"]
