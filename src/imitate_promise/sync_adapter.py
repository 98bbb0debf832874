"""
同步/异步适配器

- run_sync(): 在同步代码中排空任务队列，直到 promise 敲定并返回结果
- to_future(): promise -> asyncio.Future，支撑 ``await promise``
- from_future(): asyncio.Future / 协程 -> promise
"""

import asyncio
from typing import Any, Awaitable, Optional, Union

from .interfaces import Scheduler
from .promise import Promise
from .scheduler import AsyncioScheduler, TaskQueueScheduler
from .types import PromiseRejectedError, UnsettledPromiseError, SchedulerBudgetExceeded


def _as_exception(reason: Any) -> BaseException:
    """把失败原因转换为可抛出的异常"""
    # StopIteration 不能设置到 Future 上，也不应从普通函数中抛出
    if isinstance(reason, BaseException) and not isinstance(reason, StopIteration):
        return reason
    return PromiseRejectedError(reason)


def run_sync(promise: Promise) -> Any:
    """
    同步获取 promise 的结果

    只执行到 promise 敲定为止，队列中其余任务保留。成功时返回值，
    失败时抛出失败原因（非异常原因包装为 PromiseRejectedError）。
    """
    scheduler = promise.scheduler
    if not isinstance(scheduler, TaskQueueScheduler):
        raise TypeError(f"run_sync 需要 TaskQueueScheduler，实际为: {type(scheduler).__name__}")

    max_steps = scheduler.budget.max_steps
    steps = 0
    while promise.is_pending():
        if steps >= max_steps:
            raise SchedulerBudgetExceeded(
                f"promise {promise.promise_id} 在 {max_steps} 个任务内未敲定",
                max_steps=max_steps,
            )
        if not scheduler.run_once():
            break
        steps += 1

    if promise.is_fulfilled():
        return promise.value
    if promise.is_rejected():
        raise _as_exception(promise.reason)
    raise UnsettledPromiseError(f"任务队列已清空，promise {promise.promise_id} 仍未敲定")


def to_future(promise: Promise, loop: Optional[asyncio.AbstractEventLoop] = None) -> "asyncio.Future[Any]":
    """
    把 promise 转换为 asyncio.Future

    已敲定的 promise 直接写入结果；仍在等待的 promise 通过 then 订阅。
    promise 使用 TaskQueueScheduler 时，注册唤醒回调：每当有任务入队，
    就在事件循环中排空队列，直到 future 完成后注销。
    """
    loop = loop or asyncio.get_running_loop()
    future = loop.create_future()

    if promise.is_fulfilled():
        future.set_result(promise.value)
        return future
    if promise.is_rejected():
        future.set_exception(_as_exception(promise.reason))
        return future

    def on_value(value: Any) -> None:
        if not future.done():
            loop.call_soon_threadsafe(_set_result, future, value)

    def on_reason(reason: Any) -> None:
        if not future.done():
            loop.call_soon_threadsafe(_set_exception, future, _as_exception(reason))

    scheduler = promise.scheduler
    if isinstance(scheduler, TaskQueueScheduler):
        _pump_on_loop(scheduler, loop, future)

    promise.then(on_value, on_reason)
    return future


def _pump_on_loop(
    scheduler: TaskQueueScheduler,
    loop: asyncio.AbstractEventLoop,
    future: "asyncio.Future[Any]",
) -> None:
    """在事件循环中排空任务队列，多次入队合并为一次排空"""
    drain_pending = False

    def drain() -> None:
        nonlocal drain_pending
        drain_pending = False
        if future.done():
            return
        try:
            scheduler.run_until_idle()
        except Exception as exc:
            _set_exception(future, exc)

    def wakeup() -> None:
        nonlocal drain_pending
        if drain_pending:
            return
        drain_pending = True
        loop.call_soon_threadsafe(drain)

    scheduler.add_wakeup(wakeup)
    future.add_done_callback(lambda _: scheduler.remove_wakeup(wakeup))
    # 入队早于注册的任务
    if scheduler.pending_count:
        wakeup()


def _set_result(future: "asyncio.Future[Any]", value: Any) -> None:
    if not future.done():
        future.set_result(value)


def _set_exception(future: "asyncio.Future[Any]", exc: BaseException) -> None:
    if not future.done():
        future.set_exception(exc)


def from_future(
    awaitable: Union["asyncio.Future[Any]", Awaitable[Any]],
    *,
    scheduler: Optional[Scheduler] = None,
) -> Promise:
    """
    把 asyncio.Future 或协程包装为 promise

    未指定调度器时，使用绑定到该 future 所在事件循环的 AsyncioScheduler。
    future 被取消时 promise 以 asyncio.CancelledError 失败。
    """
    future = asyncio.ensure_future(awaitable)
    if scheduler is None:
        scheduler = AsyncioScheduler(future.get_loop())

    def executor(resolve, reject) -> None:
        def on_done(done: "asyncio.Future[Any]") -> None:
            if done.cancelled():
                reject(asyncio.CancelledError())
                return
            exc = done.exception()
            if exc is not None:
                reject(exc)
            else:
                resolve(done.result())

        future.add_done_callback(on_done)

    return Promise(executor, scheduler=scheduler)
