"""Deferred 句柄 - 在执行器之外控制 promise 的敲定。"""

from __future__ import annotations

from typing import Any, Optional

from .interfaces import Scheduler
from .promise import Promise


class Deferred:
    """
    Deferred 是异步任务的"生产者"一侧，promise 是"消费者"一侧。

    属性:
        promise: 关联的 Promise
        resolve: 以给定值敲定 promise
        reject: 以给定原因让 promise 失败
    """

    def __init__(self, *, scheduler: Optional[Scheduler] = None) -> None:
        self.promise = Promise(self._executor, scheduler=scheduler)

    def _executor(self, resolve, reject) -> None:
        self.resolve = resolve
        self.reject = reject

    def __repr__(self) -> str:
        return f"Deferred({self.promise!r})"


def defer(*, scheduler: Optional[Scheduler] = None) -> Deferred:
    """创建 Deferred 句柄，供规范测试套件从外部驱动敲定。"""

    return Deferred(scheduler=scheduler)


def resolved(value: Any, *, scheduler: Optional[Scheduler] = None) -> Promise:
    return Promise.resolve(value, scheduler=scheduler)


def rejected(reason: Any, *, scheduler: Optional[Scheduler] = None) -> Promise:
    return Promise.reject(reason, scheduler=scheduler)
