"""
Promise 实现 - 单次赋值的延迟值与链式回调

- promise 有三个状态：pending、fulfilled、rejected，只能从 pending 迁移一次「规范 Promise/A+ 2.1」
- new promise 时传入的 executor 立即同步执行，接收 resolve 与 reject 两个入口
- then 每次都返回一个新的 promise，回调总是经由调度器延迟执行「规范 Promise/A+ 2.2」
- then 回调的返回值交给解析过程 resolve_promise 处理「规范 Promise/A+ 2.3」
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any, Callable, Dict, List, Optional

from .common import logger
from .interfaces import Executor, Scheduler
from .resolution import resolve_promise
from .scheduler import get_default_scheduler
from .types import ArgumentNotIterableError, PromiseState


def _noop_executor(resolve, reject) -> None:
    """由 then 创建的 promise 不需要执行器，敲定入口直接取自实例"""


class Promise:
    """
    Promise - 延迟值

    属性:
        state: 当前状态
        value: 成功值，仅在 FULFILLED 时有意义，且永远不会是 Promise 实例
        reason: 失败原因，仅在 REJECTED 时有意义
        scheduler: 本 promise 及其派生 promise 使用的调度器
    """

    def __init__(self, executor: Executor, *, scheduler: Optional[Scheduler] = None):
        if not callable(executor):
            raise TypeError(f"Promise resolver {executor!r} is not a function")

        self.promise_id = uuid.uuid4().hex[:8]
        self.state = PromiseState.PENDING
        self.value: Any = None
        self.reason: Any = None
        self.scheduler: Scheduler = scheduler if scheduler is not None else get_default_scheduler()

        # 存放成功/失败的回调，等待状态确定后依次执行
        self._on_fulfilled_callbacks: List[Callable[[], None]] = []
        self._on_rejected_callbacks: List[Callable[[], None]] = []

        try:
            executor(self._resolve, self._reject)
        except Exception as exc:
            self._reject(exc)

    # ------------------------------------------------------------------
    # 敲定入口
    # ------------------------------------------------------------------
    def _resolve(self, value: Any) -> None:
        # 成功值本身是 Promise 时，等它敲定后再用其结果敲定自己
        if isinstance(value, Promise):
            value.then(self._resolve, self._reject)
            return

        # 只有 PENDING 时才能迁移，防止 executor 多次调用 resolve/reject
        if self.state is not PromiseState.PENDING:
            return

        self.state = PromiseState.FULFILLED
        self.value = value
        callbacks = self._drain_callbacks(self._on_fulfilled_callbacks)
        if logger.is_debug_enabled():
            logger.debug(f"Promise {self.promise_id}: fulfilled, 触发 {len(callbacks)} 个回调")
        for fn in callbacks:
            fn()

    def _reject(self, reason: Any) -> None:
        if self.state is not PromiseState.PENDING:
            return

        self.state = PromiseState.REJECTED
        self.reason = reason
        callbacks = self._drain_callbacks(self._on_rejected_callbacks)
        if logger.is_debug_enabled():
            logger.debug(f"Promise {self.promise_id}: rejected ({reason!r}), 触发 {len(callbacks)} 个回调")
        for fn in callbacks:
            fn()

    def _drain_callbacks(self, callbacks: List[Callable[[], None]]) -> List[Callable[[], None]]:
        """取出待执行回调并清空两个队列"""
        pending = list(callbacks)
        self._on_fulfilled_callbacks = []
        self._on_rejected_callbacks = []
        return pending

    # ------------------------------------------------------------------
    # 链式调用
    # ------------------------------------------------------------------
    def then(
        self,
        on_fulfilled: Optional[Callable[[Any], Any]] = None,
        on_rejected: Optional[Callable[[Any], Any]] = None,
    ) -> "Promise":
        """
        注册成功/失败回调，返回新的 promise

        on_fulfilled 不可调用时透传成功值（值的穿透），on_rejected 不可调用时
        以相同原因让新 promise 失败。回调抛出的异常会成为新 promise 的失败原因。
        """
        on_fulfilled = on_fulfilled if callable(on_fulfilled) else None
        on_rejected = on_rejected if callable(on_rejected) else None

        promise2 = type(self)(_noop_executor, scheduler=self.scheduler)

        def fulfilled_reaction() -> None:
            if on_fulfilled is None:
                self._settle_derived(promise2, lambda value: value, self.value)
            else:
                self._settle_derived(promise2, on_fulfilled, self.value)

        def rejected_reaction() -> None:
            if on_rejected is None:
                promise2._reject(self.reason)
            else:
                self._settle_derived(promise2, on_rejected, self.reason)

        if self.state is PromiseState.FULFILLED:
            self.scheduler.schedule(fulfilled_reaction)
        elif self.state is PromiseState.REJECTED:
            self.scheduler.schedule(rejected_reaction)
        else:
            self._on_fulfilled_callbacks.append(lambda: self.scheduler.schedule(fulfilled_reaction))
            self._on_rejected_callbacks.append(lambda: self.scheduler.schedule(rejected_reaction))

        return promise2

    @staticmethod
    def _settle_derived(promise2: "Promise", handler: Callable[[Any], Any], argument: Any) -> None:
        """执行回调，并用其返回值解析 promise2"""
        try:
            x = handler(argument)
            resolve_promise(promise2, x, promise2._resolve, promise2._reject)
        except Exception as exc:
            promise2._reject(exc)

    def catch(self, on_rejected: Optional[Callable[[Any], Any]] = None) -> "Promise":
        """等价于 then(None, on_rejected)"""
        return self.then(None, on_rejected)

    def finally_(self, on_finally: Optional[Callable[[], Any]]) -> "Promise":
        """
        无论成功或失败都执行 on_finally，随后保持原来的结果

        on_finally 抛出异常或返回失败的 promise 时，以该失败作为结果。
        """
        if not callable(on_finally):
            return self.then(None, None)

        cls = type(self)
        scheduler = self.scheduler

        def on_value(value: Any) -> "Promise":
            return cls.resolve(on_finally(), scheduler=scheduler).then(lambda _: value)

        def on_reason(reason: Any) -> "Promise":
            return cls.resolve(on_finally(), scheduler=scheduler).then(
                lambda _: cls.reject(reason, scheduler=scheduler)
            )

        return self.then(on_value, on_reason)

    # ------------------------------------------------------------------
    # 静态构造
    # ------------------------------------------------------------------
    @classmethod
    def resolve(cls, value: Any = None, *, scheduler: Optional[Scheduler] = None) -> "Promise":
        """创建以 value 成功的 promise；value 为 Promise 时递归展开"""
        return cls(lambda resolve, reject: resolve(value), scheduler=scheduler)

    @classmethod
    def reject(cls, reason: Any = None, *, scheduler: Optional[Scheduler] = None) -> "Promise":
        """创建以 reason 失败的 promise"""
        return cls(lambda resolve, reject: reject(reason), scheduler=scheduler)

    @classmethod
    def all(cls, promises: Any, *, scheduler: Optional[Scheduler] = None) -> "Promise":
        """
        等待所有元素完成

        结果列表的顺序与输入顺序一致，与完成顺序无关；任一元素失败则立即以该原因失败。
        非 thenable 元素视为已完成的值。
        """
        if not isinstance(promises, Sequence) or isinstance(promises, (str, bytes, bytearray)):
            return cls.reject(ArgumentNotIterableError(promises), scheduler=scheduler)

        items = list(promises)

        def executor(resolve, reject) -> None:
            if not items:
                resolve([])
                return

            result: List[Any] = [None] * len(items)
            count = 0

            def process_data(index: int, value: Any) -> None:
                nonlocal count
                result[index] = value
                count += 1
                if count == len(items):
                    resolve(result)

            def slot_callback(index: int) -> Callable[[Any], None]:
                recorded = False

                def on_value(value: Any) -> None:
                    nonlocal recorded
                    if recorded:
                        return
                    recorded = True
                    process_data(index, value)

                return on_value

            for index, item in enumerate(items):
                then = getattr(item, "then", None)
                if callable(then):
                    then(slot_callback(index), reject)
                else:
                    process_data(index, item)

        return cls(executor, scheduler=scheduler)

    # ------------------------------------------------------------------
    # 状态查询
    # ------------------------------------------------------------------
    def is_pending(self) -> bool:
        return self.state is PromiseState.PENDING

    def is_fulfilled(self) -> bool:
        return self.state is PromiseState.FULFILLED

    def is_rejected(self) -> bool:
        return self.state is PromiseState.REJECTED

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式，便于日志与调试"""
        data: Dict[str, Any] = {
            "promise_id": self.promise_id,
            "state": self.state.value,
            "pending_fulfilled_callbacks": len(self._on_fulfilled_callbacks),
            "pending_rejected_callbacks": len(self._on_rejected_callbacks),
        }
        if self.state is PromiseState.FULFILLED:
            data["value"] = self.value
        elif self.state is PromiseState.REJECTED:
            data["reason"] = self.reason
        return data

    def __await__(self):
        from .sync_adapter import to_future
        return to_future(self).__await__()

    def __repr__(self) -> str:
        if self.state is PromiseState.FULFILLED:
            detail = f", value={self.value!r}"
        elif self.state is PromiseState.REJECTED:
            detail = f", reason={self.reason!r}"
        else:
            detail = ""
        return f"Promise(id={self.promise_id}, state={self.state.value}{detail})"
