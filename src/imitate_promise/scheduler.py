"""
调度器 - promise 回调的延迟执行能力

提供两种实现:
- TaskQueueScheduler: 确定性 FIFO 任务队列，需要显式排空，适合测试与同步代码
- AsyncioScheduler: 基于 asyncio 事件循环的 call_soon

默认调度器为进程内共享的 TaskQueueScheduler，可通过 set_default_scheduler
或 use_scheduler 替换。TaskQueueScheduler 不会自行执行任务：没有调用
run_until_idle / run_once / run_sync 时，then 安排的任务会一直留在队列中。
在事件循环中 await 一个使用任务队列的 promise 时，to_future 会注册唤醒回调，
由事件循环负责排空队列。
"""

from __future__ import annotations

import asyncio
from collections import deque
from contextlib import contextmanager
from typing import Any, Callable, Deque, Iterator, List, Optional, Union

from .common import DrainBudget, SchedulerMode, UnifiedLogger, convert_budget
from .interfaces import Scheduler
from .types import SchedulerBudgetExceeded


class TaskQueueScheduler:
    """确定性任务队列调度器"""

    def __init__(
        self,
        budget: Optional[Union[DrainBudget, Any]] = None,
        logger: Optional[UnifiedLogger] = None,
    ) -> None:
        self.budget = convert_budget(budget)
        self.logger = logger or UnifiedLogger(mode=SchedulerMode.QUEUE)
        self._queue: Deque[Callable[[], Any]] = deque()
        self._wakeups: List[Callable[[], None]] = []

    def schedule(self, action: Callable[[], Any]) -> None:
        """追加任务到队尾，并通知已注册的唤醒回调"""
        if not callable(action):
            raise TypeError(f"action 必须可调用: {type(action).__name__}")
        self._queue.append(action)
        for wakeup in list(self._wakeups):
            wakeup()

    def add_wakeup(self, wakeup: Callable[[], None]) -> None:
        """注册唤醒回调：每次有新任务入队时调用，由外部驱动者负责排空队列"""
        self._wakeups.append(wakeup)

    def remove_wakeup(self, wakeup: Callable[[], None]) -> None:
        """注销唤醒回调，未注册时忽略"""
        if wakeup in self._wakeups:
            self._wakeups.remove(wakeup)

    def run_once(self) -> bool:
        """执行队首任务，队列为空时返回 False"""
        if not self._queue:
            return False

        action = self._queue.popleft()
        try:
            action()
        except Exception as exc:
            self.logger.error(f"调度任务执行异常: {exc!r}")
            raise
        return True

    def run_until_idle(self) -> int:
        """
        持续执行直到队列为空

        执行过程中新加入的任务也会被执行。超过预算时抛出
        SchedulerBudgetExceeded，剩余任务保留在队列中。

        Returns:
            本次执行的任务数
        """
        steps = 0
        while self._queue:
            if steps >= self.budget.max_steps:
                self.logger.warning(
                    f"任务数达到预算上限 {self.budget.max_steps}，剩余 {len(self._queue)} 个任务"
                )
                raise SchedulerBudgetExceeded(
                    f"单次排空执行任务数超过 {self.budget.max_steps}",
                    max_steps=self.budget.max_steps,
                )
            self.run_once()
            steps += 1
        return steps

    @property
    def pending_count(self) -> int:
        """队列中等待执行的任务数"""
        return len(self._queue)

    def clear(self) -> None:
        """丢弃所有未执行的任务"""
        self._queue.clear()

    def __len__(self) -> int:
        return len(self._queue)

    def __repr__(self) -> str:
        return f"TaskQueueScheduler(pending={len(self._queue)}, max_steps={self.budget.max_steps})"


class AsyncioScheduler:
    """基于 asyncio 事件循环的调度器"""

    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        logger: Optional[UnifiedLogger] = None,
    ) -> None:
        self._loop = loop
        self.logger = logger or UnifiedLogger(mode=SchedulerMode.ASYNCIO)

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        """绑定的事件循环；未显式指定时取当前正在运行的循环"""
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def schedule(self, action: Callable[[], Any]) -> None:
        """通过 call_soon 安排任务，asyncio 保证同一循环内的 FIFO 顺序"""
        if not callable(action):
            raise TypeError(f"action 必须可调用: {type(action).__name__}")
        self.loop.call_soon(action)

    def __repr__(self) -> str:
        return f"AsyncioScheduler(loop={self._loop!r})"


# 全局默认调度器
_default_scheduler: Scheduler = TaskQueueScheduler()


def get_default_scheduler() -> Scheduler:
    """获取默认调度器"""
    return _default_scheduler


def set_default_scheduler(scheduler: Scheduler) -> Scheduler:
    """替换默认调度器，返回之前的调度器"""
    global _default_scheduler
    if not isinstance(scheduler, Scheduler):
        raise TypeError(f"不支持的调度器类型: {type(scheduler).__name__}")
    previous = _default_scheduler
    _default_scheduler = scheduler
    return previous


@contextmanager
def use_scheduler(scheduler: Scheduler) -> Iterator[Scheduler]:
    """在上下文范围内临时替换默认调度器"""
    previous = set_default_scheduler(scheduler)
    try:
        yield scheduler
    finally:
        set_default_scheduler(previous)
