"""
核心类型定义

包含 Promise 状态枚举与框架内使用的异常类型。
"""

from __future__ import annotations
from enum import Enum
from typing import Any


class PromiseState(Enum):
    """Promise 状态枚举「规范 Promise/A+ 2.1」"""
    PENDING = "pending"           # 等待态
    FULFILLED = "fulfilled"       # 成功态
    REJECTED = "rejected"         # 失败态

    @property
    def is_settled(self) -> bool:
        """是否已敲定（成功或失败）"""
        return self is not PromiseState.PENDING


class PromiseError(RuntimeError):
    """框架运行时异常基类"""


class ChainingCycleError(PromiseError, TypeError):
    """then 的返回值与待解析的 promise 是同一个对象「规范 Promise/A+ 2.3.1」"""

    def __init__(self, message: str = "Chaining cycle detected for promise"):
        super().__init__(message)


class ArgumentNotIterableError(PromiseError, TypeError):
    """Promise.all 的参数不是有序序列"""

    def __init__(self, argument: Any):
        super().__init__(f"Argument is not iterable: {type(argument).__name__}")
        self.argument = argument


class PromiseRejectedError(PromiseError):
    """以非异常对象作为失败原因的 promise 需要被抛出时使用的包装"""

    def __init__(self, reason: Any):
        super().__init__(f"Promise rejected with reason: {reason!r}")
        self.reason = reason


class UnsettledPromiseError(PromiseError):
    """任务队列已清空，但 promise 仍处于等待态"""


class SchedulerBudgetExceeded(PromiseError):
    """单次排空任务队列时执行的任务数超过预算"""

    def __init__(self, message: str, *, max_steps: int):
        super().__init__(message)
        self.max_steps = max_steps
