"""
Imitate Promise - 遵循 Promise/A+ 规范的 Python Promise 实现

单次赋值的延迟值，支持链式回调与 thenable 递归解析。

主要功能:
- 三态状态机与 then 链式调用
- 兼容任意 thenable 的解析过程与循环引用检测
- Promise.all / catch / finally_
- 可注入的调度器（确定性任务队列或 asyncio 事件循环）
- 同步获取结果与 asyncio 互操作
"""

# 主要API导出
from .promise import Promise
from .resolution import resolve_promise
from .deferred import Deferred, defer
from .types import (
    PromiseState,
    PromiseError,
    ChainingCycleError,
    ArgumentNotIterableError,
    PromiseRejectedError,
    UnsettledPromiseError,
    SchedulerBudgetExceeded,
)
from .common import DrainBudget, SchedulerMode, UnifiedLogger
from .interfaces import Scheduler
from .scheduler import (
    TaskQueueScheduler,
    AsyncioScheduler,
    get_default_scheduler,
    set_default_scheduler,
    use_scheduler,
)
from .sync_adapter import run_sync, to_future, from_future
from . import examples

__version__ = "1.0.0"
__author__ = "Imitate Promise Team"

# 主要接口
__all__ = [
    # 核心
    "Promise",
    "resolve_promise",
    "Deferred",
    "defer",

    # 调度
    "Scheduler",
    "TaskQueueScheduler",
    "AsyncioScheduler",
    "get_default_scheduler",
    "set_default_scheduler",
    "use_scheduler",
    "DrainBudget",

    # 适配器
    "run_sync",
    "to_future",
    "from_future",

    # 协议与枚举
    "PromiseState",
    "SchedulerMode",
    "UnifiedLogger",

    # 示例模块
    "examples",

    # 异常
    "PromiseError",
    "ChainingCycleError",
    "ArgumentNotIterableError",
    "PromiseRejectedError",
    "UnsettledPromiseError",
    "SchedulerBudgetExceeded",
]


def get_version() -> str:
    """获取版本信息"""
    return __version__
