"""
调度器协议与执行器类型定义
"""

from typing import Protocol, runtime_checkable, Any, Callable

# 执行器接收的两个敲定入口
ResolveFn = Callable[[Any], None]
RejectFn = Callable[[Any], None]
Executor = Callable[[ResolveFn, RejectFn], Any]


@runtime_checkable
class Scheduler(Protocol):
    """延迟执行能力协议"""

    def schedule(self, action: Callable[[], Any]) -> None:
        """
        安排一个无参任务在稍后执行

        要求:
            - 任务必须在当前同步代码执行完毕之后才运行
            - 同一同步上下文中提交的任务按提交顺序执行
        """
        ...
