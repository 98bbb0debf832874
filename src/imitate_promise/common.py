"""
公用工具组件 - 调度预算与日志工具
"""

import logging
from typing import Optional, Any
from dataclasses import dataclass
from enum import Enum


class SchedulerMode(Enum):
    """调度模式"""
    QUEUE = "queue"         # 确定性任务队列
    ASYNCIO = "asyncio"     # asyncio 事件循环


@dataclass
class DrainBudget:
    """调度预算 - 限制单次排空任务队列时执行的任务数"""
    max_steps: int = 10000        # 单次排空允许执行的最大任务数

    def __post_init__(self):
        """验证预算参数"""
        if self.max_steps <= 0:
            raise ValueError("max_steps 必须大于0")


class UnifiedLogger:
    """统一日志器"""

    def __init__(self, logger: Optional[logging.Logger] = None, mode: SchedulerMode = SchedulerMode.QUEUE):
        self.logger = logger or self._create_default_logger()
        self.mode = mode

    def _create_default_logger(self) -> logging.Logger:
        """创建默认日志器"""
        logger = logging.getLogger("imitate_promise")
        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)
            logger.setLevel(logging.INFO)
        return logger

    def is_debug_enabled(self) -> bool:
        """DEBUG 级别是否开启，热路径上用于跳过消息拼接"""
        return self.logger.isEnabledFor(logging.DEBUG)

    def debug(self, message: str, **kwargs):
        """调试信息"""
        self.logger.debug(f"[{self.mode.value.upper()}] {message}", **kwargs)

    def warning(self, message: str, **kwargs):
        """警告信息"""
        self.logger.warning(f"[{self.mode.value.upper()}] {message}", **kwargs)

    def error(self, message: str, **kwargs):
        """错误信息"""
        self.logger.error(f"[{self.mode.value.upper()}] {message}", **kwargs)


# 模块内共享的日志器（promise 与解析过程使用）
logger = UnifiedLogger()


def convert_budget(budget: Any) -> DrainBudget:
    """
    转换预算参数为DrainBudget

    支持 DrainBudget、字典、整数或带 max_steps 属性的对象
    """
    if budget is None:
        return DrainBudget()

    if isinstance(budget, DrainBudget):
        return budget

    # bool 是 int 的子类，不接受
    if isinstance(budget, int) and not isinstance(budget, bool):
        return DrainBudget(max_steps=budget)

    # 处理字典格式
    if isinstance(budget, dict):
        return DrainBudget(max_steps=budget.get("max_steps", 10000))

    # 处理对象格式
    if hasattr(budget, "max_steps"):
        return DrainBudget(max_steps=getattr(budget, "max_steps"))

    raise TypeError(f"无法转换为DrainBudget: {type(budget).__name__}")
