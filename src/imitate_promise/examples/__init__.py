"""行为演示示例"""

from .execution_order import (
    execution_sequence,
    error_chain,
    continue_after_catch,
    value_penetration,
)

__all__ = [
    "execution_sequence",
    "error_chain",
    "continue_after_catch",
    "value_penetration",
]
