# src/head_auditor/ordering.py
from typing import List, Sequence
from pydantic import BaseModel, ConfigDict

from .classifier import classify
from .dom.core import ElementNode


class OrderingViolation(BaseModel):
    """
    An adjacent pair in one head where the earlier element has a lower weight
    than the one that follows it. `current_index` points at the element that
    should come later.
    """
    model_config = ConfigDict(frozen=True)

    current_index: int
    next_index: int
    current: str
    current_weight: int
    next: str
    next_weight: int


def check_order(children: Sequence[ElementNode]) -> List[OrderingViolation]:
    """
    Single linear pass over the element children of one head container.

    Args:
        children (Sequence[ElementNode]): Element children in document order.

    Returns:
        List[OrderingViolation]: One entry per out-of-order adjacent pair.
    """
    categories = [classify(child) for child in children]
    violations = []

    for i in range(len(categories) - 1):
        current, following = categories[i], categories[i + 1]
        if current.weight < following.weight:
            violations.append(OrderingViolation(
                current_index=i,
                next_index=i + 1,
                current=current.label,
                current_weight=current.weight,
                next=following.label,
                next_weight=following.weight,
            ))

    return violations
