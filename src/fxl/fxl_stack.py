"""Fixed capacity value stack used by the FXL virtual machine."""

from typing import List


STACK_SIZE = 64


class FXLStack:
    """
    A stack of floats with a fixed capacity.

    Storage is allocated once, up front, and never grows.  push() and pop() report
    overflow and underflow through their return values rather than raising, so the VM
    can turn them into evaluation errors.
    """

    def __init__(self, capacity: int = STACK_SIZE) -> None:
        self.capacity = capacity
        self._items: List[float] = [0.0] * capacity
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def push(self, value: float) -> bool:
        """Push a value, returning False if the stack is full."""
        if self._size >= self.capacity:
            return False

        self._items[self._size] = value
        self._size += 1
        return True

    def pop(self) -> float | None:
        """Pop the top value, returning None if the stack is empty."""
        if self._size == 0:
            return None

        self._size -= 1
        return self._items[self._size]

    def pop_n(self, n: int) -> List[float] | None:
        """
        Pop n values.

        Returns:
            The values in the order they were pushed, or None (leaving the stack untouched)
            if fewer than n values are available
        """
        if n > self._size:
            return None

        start = self._size - n
        values = self._items[start:self._size]
        self._size = start
        return values
