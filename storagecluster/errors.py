class TopologyError(ValueError):
    """Base class for failures that abort a failure-domain reconciliation pass."""


class InsufficientNodesError(TopologyError):
    def __init__(self, expected: int, found: int) -> None:
        super().__init__(f"Not enough nodes found: expected {expected}, found {found}")
        self.expected = expected
        self.found = found


class SelectorInvalidError(TopologyError):
    pass


class PatchFailureError(TopologyError):
    def __init__(self, node: str, reason: str) -> None:
        super().__init__(f"Failed to patch labels on node {node!r}: {reason}")
        self.node = node
