class FigmaSimplifyError(Exception):
    """Base class for failures raised while simplifying a Figma tree."""


class UnknownPaintTypeError(FigmaSimplifyError, ValueError):
    def __init__(self, paint_type, node_id=None):
        self.paint_type = paint_type
        self.node_id = node_id
        message = f"Unknown paint type: {paint_type}"
        if node_id:
            message += f" (node {node_id})"
        super().__init__(message)


class SerializationError(FigmaSimplifyError):
    pass


class TreeTooDeepError(FigmaSimplifyError):
    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(f"Figma tree is deeper than {max_depth} levels")
