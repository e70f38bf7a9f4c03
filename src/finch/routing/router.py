"""Path trie mapping (method, path) to a RouteDefinition.

Built while the app composes, then frozen by ``compile()``. A frozen
router is only ever read, so concurrent requests share it freely.
"""

from finch.errors import ConfigurationError, NotFound, RouteConflictError
from finch.routing.route import PathSegment, RouteDefinition, RouteMatch

_Leaf = tuple[RouteDefinition, tuple[str, ...]]


def parse_path(path: str) -> list[PathSegment]:
    """Split *path* into segments; ``:name`` marks a parameter.

    Empty segments are dropped, so ``/books/`` and ``/books`` parse the
    same and ``/`` is no segments at all.
    """
    segments: list[PathSegment] = []
    for raw in filter(None, path.split("/")):
        if raw[0] in "{<":
            raise ConfigurationError(
                f"Route path {path!r} uses {raw!r}. Finch expects :param "
                "segments (e.g. /hello/:name), not {param} or <param>."
            )
        if raw[0] != ":":
            segments.append(PathSegment(raw))
            continue
        name = raw[1:]
        if not name.isidentifier():
            raise ConfigurationError(f"Route path {path!r} has an invalid parameter name {raw!r}.")
        segments.append(PathSegment(raw, is_param=True, param_name=name))
    return segments


def normalize_path(path: str) -> str:
    """Pattern with parameter names erased (``/a/:x`` -> ``/a/:``)."""
    return "/" + "/".join(":" if s.is_param else s.value for s in parse_path(path))


class _Node:
    __slots__ = ("leaves", "param", "static")

    def __init__(self) -> None:
        self.static: dict[str, _Node] = {}
        # one wildcard edge per node; each route keeps its own names
        self.param: _Node | None = None
        self.leaves: dict[str, _Leaf] = {}

    def descend(self, seg: PathSegment) -> "_Node":
        if seg.is_param:
            if self.param is None:
                self.param = _Node()
            return self.param
        return self.static.setdefault(seg.value, _Node())


class Router:
    """Route table for one composed app.

    ::

        router = Router()
        router.add(RouteDefinition("GET", "/hello/:name", hello))
        router.compile()
        router.match("GET", "/hello/Ada").path_params  # {"name": "Ada"}
    """

    __slots__ = ("_compiled", "_root", "_routes")

    def __init__(self) -> None:
        self._root = _Node()
        self._routes: list[RouteDefinition] = []
        self._compiled = False

    @property
    def routes(self) -> list[RouteDefinition]:
        """Registered routes, oldest first."""
        return list(self._routes)

    @property
    def compiled(self) -> bool:
        return self._compiled

    def add(self, route: RouteDefinition) -> None:
        """Insert *route*; a taken (method, pattern) is a ``RouteConflictError``."""
        if self._compiled:
            raise RuntimeError("Router is compiled; routes can no longer be added.")
        node = self._root
        names: list[str] = []
        for seg in parse_path(route.path):
            node = node.descend(seg)
            if seg.param_name is not None:
                names.append(seg.param_name)
        if route.method in node.leaves:
            raise RouteConflictError(node.leaves[route.method][0], route)
        node.leaves[route.method] = (route, tuple(names))
        self._routes.append(route)

    def compile(self) -> None:
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Find the route for *method* and *path*.

        Static segments beat parameters at every level, with backtracking
        when the static branch dead-ends. A path served only under another
        method raises ``NotFound`` like any other miss.
        """
        parts = [p for p in path.split("/") if p]
        # depth-first; params pushed before statics so statics pop first
        stack: list[tuple[_Node, int, tuple[str, ...]]] = [(self._root, 0, ())]
        while stack:
            node, depth, captured = stack.pop()
            if depth == len(parts):
                leaf = node.leaves.get(method)
                if leaf is not None:
                    route, names = leaf
                    return RouteMatch(route, dict(zip(names, captured, strict=True)))
                continue
            part = parts[depth]
            if node.param is not None:
                stack.append((node.param, depth + 1, (*captured, part)))
            static = node.static.get(part)
            if static is not None:
                stack.append((static, depth + 1, captured))
        raise NotFound(f"No route matches {method} {path!r}")
