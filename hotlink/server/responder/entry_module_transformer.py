"""
Rewrites the application's entry module so its top-level bindings are
also published on the application's global object.

Each reload executes the entry module in a fresh module namespace. Copying
every top-level binding onto ``__global__`` keeps that state reachable
from the rest of the application across executions:

    counter = 0                 counter = 0
    def main(): ...     =>      __global__.counter = counter
                                def main(): ...
                                __global__.main = main
"""

import ast

from hotlink.constants import GLOBAL_OBJECT_NAME

NESTED_BLOCKS = (
    ast.If,
    ast.Try,
    ast.TryStar,
    ast.With,
    ast.AsyncWith,
    ast.For,
    ast.AsyncFor,
    ast.While,
    ast.Match,
)

# Targets of these are bound before the body runs, or never.
HEADER_BINDINGS = (
    ast.With,
    ast.AsyncWith,
    ast.For,
    ast.AsyncFor,
)


def _target_names(target: ast.expr) -> list[str]:
    match target:
        case ast.Name(id=name):
            return [name]

        case ast.Tuple(elts=elements) | ast.List(elts=elements):
            return [name for element in elements for name in _target_names(element)]

        case ast.Starred(value=value):
            return _target_names(value)

        case _:
            # Attribute and subscript targets bind nothing new.
            return []


def _pattern_names(pattern: ast.pattern) -> list[str]:
    names: list[str] = []

    for node in ast.walk(pattern):
        match node:
            case ast.MatchAs(name=str() as name) | ast.MatchStar(name=str() as name):
                names.append(name)

            case ast.MatchMapping(rest=str() as rest):
                names.append(rest)

    return names


def _evaluated_expressions(statement: ast.stmt) -> list[ast.AST]:
    match statement:
        case ast.If(test=test) | ast.While(test=test):
            return [test]

        case ast.For(iter=iterable) | ast.AsyncFor(iter=iterable):
            return [iterable]

        case ast.With(items=items) | ast.AsyncWith(items=items):
            return [item.context_expr for item in items]

        case ast.Match(subject=subject):
            return [subject]

        case (
            ast.Try()
            | ast.TryStar()
            | ast.FunctionDef()
            | ast.AsyncFunctionDef()
            | ast.ClassDef()
        ):
            return []

        case _:
            return [statement]


def _scope_nodes(node: ast.AST):
    yield node

    for child in ast.iter_child_nodes(node):
        # Lambdas get their own scope, comprehensions do not for ":=".
        if not isinstance(child, ast.Lambda):
            yield from _scope_nodes(child)


def assignment_expression_names(statement: ast.stmt) -> list[str]:
    """Names bound by ``:=`` in the expressions the statement itself evaluates."""
    return [
        name
        for expression in _evaluated_expressions(statement)
        for node in _scope_nodes(expression)
        if isinstance(node, ast.NamedExpr)
        for name in _target_names(node.target)
    ]


def _direct_names(statement: ast.stmt) -> list[str]:
    match statement:
        case ast.Assign(targets=targets):
            return [name for target in targets for name in _target_names(target)]

        case ast.AnnAssign(target=ast.Name(id=name), value=value) if value is not None:
            return [name]

        case ast.AugAssign(target=ast.Name(id=name)):
            return [name]

        case ast.FunctionDef(name=name) | ast.AsyncFunctionDef(name=name) | ast.ClassDef(
            name=name
        ):
            return [name]

        case ast.Import(names=aliases):
            return [alias.asname or alias.name.split(".")[0] for alias in aliases]

        case ast.ImportFrom(module="__future__"):
            return []

        case ast.ImportFrom(names=aliases):
            return [alias.asname or alias.name for alias in aliases if alias.name != "*"]

        case ast.For(target=target) | ast.AsyncFor(target=target):
            return _target_names(target)

        case ast.With(items=items) | ast.AsyncWith(items=items):
            return [
                name
                for item in items
                if item.optional_vars is not None
                for name in _target_names(item.optional_vars)
            ]

        case _:
            return []


def bound_names(statement: ast.stmt) -> list[str]:
    """
    Names a single module-level statement binds in the module namespace,
    not counting statements nested in its body.
    """
    return list(
        dict.fromkeys(
            _direct_names(statement) + assignment_expression_names(statement)
        )
    )


class EntryModuleTransformer:
    def __init__(
        self,
        source: str,
        global_name: str = GLOBAL_OBJECT_NAME,
        filename: str = "app.py",
    ) -> None:
        self.source = source
        self.global_name = global_name
        self.filename = filename

    def convert(self) -> str:
        """Return the rewritten source. Raises SyntaxError for invalid input."""
        tree = ast.parse(self.source, filename=self.filename)
        tree.body = self._rewrite_block(tree.body)
        ast.fix_missing_locations(tree)

        return ast.unparse(tree) + "\n"

    def _rewrite_block(self, statements: list[ast.stmt]) -> list[ast.stmt]:
        rewritten: list[ast.stmt] = []

        for statement in statements:
            if isinstance(statement, NESTED_BLOCKS):
                self._rewrite_nested(statement)

            rewritten.append(statement)

            names = [
                name for name in bound_names(statement) if name != self.global_name
            ]

            if isinstance(statement, HEADER_BINDINGS):
                statement.body[:0] = [self._publish(name, statement) for name in names]
                continue

            # ":=" inside a short-circuited expression may leave its name unbound.
            conditional = set(assignment_expression_names(statement))
            rewritten.extend(
                self._publish_if_bound(name, statement)
                if name in conditional
                else self._publish(name, statement)
                for name in names
            )

        return rewritten

    def _rewrite_nested(self, statement: ast.stmt):
        if isinstance(statement, ast.Match):
            for case in statement.cases:
                case.body = [
                    self._publish(name, case.pattern)
                    for name in dict.fromkeys(_pattern_names(case.pattern))
                    if name != self.global_name
                ] + self._rewrite_block(case.body)

            return

        statement.body = self._rewrite_block(statement.body)

        if orelse := getattr(statement, "orelse", None):
            statement.orelse = self._rewrite_block(orelse)

        if finalbody := getattr(statement, "finalbody", None):
            statement.finalbody = self._rewrite_block(finalbody)

        for handler in getattr(statement, "handlers", []):
            handler.body = self._rewrite_block(handler.body)

    def _publish(self, name: str, origin: ast.AST) -> ast.stmt:
        publish = ast.Assign(
            targets=[
                ast.Attribute(
                    value=ast.Name(id=self.global_name, ctx=ast.Load()),
                    attr=name,
                    ctx=ast.Store(),
                )
            ],
            value=ast.Name(id=name, ctx=ast.Load()),
        )

        return ast.copy_location(publish, origin)

    def _publish_if_bound(self, name: str, origin: ast.AST) -> ast.stmt:
        guard = ast.If(
            test=ast.Compare(
                left=ast.Constant(value=name),
                ops=[ast.In()],
                comparators=[
                    ast.Call(
                        func=ast.Name(id="globals", ctx=ast.Load()),
                        args=[],
                        keywords=[],
                    )
                ],
            ),
            body=[self._publish(name, origin)],
            orelse=[],
        )

        return ast.copy_location(guard, origin)
