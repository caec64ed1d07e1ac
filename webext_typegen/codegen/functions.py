"""
Function, parameter and event compilers.

Handles leading-optional overload expansion and the conversion of
callback-style asynchronous functions into promise-returning ones.
"""

from typing import Any, Dict, List, Optional, Tuple

from ..logging_config import get_logger
from .naming import create_ts_sanitizer, listener_name
from .schema import ALREADY_OPTIONAL_RETURNS, CompileContext

logger = get_logger(__name__)

Params = List[Dict[str, Any]]


def split_leading_optionals(params: Params) -> List[Params]:
    """
    Expand leading optional parameters into one parameter list per overload.

    An optional parameter followed by a required one cannot be declared,
    so the first list drops every leading optional and each following
    list starts one leading optional later, with those made required.

    Args:
        params: Declared parameters

    Returns:
        ``1 + number of leading optionals`` parameter lists
    """
    first_required = next((i for i, p in enumerate(params) if not p.get("optional")), None)
    if first_required is None:
        return [list(params)]

    leading = [dict(p, optional=False) for p in params[:first_required]]
    rest = list(params[first_required:])
    return [rest] + [leading[i:] + rest for i in range(len(leading))]


def compile_parameters(
    compiler,
    params: Optional[Params],
    ctx: CompileContext,
    include_name: bool = True,
    node_id: Optional[str] = None,
) -> List[str]:
    """Compile parameters to ``name?: type`` (or bare types)."""
    compiled = []
    for param in params or []:
        out = ""
        if include_name:
            out += f"{param.get('name')}{'?' if param.get('optional') else ''}: "
        out += compiler.compile(param, ctx.child(node_id))
        compiled.append(out)
    return compiled


def optional_return(compiler, returns: Dict[str, Any], ctx: CompileContext) -> str:
    return_type = compiler.compile(returns, ctx.child())
    if returns.get("optional") and return_type not in ALREADY_OPTIONAL_RETURNS:
        return_type += " | void"
    return return_type


class FunctionCompiler:
    """Compiles function nodes in their three output forms."""

    def __init__(self, compiler):
        self.compiler = compiler
        self.sanitizer = create_ts_sanitizer()

    def return_type(self, func: Dict[str, Any], ctx: CompileContext) -> Tuple[str, Params]:
        """
        Work out the return type of a function.

        Args:
            func: Function node
            ctx: Compile context

        Returns:
            (return type, parameters left once the callback is removed)
        """
        params = list(func.get("parameters") or [])

        if func.get("returns"):
            # A patched return type replaces the callback
            callback = self._find_callback(params, func.get("async"))
            if callback is not None:
                params.remove(callback)
            return optional_return(self.compiler, func["returns"], ctx), params

        async_ = func["async"] if "async" in func else "callback"
        callback = self._find_callback(params, async_)
        if callback is not None:
            params.remove(callback)

        if callback is not None:
            values = compile_parameters(
                self.compiler,
                callback.get("parameters"),
                ctx,
                include_name=False,
                node_id=func.get("name"),
            )
            if len(values) > 1:
                message = f"Promises cannot return more than one value: {func.get('name')}."
                logger.warning(message)
                ctx.scope.warnings.append(message)
                values = ["object"]
            return f"Promise<{values[0] if values else 'void'}>", params

        if async_ and async_ != "callback":
            return "Promise<any>", params
        return "void", params

    @staticmethod
    def _find_callback(params: Params, name: Any) -> Optional[Dict[str, Any]]:
        if not name:
            return None
        return next(
            (p for p in params if p.get("type") == "function" and p.get("name") == name),
            None,
        )

    def _signatures(self, func: Dict[str, Any], ctx: CompileContext):
        return_type, params = self.return_type(func, ctx)
        for signature in split_leading_optionals(params):
            yield signature, compile_parameters(
                self.compiler, signature, ctx, node_id=func.get("name")
            ), return_type

    def compile_declaration(self, func: Dict[str, Any], ctx: CompileContext) -> str:
        """Namespace-level ``function name(...): ret;`` lines, one per overload."""
        name, export = self.sanitizer.sanitize_function_name(func["name"])
        if export is not None:
            ctx.scope.sink.push(export)

        lines = []
        for signature, params, return_type in self._signatures(func, ctx):
            comment = self.compiler.docs.comment_from_schema(dict(func, parameters=signature))
            lines.append(f"{comment}function {name}({', '.join(params)}): {return_type};")
        return "\n".join(lines)

    def compile_members(self, func: Dict[str, Any], ctx: CompileContext) -> List[str]:
        """Class members ``name?(...): ret``, one per overload."""
        optional = "?" if func.get("optional") else ""
        members = []
        for signature, params, return_type in self._signatures(func, ctx):
            comment = self.compiler.docs.comment_from_schema(dict(func, parameters=signature))
            members.append(f"{comment}{func['name']}{optional}({', '.join(params)}): {return_type}")
        return members

    def compile_inline(self, func: Dict[str, Any], ctx: CompileContext) -> str:
        """Arrow type; overloads become a union of arrow types."""
        arrows = [
            f"({', '.join(params)}) => {return_type}"
            for _, params, return_type in self._signatures(func, ctx)
        ]
        if len(arrows) == 1:
            return arrows[0]
        return "\n| ".join(f"({arrow})" for arrow in arrows)


class EventCompiler:
    """Compiles events to listener-capability types."""

    def __init__(self, compiler):
        self.compiler = compiler

    def compile(self, event: Dict[str, Any], ctx: CompileContext, top_level: bool = True) -> str:
        """
        Compile an event.

        Args:
            event: Event node
            ctx: Compile context
            top_level: ``const name: ...;`` when True, class member otherwise

        Returns:
            Event declaration
        """
        return_type = "void"
        if event.get("returns"):
            return_type = optional_return(self.compiler, event["returns"], ctx)

        extra = None
        if event.get("extraParameters"):
            extra = compile_parameters(self.compiler, event["extraParameters"], ctx)

        variants = []
        for i, signature in enumerate(split_leading_optionals(event.get("parameters") or [])):
            params = ", ".join(compile_parameters(self.compiler, signature, ctx))
            callback = f"({params}) => {return_type}"
            if extra is None:
                variants.append(f"WebExtEvent<{callback}>")
                continue
            name = listener_name(ctx.namespace, event["name"])
            if i == 0:
                ctx.scope.sink.push(
                    f"interface {name}<TCallback = {callback}> {{\n"
                    f"    addListener(cb: TCallback, {', '.join(extra)}): void;\n"
                    f"    removeListener(cb: TCallback): void;\n"
                    f"    hasListener(cb: TCallback): boolean;\n"
                    f"}}"
                )
                variants.append(name)
            else:
                variants.append(f"{name}<{callback}>")

        out = self.compiler.docs.comment_from_schema(event)
        if top_level:
            out += "const "
        out += f"{event['name']}: " + "\n| ".join(variants)
        if top_level:
            if event.get("optional"):
                out += " | undefined"
            out += ";"
        return out
