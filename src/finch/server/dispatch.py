"""Request dispatch — route, validate, invoke, normalize, check.

The one place a request meets its route's contract. Everything that can
go wrong along the way ends up as a structured error ``Response`` via
``finch.server.errors``; the caller always gets a ``Response`` back.
"""

import inspect
from collections.abc import Callable, Mapping
from dataclasses import replace
from typing import Any

from finch._internal.invoke import invoke
from finch.data.protocol import DataAccess
from finch.errors import ConfigurationError, ContractBreachError, ValidationError
from finch.http.query import QueryParams
from finch.http.request import Request
from finch.http.response import Response
from finch.result import Err, Ok, to_result
from finch.routing.route import RouteDefinition
from finch.routing.router import Router
from finch.schema.types import Schema
from finch.schema.validate import validate
from finch.server.errors import error_response


async def dispatch_request(
    router: Router,
    method: str,
    path: str,
    *,
    query: QueryParams | Mapping[str, Any] | None = None,
    body: Any = None,
    db: DataAccess | None = None,
    request: Request | None = None,
    providers: Mapping[type, Callable[..., Any]] | None = None,
    debug: bool = False,
) -> Response:
    """Dispatch one request against a compiled router.

    Never raises for request-level failures: not found, validation,
    handler errors, data errors and contract breaches all come back as
    error responses.
    """
    method = method.upper()
    try:
        match = router.match(method, path)
        route = match.route
        contract = route.contract

        params = _check_part("params", match.path_params, contract.params)
        query_data = _check_part("query", _query_dict(query, contract.query), contract.query)
        body_data = _check_part("body", body, contract.body, coerce=False)
        if request is not None:
            request = replace(request, path_params=dict(match.path_params))

        kwargs = build_handler_kwargs(
            route,
            params=params,
            query=query_data,
            body=body_data,
            db=db,
            request=request,
            providers=providers,
        )
        result = to_result(await invoke(route.handler, **kwargs))
    except Exception as exc:
        return error_response(exc, method, path, debug=debug)

    if isinstance(result, Err):
        return error_response(result.error, method, path, debug=debug)

    try:
        check_response(route, result)
    except ContractBreachError as exc:
        return error_response(exc, method, path, debug=debug)

    return Response(result.value, status=result.status, headers=result.headers)


def _query_dict(
    query: QueryParams | Mapping[str, Any] | None, schema: Schema | None
) -> dict[str, Any]:
    if query is None:
        return {}
    if isinstance(query, QueryParams):
        return query.to_dict(schema)
    return dict(query)


def _check_part(part: str, value: Any, schema: Schema | None, *, coerce: bool = True) -> Any:
    """Validate one inbound part. Parts without a schema pass unchanged."""
    if schema is None:
        return value
    result = validate(value, schema, coerce=coerce)
    if not result.ok:
        raise ValidationError(
            detail=f"Invalid request {part}",
            part=part,
            violations=result.violations,
        )
    return result.data


def check_response(route: RouteDefinition, result: Ok) -> None:
    """Raise ``ContractBreachError`` if *result* fails its declared schema.

    Statuses without a declared schema are not checked.
    """
    schema = route.contract.response_for(result.status)
    if schema is None:
        return
    checked = validate(result.value, schema)
    if not checked.ok:
        raise ContractBreachError(
            detail="Response failed its contract",
            route=route.describe(),
            response_status=result.status,
            violations=checked.violations,
        )


def build_handler_kwargs(
    route: RouteDefinition,
    *,
    params: Mapping[str, Any],
    query: Mapping[str, Any],
    body: Any,
    db: DataAccess | None,
    request: Request | None,
    providers: Mapping[type, Callable[..., Any]] | None = None,
) -> dict[str, Any]:
    """Inspect the handler signature and build its keyword arguments.

    Resolution order:
    1. ``request`` (by name or ``Request`` annotation)
    2. ``params``, ``query``, ``body``: the validated parts
    3. Path parameters by name
    4. ``db`` (by name or ``DataAccess`` annotation)
    5. Service providers by annotation (``app.provide()``)

    Parameters that resolve to nothing keep their defaults.
    """
    sig = inspect.signature(route.handler, eval_str=True)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        annotation = param.annotation
        if name == "request" or annotation is Request:
            kwargs[name] = request
        elif name == "params":
            kwargs[name] = params
        elif name == "query":
            kwargs[name] = query
        elif name == "body":
            kwargs[name] = body
        elif name in params:
            kwargs[name] = params[name]
        elif name == "db" or annotation is DataAccess:
            if db is None and param.default is inspect.Parameter.empty:
                msg = f"{route.describe()} needs a database but the app has none configured."
                raise ConfigurationError(msg)
            kwargs[name] = db
        elif (
            providers
            and annotation is not inspect.Parameter.empty
            and annotation in providers
        ):
            kwargs[name] = providers[annotation]()

    return kwargs
