import functools
import inspect
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from wirebox.application import Injector
from wirebox.domain import IInjector, TypeName

REQUEST_STATE_ATTR = "injector"


def create_fastapi_dependency(
    injector: IInjector,
    name: TypeName,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Callable[[], Any]:
    """Create a FastAPI Depends() callable that provisions from the injector.

    Whether the endpoint receives a shared or a fresh instance follows the
    injector's bindings for ``name``.

    Args:
        injector: The injector to provision from.
        name: The class or class name to make when the dependency is called.
        overrides: Optional parameter values applied to every call.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> injector = Injector()
        >>> injector.alias(UserRepository, SqlUserRepository).share(UserRepository)
        >>>
        >>> get_user_repo = create_fastapi_dependency(injector, UserRepository)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo: UserRepository = Depends(get_user_repo)):
        ...     return await repo.get_all()
    """
    frozen_overrides: Dict[str, Any] = dict(overrides or {})

    def dependency() -> Any:
        """Provision the dependency from the injector."""
        return injector.make(name, frozen_overrides)

    return dependency


def create_request_dependency(name: TypeName) -> Callable[[Request], Any]:
    """Create a FastAPI dependency that provisions from the injector attached to the request.

    Requires the InjectorMiddleware to be installed.

    Args:
        name: The class or class name to make.

    Returns:
        A callable that provisions from ``request.state.injector``.

    Example:
        >>> app.add_middleware(InjectorMiddleware, injector=injector)
        >>>
        >>> get_request_context = create_request_dependency(RequestContext)
        >>>
        >>> @app.get("/process")
        >>> async def process_request(ctx: RequestContext = Depends(get_request_context)):
        ...     return {"request_id": ctx.request_id}
    """

    def request_dependency(request: Request) -> Any:
        """Provision from the request's injector."""
        injector: Optional[IInjector] = getattr(request.state, REQUEST_STATE_ATTR, None)
        if injector is None:
            raise RuntimeError("Request does not carry an injector. Did you forget to add InjectorMiddleware?")
        return injector.make(name)

    return request_dependency


class InjectorMiddleware(BaseHTTPMiddleware):
    """Middleware that exposes an injector on every request.

    The injector is accessible via ``request.state.injector`` while the
    request is being handled and removed afterwards.

    Attributes:
        injector: The injector handed to request handlers.

    Example:
        >>> injector = Injector()
        >>> injector.share(DatabaseConnection)
        >>>
        >>> app = FastAPI()
        >>> app.add_middleware(InjectorMiddleware, injector=injector)
    """

    def __init__(self, app: FastAPI, injector: IInjector):
        """Initialize the middleware with an injector.

        Args:
            app: The FastAPI/Starlette application.
            injector: The injector to expose on requests.
        """
        super().__init__(app)
        self.injector = injector

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Attach the injector to the request and execute the endpoint.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        setattr(request.state, REQUEST_STATE_ATTR, self.injector)

        try:
            response = await call_next(request)
            return response
        finally:
            delattr(request.state, REQUEST_STATE_ATTR)


def inject(injector: Optional[Injector] = None, **overrides: Any) -> Callable:
    """Decorator that provisions an endpoint's missing arguments through the injector.

    Arguments the caller supplies are passed through untouched; every other
    parameter is resolved by ``injector.execute`` with the decorator's
    overrides (same notation as ``Injector.make``).

    Args:
        injector: The injector to resolve from; a fresh ``Injector`` when omitted.
        **overrides: Parameter values for the decorated function.

    Returns:
        A decorator function.

    Example:
        >>> @app.get("/users")
        >>> @inject(injector)
        >>> async def list_users(user_service: UserService):
        ...     return await user_service.get_all()
    """
    active_injector = injector if injector is not None else Injector()

    def decorator(func: Callable) -> Callable:
        """Wrap the function with dependency injection logic."""
        signature = inspect.signature(func)

        def merged_overrides(args: tuple, kwargs: Dict[str, Any]) -> Dict[str, Any]:
            bound = signature.bind_partial(*args, **kwargs)
            merged = dict(overrides)
            for param_name, value in bound.arguments.items():
                merged[active_injector.config.raw_prefix + param_name] = value
            return merged

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                """Resolve dependencies and await the original function."""
                return await active_injector.execute(func, merged_overrides(args, kwargs))

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            """Resolve dependencies and call the original function."""
            return active_injector.execute(func, merged_overrides(args, kwargs))

        return wrapper

    return decorator
