from collections.abc import Awaitable
from functools import wraps
from inspect import iscoroutinefunction
import types
from typing import TYPE_CHECKING, Any, Callable, ParamSpec, TypeVar, cast, overload


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from eventbook.platform.config.core_setting import settings
from eventbook.platform.exception.exceptions import CustomBaseError
from eventbook.platform.logging.loguru_io_config import (
    ExtraField,
    call_depth_var,
    custom_logger,
)
from eventbook.platform.logging.loguru_io_utils import (
    build_call_target_func_path,
    get_chain_start_time,
    mask_sensitive,
    normalize_args_kwargs,
    reset_call_depth,
    should_mask_keyword,
    truncate_content,
)

_F = TypeVar('_F', bound=Callable[..., Any])

# _emit -> _enter/_leave/_fail -> wrapper -> caller
_CALLER_DEPTH = 3


class LoguruIO:
    """
    Decorator tracing one function.

    DEBUG: arguments on entry and the return value on exit (masked, truncated).
    ERROR: the exception, once, at the innermost traced frame. `CustomBaseError`
    is an expected outcome and is logged without a traceback.
    """

    def __init__(
        self, logger: 'LoguruLogger', *, reraise: bool = True, truncate: bool = True
    ) -> None:
        self._logger = logger
        self.reraise = reraise
        self.truncate = truncate
        self.extra: dict[str, Any] = {}

    def _emit(self, level: str, message: str, *, with_traceback: bool = False) -> None:
        self._logger.bind(**self.extra).opt(
            depth=_CALLER_DEPTH, exception=with_traceback
        ).log(level, message)

    def _render(self, data: Any) -> Any:
        if isinstance(data, dict):
            rendered: Any = {
                key: self._render(should_mask_keyword(key, value)) for key, value in data.items()
            }
        elif isinstance(data, list | tuple):
            rendered = type(data)(self._render(item) for item in data)
        else:
            rendered = mask_sensitive(data)
        return truncate_content(rendered) if self.truncate else rendered

    def _enter(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        call_depth_var.set(call_depth_var.get() + 1)
        self.extra[ExtraField.CHAIN_START_TIME] = get_chain_start_time()
        if settings.DEBUG:
            self._emit('DEBUG', f'args: {self._render(args)}, kwargs: {self._render(kwargs)}')

    def _leave(self, return_value: Any) -> Any:
        if settings.DEBUG:
            self._emit('DEBUG', f'return: {self._render(return_value)}')
        return return_value

    def _fail(self, e: Exception) -> None:
        if getattr(e, '_io_logged', False):
            return
        e._io_logged = True  # type: ignore[attr-defined]
        self._emit(
            'ERROR',
            f'{type(e).__name__}: {e}',
            with_traceback=not isinstance(e, CustomBaseError),
        )

    def _hide_from_traceback(self, wrapper: Callable[..., Any]) -> Callable[..., Any]:
        # loguru drops frames whose file is its own; the wrapper then vanishes from tracebacks
        wrapper.__code__ = wrapper.__code__.replace(  # type: ignore[attr-defined]
            co_filename=cast(types.FunctionType, self._logger.catch).__code__.co_filename
        )
        return wrapper

    def __call__(self, func: _F) -> _F:
        self.extra[ExtraField.CALL_TARGET] = build_call_target_func_path(func)

        if iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                self._enter(args, kwargs)
                try:
                    args, kwargs = normalize_args_kwargs(func, *args, **kwargs)
                    return self._leave(await cast(Awaitable[Any], func(*args, **kwargs)))
                except Exception as e:
                    self._fail(e)
                    if self.reraise:
                        raise
                    return None
                finally:
                    reset_call_depth()

            return cast(_F, self._hide_from_traceback(async_wrapper))

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            self._enter(args, kwargs)
            try:
                args, kwargs = normalize_args_kwargs(func, *args, **kwargs)
                return self._leave(func(*args, **kwargs))
            except Exception as e:
                self._fail(e)
                if self.reraise:
                    raise
                return None
            finally:
                reset_call_depth()

        return cast(_F, self._hide_from_traceback(sync_wrapper))


_P = ParamSpec('_P')
_T = TypeVar('_T')


class Logger:
    """`Logger.base` for plain messages, `@Logger.io` to trace a function."""

    base = custom_logger

    @overload
    @staticmethod
    def io(func: Callable[_P, _T]) -> Callable[_P, _T]: ...

    @overload
    @staticmethod
    def io(func: None = ..., *, reraise: bool = ..., truncate: bool = ...) -> LoguruIO: ...

    @staticmethod
    def io(
        func: Callable[_P, _T] | None = None, *, reraise: bool = True, truncate: bool = True
    ) -> Callable[_P, _T] | LoguruIO:
        decorator = LoguruIO(custom_logger, reraise=reraise, truncate=truncate)
        return decorator(func) if func else decorator
