import types
import logging
import functools
from enum import Enum
from typing import Callable, Any, List, Dict


logger = logging.getLogger(__name__)


class HookWhen(str, Enum):
    BEFORE = 'before'
    AFTER = 'after'


class InvalidHookType(ValueError):
    """Raised when a hook is registered with a type that is neither 'before' nor 'after'.

    Attributes:
        expected (List[str]): The accepted hook types.
        got (Any): The rejected value.
    """

    def __init__(self, expected: List[str], got: Any):
        super().__init__(f"Invalid hook type: expected one of {expected}, got {got!r}")
        self.expected = expected
        self.got = got


class InvalidBindTarget(TypeError):
    """Raised when partial application is attempted on something that is not callable."""

    def __init__(self, target: Any):
        super().__init__(f"bind_partial - what is trying to be bound is not callable: {target!r}")
        self.target = target


def bind_partial(func: Callable, receiver: Any, *preset_args, **preset_kwargs) -> Callable:
    """Binds a receiver and leading arguments to a callable.

    The returned callable invokes `func(receiver, *preset_args, *args)` when later called with `args`.
    Keyword arguments given later are merged over the preset ones.

    Raises:
        InvalidBindTarget: If `func` is not callable.
    """
    if not callable(func):
        raise InvalidBindTarget(func)
    return functools.partial(func, receiver, *preset_args, **preset_kwargs)


class HookableFunction:
    """Wrapper enabling "before" and "after" callbacks around a function.

    Hooks are kept in two FIFO lists. Every hook is invoked with exactly the arguments of the
    call, receiver included when the function is used as a method; the hook return values are
    discarded and the result of the wrapped function is returned.

    It supports both standalone functions and class methods via descriptor protocol. The hook
    registry belongs to the wrapper, so registering through one instance affects every instance
    of the class owning the wrapper.

    Usage:
        @HookableFunction
        def example(x):
            print(f"Original: {x}")

        example.add_hook('before', lambda x: print(f"Before: {x}"))
        example.add_hook(HookWhen.AFTER, lambda x: print(f"After: {x}"))

        example(10)
        # Output:
        #   Before: 10
        #   Original: 10
        #   After: 10
    """

    def __init__(self, func: Callable):
        self._func = func
        self._hooks: Dict[HookWhen, List[Callable]] = {
            HookWhen.BEFORE: [],
            HookWhen.AFTER: [],
        }
        functools.update_wrapper(self, func)

    def __call__(self, *args, **kwargs):
        for hook in list(self._hooks[HookWhen.BEFORE]):
            hook(*args, **kwargs)

        result = self._func(*args, **kwargs)

        for hook in list(self._hooks[HookWhen.AFTER]):
            hook(*args, **kwargs)

        return result

    def __get__(self, instance, owner):
        """Binds the hookable to a class instance (descriptor protocol).

        A fresh bound method is returned on each access, so concurrent receivers never share
        state. Attribute lookups on the bound method (e.g. `obj.method.add_hook`) fall through
        to this wrapper.
        """
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def __repr__(self):
        return f"<Hookable Function {getattr(self._func, '__name__', self._func)}>"

    @property
    def func(self) -> Callable:
        return self._func

    def hooks(self, when) -> List[Callable]:
        """Returns a copy of the hooks registered for `when`."""
        return list(self._hooks[self._check_when(when)])

    def add_hook(self, when, hook: Callable):
        """Registers a hook.

        Args:
            when (HookWhen | str): 'before' or 'after'.
            hook (Callable): Function called with the same arguments as the wrapped function.

        Raises:
            InvalidHookType: If `when` is not a recognized hook type.
        """
        self._hooks[self._check_when(when)].append(hook)

    def remove_hook(self, when, hook: Callable):
        """Deregisters the first registration of `hook` for `when`.

        Raises:
            InvalidHookType: If `when` is not a recognized hook type.
            ValueError: If `hook` is not registered.
        """
        self._hooks[self._check_when(when)].remove(hook)

    def bind_partial(self, receiver: Any, *preset_args, **preset_kwargs) -> Callable:
        """Returns a callable invoking this hookable with `receiver` and `preset_args` prepended."""
        return bind_partial(self, receiver, *preset_args, **preset_kwargs)

    @staticmethod
    def _check_when(when) -> HookWhen:
        try:
            return HookWhen(when)
        except ValueError:
            expected = [member.value for member in HookWhen]
            logger.error(f'Hook registration rejected: expected one of {expected}, got {when!r}')
            raise InvalidHookType(expected, when) from None


def make_hookable(func: Callable) -> HookableFunction:
    """Wraps `func` as a hookable function with an empty hook registry."""
    return HookableFunction(func)
