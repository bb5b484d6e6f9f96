import inspect
import logging
import functools
from typing import Any, Callable, Mapping, Optional

from DictTools import is_structured, merged_copy
from Hookable import HookableFunction, bind_partial


logger = logging.getLogger(__name__)

# Name of the parameter through which an override receives its parent implementation.
SUPER_PARAM = '_super'

MEMBERS_ATTR = '__class_members__'
PARENT_MEMBERS_ATTR = '__parent_members__'

# Dunder attributes of a class statement that are copied by the decorator rather than used as members.
_CLASS_BODY_COPIED = ('__module__', '__qualname__', '__doc__')

_MISSING = object()


def is_method(value: Any) -> bool:
    """Callables become methods, except classes and static methods which stay plain values."""
    return callable(value) and not isinstance(value, (type, staticmethod))


def accepts_super(func: Callable) -> bool:
    """
    Tells whether an override asks for its parent implementation.

    An override opts in by declaring a `_super` parameter right after the receiver:

        def greet(self, _super, name):
            return _super(name) + '!'
    """
    try:
        params = list(inspect.signature(func).parameters.values())
    except (TypeError, ValueError):
        return False
    return len(params) >= 2 and params[1].name == SUPER_PARAM and \
        params[1].kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def _is_dunder(name: str) -> bool:
    return name.startswith('__') and name.endswith('__')


def _no_parent(name: str) -> Callable:
    def missing(*args, **kwargs):
        raise AttributeError(f'"{name}" has no parent implementation')
    return missing


def resolve_super(name: str, func: Callable, parent: Callable) -> Callable:
    """
    Builds the method that runs `func` with access to `parent`, the immediate parent implementation.

    The parent is captured once, here, and bound to the receiver on every call:
    `resolved(receiver, *args)` runs `func(receiver, parent_bound_to_receiver, *args)`.
    Nothing is stored on the receiver, so nested and failing calls leave no state behind.

    Args:
        name (str): The member name, used for diagnostics.
        func (Callable): The override. Its second parameter receives the parent.
        parent (Callable): The parent's member table entry, used as-is.

    Returns:
        Callable: A plain function usable as a method.
    """

    @functools.wraps(func)
    def resolved(receiver, *args, **kwargs):
        return func(receiver, bind_partial(parent, receiver), *args, **kwargs)

    resolved.__overrides__ = parent
    resolved.__member_name__ = name
    return resolved


def classify_member(name: str, parent_value: Any, value: Any) -> Any:
    """
    Decides what an override becomes in the new member table.

    - parent and override are methods and the override accepts `_super`: parent-delegating method.
    - override is a method: fresh hookable method.
    - parent and override are both mappings: override deep-merged into a copy of the parent value.
    - anything else, type mismatches included: the override value as-is.
    """
    if is_method(value):
        if accepts_super(value):
            if is_method(parent_value):
                logger.debug(f'Member "{name}": parent-delegating method')
                return resolve_super(name, value, parent_value)
            # Nothing to delegate to: calling `_super` raises.
            logger.debug(f'Member "{name}": hookable method without parent implementation')
            return HookableFunction(resolve_super(name, value, _no_parent(name)))
        logger.debug(f'Member "{name}": hookable method')
        return HookableFunction(value)

    if parent_value is not _MISSING and is_structured(parent_value) and is_structured(value):
        logger.debug(f'Member "{name}": merged structured value')
        return merged_copy(parent_value, value)

    logger.debug(f'Member "{name}": plain value')
    return value


def extend(base: type, overrides: Optional[Mapping[str, Any]] = None, name: Optional[str] = None) -> type:
    """
    Builds a subclass of `base` from a mapping of member overrides.

    The new class starts from a copy of the base's member table, then every override is
    classified by `classify_member`. No instance of `base` is created while building, so
    `init` never runs here. Instances of the result are initialized by their `init` member.

    Args:
        base (type): `ExtendableClass` or a class built from it.
        overrides (Mapping[str, Any]): Member name to value or callable. May be empty or None.
        name (str): Name of the new class. Defaults to the base name suffixed with 'Ext'.

    Returns:
        type: The new class. It carries its own hookable `extend`.
    """
    parent_members = getattr(base, MEMBERS_ATTR, {})
    members = dict(parent_members)
    class_name = name or f'{base.__name__}Ext'

    for member_name, value in (overrides or {}).items():
        members[member_name] = classify_member(member_name, parent_members.get(member_name, _MISSING), value)

    namespace = dict(members)
    namespace[MEMBERS_ATTR] = members
    namespace[PARENT_MEMBERS_ATTR] = parent_members
    namespace['extend'] = classmethod(HookableFunction(extend))
    namespace.setdefault('__module__', base.__module__)

    new_class = type(class_name, (base,), namespace)
    logger.debug(f'Class "{class_name}" built from "{base.__name__}" with {len(overrides or {})} override(s)')
    return new_class


def extends(base: type) -> Callable[[type], type]:
    """
    Class decorator using a class statement as the override mapping for `base.extend`.

        @extends(Class)
        class Widget:
            defaults = {'size': 1}

            def init(self, _super, element, options=None):
                _super(element, options)

    The decorated class body is only read; the returned class is the one built by `extend`.
    """

    def decorator(body: type) -> type:
        overrides = {key: value for key, value in vars(body).items() if not _is_dunder(key) or is_method(value)}
        new_class = base.extend(overrides, name=body.__name__)
        for key in _CLASS_BODY_COPIED:
            setattr(new_class, key, getattr(body, key))
        return new_class

    return decorator


class ExtendableClass:
    """
    Root of every class built by `extend`.

    Construction is split in two: `allocate()` creates an instance without initializing it,
    calling the class initializes the instance through its `init` member when one is defined.
    """

    __class_members__ = {}
    __parent_members__ = None

    def __init__(self, *args, **kwargs):
        init = getattr(self, 'init', None)
        if callable(init):
            init(*args, **kwargs)

    @classmethod
    def allocate(cls):
        return cls.__new__(cls)

    @classmethod
    def members(cls) -> Mapping[str, Any]:
        return dict(getattr(cls, MEMBERS_ATTR, {}))


ExtendableClass.extend = classmethod(HookableFunction(extend))
