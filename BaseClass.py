import re
import copy
import logging

from ClassBuilder import ExtendableClass, extends
from DictTools import deep_merge, check_sanitize_dict
from ElementHandle import ElementHandle


logger = logging.getLogger(__name__)

UNSAFE_UID_CHARS = re.compile(r'[\[\]:]')


class InvalidOptions(ValueError):
    pass


def _own_options(instance) -> dict:
    # The class-level options mapping is shared; an instance writes to its own copy.
    if 'options' not in vars(instance):
        instance.options = copy.deepcopy(type(instance).options)
    return instance.options


def _uid(handle: ElementHandle) -> str:
    identifier = handle.attr('id')
    if identifier:
        return identifier

    identifier = handle.attr('name')
    if identifier:
        return identifier

    form_id = ''
    form = handle.form()
    if form is not None:
        form_id = form.get('id') or form.get('name') or ''
    return f'{form_id}{handle.index()}'


@extends(ExtendableClass)
class Class:
    """
    The base class: an element handle plus an options mapping merged over per-class defaults.

    Subclasses are built with `Class.extend({...})` or the `@extends(Class)` decorator. A subclass
    may set `options_schema` to a pydantic model; options are then validated on `set_options`.
    """

    element = None

    defaults = {}
    options = {}
    options_schema = None

    def init(self, element, options=None):
        """
        Args:
            element: An `ElementHandle`, an ElementTree element, or an identifier/markup string.
            options (dict): Optional options merged over `defaults`.
        """
        self.element = ElementHandle(element)
        if options:
            self.set_options(options)

    def set_options(self, options: dict):
        """Deep-merges `defaults` then `options` into the instance options."""
        merged = deep_merge(copy.deepcopy(_own_options(self)), self.defaults, options)
        if self.options_schema is not None:
            # Fields left out fall back to the schema defaults.
            merged, error = check_sanitize_dict(merged, self.options_schema, exclude_unset=False)
            if error:
                raise InvalidOptions(error)
        self.options = merged
        logger.debug(f'{type(self).__name__} options set: {sorted(merged)}')
        return self

    def set(self, name: str, value):
        _own_options(self)[name] = value
        return self

    def get(self, name: str, default=None):
        options = vars(self).get('options', type(self).options)
        return options.get(name, default)

    def get_element(self) -> ElementHandle:
        return self.element

    def get_raw_element(self):
        return self.element.raw

    def uid(self) -> str:
        """Identifier derived from the element: id, name, or owning form plus sibling index."""
        return UNSAFE_UID_CHARS.sub('', _uid(self.get_element()))
