import copy
import logging
from typing import Any, Tuple, Mapping, Type
from pydantic import BaseModel, ValidationError


logger = logging.getLogger(__name__)


def is_structured(value: Any) -> bool:
    """Structured values are the ones merged key by key instead of being replaced."""
    return isinstance(value, Mapping)


def deep_merge(target: dict, *sources: Mapping) -> dict:
    """
    Recursively merges each of `sources` into `target`, in order. The later source wins on conflicts.

    Nested mappings are merged key by key; every other value (lists included) replaces the
    existing one. Values taken from the sources are deep-copied so the result never shares
    mutable state with them.

    Args:
        target (dict): The dict to merge into. It is modified in place.
        *sources (Mapping): The mappings to merge. `None` entries are skipped.

    Returns:
        dict: `target` itself.

    Example usage:
    ```python
    deep_merge({'a': 1, 'b': {'x': 1}}, {'b': {'y': 2}, 'c': 3})
    # {'a': 1, 'b': {'x': 1, 'y': 2}, 'c': 3}
    ```
    """
    for source in sources:
        if source is None:
            continue
        for key, value in source.items():
            existing = target.get(key)
            if is_structured(existing) and is_structured(value):
                merged = dict(existing) if not isinstance(existing, dict) else existing
                target[key] = deep_merge(merged, value)
            else:
                target[key] = copy.deepcopy(value)
    return target


def merged_copy(base: Mapping, override: Mapping) -> dict:
    """Returns a new dict holding `override` merged over a deep copy of `base`. Neither input is modified."""
    return deep_merge(copy.deepcopy(dict(base)), override)


def check_sanitize_dict(data: dict, verifier: Type[BaseModel], exclude_unset: bool = True) -> Tuple[dict, str]:
    """
    Validates and sanitizes input dictionary using a Pydantic BaseModel schema.

    This function performs type conversion, data validation, and automatic cleanup
    via Pydantic's model_validate(). On success, returns the sanitized dict with
    excluded fields. On failure, returns structured error messages locating field-level issues.

    Key mechanisms:
    1. **Validation & Sanitization**:
       - Uses `verifier.model_validate(data)` for type coercion and validation.
       - Applies `model_dump(exclude_unset=True, exclude_none=True)` to:
         • Remove unset fields (exclude_unset)
         • Exclude None-valued fields (exclude_none)
       - Pass `exclude_unset=False` to keep fields filled from the model defaults.
    2. **Error Handling**:
       - Aggregates multiple validation errors into a single string.
       - Formats field paths using dot notation for nested errors (e.g., "layout.margin.top").
       - Logs detailed errors via `logger.error`.

    Args:
        data (dict): Raw input dictionary to validate.
        verifier (BaseModel): Pydantic model defining data schema and constraints.
        exclude_unset (bool): Drop the fields missing from `data`. Defaults to True.

    Returns:
        Tuple[dict, str]:
          - On success: (sanitized_dict, empty string)
          - On failure: (empty dict, semicolon-delimited error messages)
    """
    try:
        validated_data = verifier.model_validate(data).model_dump(exclude_unset=exclude_unset, exclude_none=True)
        return validated_data, ''
    except ValidationError as e:
        error_details = []
        for error in e.errors():
            # Field path such as: field.sub_field
            field_path = ".".join(map(str, error['loc']))
            error_msg = error['msg']
            error_type = error['type']
            error_details.append(f"Field [{field_path}]: {error_msg} (Type error: {error_type})")

        error_str = "; ".join(error_details)
        logger.error(f'Dict verification fail: {error_str}')
        return {}, error_str
