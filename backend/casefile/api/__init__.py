from casefile.services.cases.errors import InvalidInputError


def int_field(data: dict, key: str, required: bool = True):
    """Read an integer id from a JSON body, rejecting missing or non-numeric values."""
    value = data.get(key)
    if value is None:
        if required:
            raise InvalidInputError(f'{key} is required', field=key)
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f'{key} must be an integer', field=key) from None
