from __future__ import annotations

from typing import TypeVar

from flask import request
from pydantic import BaseModel, ValidationError as SchemaError

from dailyquest.errors import ValidationError

M = TypeVar("M", bound=BaseModel)


def parse_body(model: type[M]) -> M:
    """Validate the JSON body into ``model`` or raise a 400."""
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError()
    try:
        return model.model_validate(data)
    except SchemaError as e:
        raise ValidationError() from e
