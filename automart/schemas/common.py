# automart/schemas/common.py
from .base import BaseSchema


class StatusMessageOut(BaseSchema):
    message: str
