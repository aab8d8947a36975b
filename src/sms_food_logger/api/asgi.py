"""ASGI entrypoint for the SMS food logger API."""

from sms_food_logger.api.app import create_app
from sms_food_logger.containers import build_container

app = create_app(build_container())
