"""ASGI entrypoint for the calorie calculator API."""

from calorie_calculator.api.app import create_app
from calorie_calculator.containers import build_container

app = create_app(build_container())
