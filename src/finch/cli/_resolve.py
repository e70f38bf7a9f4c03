"""Turns ``module:attr`` strings into App instances."""

import importlib

from finch.app import App


def resolve_app(target: str) -> App:
    """Import *target* and return the App it names.

    ``attr`` defaults to ``app``. Anything callable that is not itself an
    App is a factory and is called without arguments.
    """
    module_name, _, attr = target.partition(":")
    found = getattr(importlib.import_module(module_name), attr or "app")

    if callable(found) and not isinstance(found, App):
        try:
            found = found()
        except Exception as exc:
            raise TypeError(f"Factory {target!r} raised an error: {exc}") from exc

    if isinstance(found, App):
        return found
    raise TypeError(f"{target!r} resolved to {type(found).__name__}, not a finch.App instance")
