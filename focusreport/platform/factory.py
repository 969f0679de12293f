"""Factory for creating the configured ActivityProvider."""

import importlib
from typing import Any

from focusreport.platform.base import ActivityProvider


def create_activity_provider(config: dict[str, Any]) -> ActivityProvider:
    """Instantiate the provider named by ``config["sampler"]["provider"]``.

    The value is a ``"package.module:ClassName"`` reference to an
    ActivityProvider subclass shipped outside FocusReport, for example a
    macOS workspace observer.  The module is imported lazily so that
    platform-specific dependencies are only loaded when sampling.

    Raises:
        ValueError: If no provider is configured or the reference is malformed.
        ImportError: If the module cannot be imported.
        TypeError: If the class is not an ActivityProvider.
    """
    ref = config.get("sampler", {}).get("provider", "")
    if not ref:
        raise ValueError(
            "No activity provider configured. Set sampler.provider in "
            "config.json to 'package.module:ClassName'."
        )
    module_name, sep, class_name = ref.partition(":")
    if not sep or not module_name or not class_name:
        raise ValueError(f"Invalid provider reference {ref!r}; expected 'module:ClassName'")

    module = importlib.import_module(module_name)
    try:
        provider_cls = getattr(module, class_name)
    except AttributeError:
        raise ImportError(f"{module_name!r} has no attribute {class_name!r}") from None
    if not (isinstance(provider_cls, type) and issubclass(provider_cls, ActivityProvider)):
        raise TypeError(f"{ref!r} is not an ActivityProvider subclass")
    return provider_cls()
