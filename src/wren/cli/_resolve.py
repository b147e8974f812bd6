"""Import resolution: turns ``"module:attribute"`` strings into Mux instances.

Shared by ``wren run`` and ``wren routes``.
"""

import importlib

from wren.mux import Mux


def resolve_mux(import_string: str) -> Mux:
    """Resolve an import string to a wren Mux.

    Accepts ``"module:attribute"``. When the attribute is omitted it
    defaults to ``"mux"`` (``"myapp"`` resolves to ``myapp.mux``). A
    callable that is not a Mux is treated as a zero-argument factory.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the result is not a ``Mux``, or the factory fails.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "mux"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    # A Mux is callable too, so check the type before treating obj as a factory
    if callable(obj) and not isinstance(obj, Mux):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, Mux):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a wren.Mux instance"
        raise TypeError(msg)

    return obj
