"""tzboard.tools package

Developer utilities run as `python -m tzboard.tools.<name>`.

Keep this package's __init__ free of eager imports.
"""

__all__: list[str] = []
