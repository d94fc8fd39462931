"""Plugin package initialiser.

Kept lightweight: concrete plugins (``logging``, ``pydantic``) self-register
when imported (see ``versionroute.__init__`` for eager imports).
"""

__all__: list[str] = []
