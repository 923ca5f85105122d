"""Built-in CLI sub-commands for ghactivity.

* :mod:`~ghactivity.commands.activity` -- ``activity`` and ``user`` lookups.
* :mod:`~ghactivity.commands.cache` -- inspect and clear cached responses.
* :mod:`~ghactivity.commands.config` -- view and modify global settings.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``cache`` and ``config``) or plain callback
functions registered directly on the root app (``activity``, ``user``).
"""
