"""Built-in CLI sub-command groups for specforge.

Each module exposes a :class:`typer.Typer` app that :func:`specforge.app.main`
registers on the root application:

* :mod:`~specforge.commands.spec` -- ``merge``, ``split``, ``analyze``,
  ``validate``.
* :mod:`~specforge.commands.inspect` -- read-only views of operations,
  resolved extensions, and projected types.
* :mod:`~specforge.commands.config` -- marker file management.
"""
