"""Run output plugins over a resolved token table."""

from __future__ import annotations

import logging

from tokenloom.models.tokens import TokenTable
from tokenloom.plugin.base import BuildContext, Plugin, TransformContext
from tokenloom.plugin.transforms import TransformStore

logger = logging.getLogger("tokenloom.plugin")


def build(table: TokenTable, plugins: list[Plugin]) -> dict[str, str]:
    """Run every ``transform`` phase, then every ``build`` phase.

    Returns ``{filename: contents}`` for all files the plugins wrote.
    """
    store = TransformStore()
    for plugin in plugins:
        plugin.transform(TransformContext(tokens=table, store=store))
        logger.debug("plugin %s: %d transforms registered so far", plugin.name, len(store))

    outputs: dict[str, str] = {}
    for plugin in plugins:
        context = BuildContext(tokens=table, store=store, outputs=outputs, plugin_name=plugin.name)
        plugin.build(context)
    logger.debug("plugins wrote %d files", len(outputs))
    return outputs
