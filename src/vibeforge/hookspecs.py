"""Pluggy hook namespace and agent lifecycle hook specifications."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from vibeforge.agent.core import AgentResult
    from vibeforge.state import NetworkState

VIBEFORGE_HOOK_NAMESPACE = "vibeforge"
hookspec = pluggy.HookspecMarker(VIBEFORGE_HOOK_NAMESPACE)
hookimpl = pluggy.HookimplMarker(VIBEFORGE_HOOK_NAMESPACE)


class AgentHookSpecs:
    """Hook contract for agent lifecycle observers."""

    @hookspec
    def on_response(self, agent_name: str, result: AgentResult, state: NetworkState) -> None:
        """Observe one full agent response; the only place allowed to set the run summary."""


def create_plugin_manager(*plugins: object) -> pluggy.PluginManager:
    """Create a plugin manager with the agent hook specs and `plugins` registered."""
    manager = pluggy.PluginManager(VIBEFORGE_HOOK_NAMESPACE)
    manager.add_hookspecs(AgentHookSpecs)
    for plugin in plugins:
        manager.register(plugin)
    return manager
