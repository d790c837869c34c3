# plugin_manager.py
"""
Plugin Manager for Blip
=======================

This module discovers, loads and hands out the platform plugins. It is a
thin facade over the registry in ``plugins``: plugin packages register
their classes on import, and the manager creates request-scoped instances
and collects the routers ``main.py`` mounts.

Usage:
------
    from plugin_manager import plugin_manager

    plugin_manager.discover_plugins()

    twitter_auth = plugin_manager.create_authorization_plugin("twitter", http_client=client)
    routers = plugin_manager.get_service_routers()
"""

import importlib
import logging
import os
from typing import Dict, List, Optional

from fastapi import APIRouter

from plugins import (
    AuthorizationPlugin,
    ResourcePlugin,
    RoutePlugin,
    get_authorization_plugin,
    get_resource_plugin,
    get_route_plugin,
    get_all_route_plugins
)

logger = logging.getLogger(__name__)

class PluginManager:
    """
    Manager for Blip platform plugins.

    The PluginManager is responsible for:
    - Discovering plugin packages in the plugins directory
    - Creating plugin instances with their request-scoped dependencies
    - Collecting plugin routers for the application
    """

    def __init__(self):
        """
        Initialize the plugin manager.

        Plugins are not loaded here; call discover_plugins to import them.
        """
        self._plugin_dir = os.path.join(os.path.dirname(__file__), "plugins")
        self._loaded_plugins = set()

    def discover_plugins(self):
        """
        Import every plugin package under the plugins directory.

        Each package registers its plugin classes when imported. Modules
        already loaded are skipped, so calling this more than once is harmless.
        """
        for item in sorted(os.listdir(self._plugin_dir)):
            if os.path.isdir(os.path.join(self._plugin_dir, item)) and not item.startswith('__'):
                module_name = f"plugins.{item}"
                if module_name not in self._loaded_plugins:
                    try:
                        importlib.import_module(module_name)
                        self._loaded_plugins.add(module_name)
                        logger.info(f"Discovered plugin: {module_name}")
                    except ImportError as e:
                        logger.error(f"Error loading plugin {module_name}: {e}")

    def create_authorization_plugin(self, service_name: str, **kwargs) -> Optional[AuthorizationPlugin]:
        """
        Create an instance of an authorization plugin.

        Args:
            service_name (str): The platform name, e.g. "twitter"
            **kwargs: Keyword arguments for the plugin constructor (http_client)

        Returns:
            Optional[AuthorizationPlugin]: A plugin instance, or None if unknown
        """
        plugin_class = get_authorization_plugin(service_name)
        if plugin_class:
            return plugin_class(**kwargs)
        return None

    def create_resource_plugin(self, service_name: str, **kwargs) -> Optional[ResourcePlugin]:
        """
        Create an instance of a resource plugin.

        Args:
            service_name (str): The platform name, e.g. "instagram"
            **kwargs: Keyword arguments for the plugin constructor (http_client)

        Returns:
            Optional[ResourcePlugin]: A plugin instance, or None if unknown
        """
        plugin_class = get_resource_plugin(service_name)
        if plugin_class:
            return plugin_class(**kwargs)
        return None

    def create_route_plugin(self, service_name: str, **kwargs) -> Optional[RoutePlugin]:
        """Create an instance of a route plugin, or None if unknown."""
        plugin_class = get_route_plugin(service_name)
        if plugin_class:
            return plugin_class(**kwargs)
        return None

    def get_platforms(self) -> List[str]:
        """Return the names of all platforms that expose routes."""
        return sorted(get_all_route_plugins().keys())

    def get_service_routers(self) -> Dict[str, APIRouter]:
        """
        Get the routers of all registered route plugins, keyed by platform.

        Example:
            >>> for service_name, router in plugin_manager.get_service_routers().items():
            ...     app.include_router(router)
        """
        routers = {}
        for service_name in get_all_route_plugins():
            plugin = self.create_route_plugin(service_name)
            routers[service_name] = plugin.get_router()
            logger.debug(f"Loaded routes for platform: {service_name}")
        return routers

# Create a singleton instance
plugin_manager = PluginManager()
