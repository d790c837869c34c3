# plugins/instagram/__init__.py
"""
Instagram Plugin Package for Blip
=================================

This package connects a user's Instagram account through the Instagram
authorization-code flow and publishes composed posts to it through the
Graph API.

Authorization:
--------------
- InstagramOAuthAuthorizationPlugin: consent URL, code exchange, long-lived upgrade

Resource:
---------
- InstagramResourcePlugin: user id lookup, container creation, media_publish

Routes:
-------
- InstagramRoutes: /connect/instagram, /connect/instagram/callback,
  /status/instagram, /disconnect/instagram, /publish/instagram

The access token is kept only in the ``instagram_access_token`` cookie.
"""

from .auth import InstagramOAuthAuthorizationPlugin
from .resource import InstagramResourcePlugin
from .routes import InstagramRoutes

from plugins import register_authorization_plugin, register_resource_plugin, register_route_plugin

# Automatically register the plugins when this package is imported
register_authorization_plugin(InstagramOAuthAuthorizationPlugin)
register_resource_plugin(InstagramResourcePlugin)
register_route_plugin(InstagramRoutes)
