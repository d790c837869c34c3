# plugins/twitter/__init__.py
"""
Twitter Plugin Package for Blip
===============================

This package connects a user's Twitter/X account through OAuth 2.0 with PKCE
and publishes composed posts to it.

Authorization:
--------------
- TwitterOAuthAuthorizationPlugin: consent URL, callback validation, code exchange

Resource:
---------
- TwitterResourcePlugin: optional media upload, then tweet creation

Routes:
-------
- TwitterRoutes: /connect/twitter, /connect/twitter/callback, /status/twitter,
  /disconnect/twitter, /publish/twitter

The access token is kept only in the ``twitter_access_token`` cookie.
"""

from .auth import TwitterOAuthAuthorizationPlugin
from .resource import TwitterResourcePlugin
from .routes import TwitterRoutes

from plugins import register_authorization_plugin, register_resource_plugin, register_route_plugin

# Automatically register the plugins when this package is imported
register_authorization_plugin(TwitterOAuthAuthorizationPlugin)
register_resource_plugin(TwitterResourcePlugin)
register_route_plugin(TwitterRoutes)
