"""CSS transform pipeline: import inlining, custom properties, prefixing, minification."""

from uibundle.core.services.css.pipeline import CssContext, css_plugins, postcss

__all__ = ["CssContext", "css_plugins", "postcss"]
