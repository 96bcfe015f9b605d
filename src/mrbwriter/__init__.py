"""mrbwriter - compile mruby programs remotely and flash them to a board."""

__version__ = "0.1.0"
