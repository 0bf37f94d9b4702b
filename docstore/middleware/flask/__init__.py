from .factory import app_factory, bp_factory


__all__ = ["app_factory", "bp_factory"]
