__title__ = "httpjsonstream"
__description__ = "Stream HTTP response bodies straight into an incremental JSON parser."
__version__ = "0.1.0"
