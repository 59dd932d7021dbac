"""defquery — versioned process definition query engine."""

__version__ = "0.1.0"
