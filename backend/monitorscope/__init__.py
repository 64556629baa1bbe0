"""MonitorScope - API uptime monitoring and alerting."""

__version__ = "1.0.0"
