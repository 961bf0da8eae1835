"""Chat bot that searches a BI server's dashboard catalog and delivers rendered dashboards."""

__version__ = "1.0.0"
