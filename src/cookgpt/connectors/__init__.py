"""HTTP connectors for external services."""

from cookgpt.connectors.base import ConnectorError, ConnectorResponse, HTTPConnector

__all__ = ["ConnectorError", "ConnectorResponse", "HTTPConnector"]
