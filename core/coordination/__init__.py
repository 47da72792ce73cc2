from core.coordination.service import ConnectionState, ConnectionStatus, CoordinationService

__all__ = ["ConnectionState", "ConnectionStatus", "CoordinationService"]
