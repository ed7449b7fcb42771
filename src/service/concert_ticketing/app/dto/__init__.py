"""Concert Ticketing DTOs"""

from src.service.concert_ticketing.app.dto.maintenance_report import MaintenanceReport
from src.service.concert_ticketing.app.dto.settlement_ack import SettlementAck

__all__ = ['MaintenanceReport', 'SettlementAck']
