from enum import StrEnum


class TicketStatus(StrEnum):
    ISSUED = 'issued'
    USED = 'used'
    VOID = 'void'
