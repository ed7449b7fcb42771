"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.service.concert_ticketing.app.service.settlement_reconciler import (
    SettlementReconciler,
)
from src.service.concert_ticketing.app.service.ticket_issuer import TicketIssuer
from src.service.concert_ticketing.driven_adapter.payment_gateway.midtrans_payment_gateway import (
    MidtransPaymentGateway,
)
from src.service.concert_ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (sessions for background jobs; requests use get_unit_of_work)
    database = providers.Singleton(Database)

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth)

    # Outbound payment provider (tests override with an httpx.MockTransport-backed instance)
    payment_gateway = providers.Singleton(
        MidtransPaymentGateway.from_settings, settings=config_service
    )

    # Domain services (stateless, run inside the caller's unit of work)
    ticket_issuer = providers.Singleton(
        TicketIssuer, code_prefix=config_service.provided.TICKET_CODE_PREFIX
    )
    settlement_reconciler = providers.Singleton(SettlementReconciler, ticket_issuer=ticket_issuer)


container = Container()
